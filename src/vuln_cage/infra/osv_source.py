from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from ..config.urls import OSV_QUERY_URL
from ..core.domain.exceptions import SourceFetchError
from ..core.domain.models import Package, Vulnerability
from ..core.domain.version import MINIMUM_VERSION, Semver, VersionRange
from ..core.ports.source_port import AdvisorySourcePort
from ..shared.severity import first_base_score
from .http_client import HttpClient
from .schemas import OsvEvent, OsvQueryResponse, OsvVulnerability

logger = logging.getLogger(__name__)


# Range types whose events are versions (GIT ranges hold commit hashes)
_VERSION_RANGE_TYPES = ("SEMVER", "ECOSYSTEM")


def _event_version(value: str) -> Semver:
    if value == "0":
        return MINIMUM_VERSION
    return Semver.parse(value)


def pairs_from_events(events: Sequence[OsvEvent]) -> list[tuple[VersionRange, Optional[VersionRange]]]:
    """Turn an OSV event timeline into (vulnerable, patched) interval pairs.

    - introduced: opens an interval
    - fixed: closes it (exclusive); versions from the fix on are patched
    - last_affected: closes it (inclusive); no patch is implied
    - limit: closes it (exclusive); no patch is implied
    An interval still open at the end of the timeline is unbounded above.
    A closing event before any ``introduced`` starts at ``v0.0.0``; one that
    follows an already closed interval is ignored. Empty intervals
    (``introduced`` equal to an exclusive close) yield no pair.
    """
    pairs: list[tuple[VersionRange, Optional[VersionRange]]] = []
    introduced: Optional[Semver] = None
    opened = False
    for event in events:
        if event.introduced is not None:
            introduced = _event_version(event.introduced)
            opened = True
            continue

        if event.fixed is not None:
            end, inclusive, patched = Semver.parse(event.fixed), False, True
        elif event.last_affected is not None:
            end, inclusive, patched = Semver.parse(event.last_affected), True, False
        elif event.limit is not None and event.limit != "*":
            end, inclusive, patched = Semver.parse(event.limit), False, False
        else:
            continue

        if introduced is None:
            if opened:
                logger.debug(f"Ignoring close event {end} with no open interval")
                continue
            introduced = MINIMUM_VERSION
        opened = True

        if inclusive or introduced != end:
            vulnerable = VersionRange(introduced, end, True, inclusive)
            pairs.append((vulnerable, VersionRange(end, None, True, False) if patched else None))
        introduced = None

    if introduced is not None:
        pairs.append((VersionRange(introduced, None, True, False), None))
    return pairs


class OsvAdvisorySource(AdvisorySourcePort):
    """Advisories from the OSV database (https://osv.dev)."""

    name = "osv"

    def __init__(self, http_client: HttpClient, ecosystem: str = "GitHub Actions") -> None:
        self._http = http_client
        self._ecosystem = ecosystem

    def fetch(self, package: Package) -> Sequence[Vulnerability]:
        result: list[Vulnerability] = []
        page_token: Optional[str] = None
        while True:
            response = self._query(package, page_token)
            for osv in response.vulns:
                if osv.withdrawn:
                    logger.debug(f"Skipping withdrawn advisory {osv.id}")
                    continue
                result.append(self._to_domain(osv, package))
            page_token = response.next_page_token
            if not page_token:
                break
        logger.info(f"OSV returned {len(result)} advisories for {package.name}")
        return result

    def _query(self, package: Package, page_token: Optional[str]) -> OsvQueryResponse:
        payload: dict = {"package": {"name": package.name, "ecosystem": self._ecosystem}}
        if page_token:
            payload["page_token"] = page_token
        try:
            return OsvQueryResponse.model_validate(self._http.post_json(OSV_QUERY_URL, payload))
        except httpx.HTTPError as e:
            raise SourceFetchError(self.name, f"query for {package.name} failed: {e}") from e
        except (TypeError, ValidationError) as e:
            raise SourceFetchError(self.name, f"unexpected response for {package.name}: {e}") from e

    def _to_domain(self, osv: OsvVulnerability, package: Package) -> Vulnerability:
        vulnerable_ranges: list[VersionRange] = []
        patched_ranges: list[Optional[VersionRange]] = []
        for affected in osv.affected or []:
            if affected.package.ecosystem != self._ecosystem:
                continue
            if affected.package.name.lower() != package.name.lower():
                continue
            for osv_range in affected.ranges or []:
                if osv_range.type.upper() not in _VERSION_RANGE_TYPES:
                    continue
                for vulnerable, patched in pairs_from_events(osv_range.events):
                    vulnerable_ranges.append(vulnerable)
                    patched_ranges.append(patched)

        cve_id = next((a for a in osv.aliases or [] if a.startswith("CVE-")), None)
        cwes = (osv.database_specific.cwe_ids or []) if osv.database_specific else []
        vectors = [str(s.score) for s in osv.severity or [] if s.type.upper().startswith("CVSS_V3")]

        return Vulnerability.from_feed(
            osv.id,
            cve_id=cve_id,
            cwes=cwes,
            score=first_base_score(vectors) or 0.0,
            published=osv.published or osv.modified or "",
            vulnerable_ranges=vulnerable_ranges,
            patched_ranges=patched_ranges,
            summary=osv.summary,
        )
