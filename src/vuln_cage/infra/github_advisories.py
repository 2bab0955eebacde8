from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from ..config.urls import get_github_advisory_url, get_github_repo_advisories_url
from ..core.domain.exceptions import SourceFetchError
from ..core.domain.models import Package, Vulnerability
from ..core.domain.version import Semver, VersionRange, parse_range_list
from ..core.ports.source_port import AdvisorySourcePort
from ..shared.severity import base_score_from_vector
from .http_client import HttpClient
from .schemas import GhAdvisoryIdentifier, GitHubAdvisory

logger = logging.getLogger(__name__)


DEFAULT_TIMESTAMP_LAYOUT = "%Y-%m-%dT%H:%M:%SZ"


class GitHubAdvisorySource(AdvisorySourcePort):
    """Advisories from the GitHub Advisory Database (https://github.com/advisories).

    The repository's security advisories are listed first, then each one is
    fetched from the global advisories endpoint.
    """

    name = "github"

    def __init__(
        self,
        http_client: HttpClient,
        token: Optional[str] = None,
        ecosystem: str = "actions",
        timestamp_layout: str = DEFAULT_TIMESTAMP_LAYOUT,
    ) -> None:
        self._http = http_client
        self._token = token
        self._ecosystem = ecosystem
        self._layout = timestamp_layout

    def fetch(self, package: Package) -> Sequence[Vulnerability]:
        ghsa_ids = self._list_ids(package)
        logger.info(f"GitHub lists {len(ghsa_ids)} advisories for {package.name}")

        result: list[Vulnerability] = []
        for ghsa_id in ghsa_ids:
            advisory = self._get_advisory(ghsa_id)
            if advisory is None:
                continue
            if advisory.withdrawn_at:
                logger.debug(f"Skipping withdrawn advisory {ghsa_id}")
                continue
            result.append(self._to_domain(advisory, package))
        return result

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _list_ids(self, package: Package) -> list[str]:
        url = get_github_repo_advisories_url(package.vendor, package.product)
        try:
            raw = self._http.get_json_list(url, headers=self._headers())
            return [GhAdvisoryIdentifier.model_validate(item).ghsa_id for item in raw]
        except httpx.HTTPError as e:
            raise SourceFetchError(self.name, f"listing advisories for {package.name} failed: {e}") from e
        except (TypeError, ValidationError) as e:
            raise SourceFetchError(self.name, f"unexpected advisory list for {package.name}: {e}") from e

    def _get_advisory(self, ghsa_id: str) -> Optional[GitHubAdvisory]:
        try:
            raw = self._http.get_json(get_github_advisory_url(ghsa_id), headers=self._headers())
            return GitHubAdvisory.model_validate(raw)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == httpx.codes.NOT_FOUND:
                logger.warning(f"Advisory {ghsa_id} not found, skipping")
                return None
            raise SourceFetchError(self.name, f"fetching {ghsa_id} failed: {e}") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(self.name, f"fetching {ghsa_id} failed: {e}") from e
        except (TypeError, ValidationError) as e:
            raise SourceFetchError(self.name, f"unexpected payload for {ghsa_id}: {e}") from e

    def _to_domain(self, advisory: GitHubAdvisory, package: Package) -> Vulnerability:
        vulnerable_ranges: list[VersionRange] = []
        patched_ranges: list[Optional[VersionRange]] = []

        for entry in advisory.vulnerabilities or []:
            if entry.package.ecosystem != self._ecosystem:
                continue
            if (entry.package.name or "").lower() != package.name.lower():
                continue

            vulnerable_ranges.extend(parse_range_list(entry.vulnerable_version_range or ""))

            if entry.first_patched_version:
                patch = Semver.parse(entry.first_patched_version)
                patched_ranges.append(VersionRange(patch, None, True, False))
            else:
                patched_ranges.append(None)

        score = 0.0
        if advisory.cvss is not None:
            score = advisory.cvss.score or base_score_from_vector(advisory.cvss.vector_string) or 0.0

        return Vulnerability.from_feed(
            advisory.ghsa_id,
            cve_id=advisory.cve_id,
            cwes=[cwe.cwe_id for cwe in advisory.cwes or []],
            score=score,
            published=advisory.published_at,
            vulnerable_ranges=vulnerable_ranges,
            patched_ranges=patched_ranges,
            layout=self._layout,
            summary=advisory.summary,
        )
