from __future__ import annotations

import logging
from typing import Sequence

from ..domain.exceptions import NoSourcesError
from ..domain.models import Package, Vulnerability
from ..ports.source_port import AdvisorySourcePort
from ..services.matcher import VulnerabilityMatcher

logger = logging.getLogger(__name__)


class ScanPackageUseCase:
    def __init__(self, sources: Sequence[AdvisorySourcePort], matcher: VulnerabilityMatcher | None = None) -> None:
        self._sources = tuple(sources)
        self._matcher = matcher or VulnerabilityMatcher()

    def execute(self, package: Package) -> list[Vulnerability]:
        """Check ``package`` against every source, in order.

        Each source's advisories are ordered newest first before matching.
        Any source failure aborts the scan; no partial results are returned.
        """
        if not self._sources:
            raise NoSourcesError()

        logger.info(f"Scanning {package.name}@{package.version} against {len(self._sources)} source(s)")
        result: list[Vulnerability] = []
        for source in self._sources:
            source_name = getattr(source, "name", source.__class__.__name__)
            logger.debug(f"Fetching advisories from {source_name}")
            advisories = source.fetch(package)
            logger.debug(f"{source_name} returned {len(advisories)} advisories")

            ordered = sorted(advisories, key=lambda v: v.published_at, reverse=True)
            result.extend(self._matcher.match(ordered, package))

        logger.info(f"Found {len(result)} vulnerabilities for {package.name}@{package.version}")
        return result
