from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..domain.models import Package, RangePair, Vulnerability
from ..domain.version import Semver

logger = logging.getLogger(__name__)


def evaluate_pair(pair: RangePair, version: Semver) -> bool:
    """True if ``version`` is inside the vulnerable interval and not inside its patch."""
    verdict = pair.vulnerable.contains(version)
    if pair.patched is not None and pair.patched.contains(version):
        verdict = False
    return verdict


def range_verdicts(vulnerability: Vulnerability, version: Semver) -> list[bool]:
    return [evaluate_pair(pair, version) for pair in vulnerability.ranges]


def consolidate(verdicts: Iterable[bool]) -> bool:
    """Collapse per-range verdicts into one decision; an empty sequence never matches."""
    return any(verdicts)


class VulnerabilityMatcher:
    def is_affected(self, vulnerability: Vulnerability, package: Package) -> bool:
        verdicts = range_verdicts(vulnerability, package.version)
        affected = consolidate(verdicts)
        logger.debug(f"{vulnerability.id} vs {package.name}@{package.version}: verdicts={verdicts} affected={affected}")
        return affected

    def match(self, vulnerabilities: Sequence[Vulnerability], package: Package) -> list[Vulnerability]:
        """Return the advisories affecting ``package``, in input order."""
        matched = [v for v in vulnerabilities if self.is_affected(v, package)]
        logger.info(f"{len(matched)}/{len(vulnerabilities)} advisories affect {package.name}@{package.version}")
        return matched
