"""vuln_cage package: app/core/infra/shared.

Expose the library-friendly client and the version algebra at the package level.
"""

from .app.api import AppConfig, VulnCageClient
from .core.domain.models import Package, RangePair, Vulnerability
from .core.domain.version import Semver, VersionRange, parse_range_list

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "VulnCageClient",
    "AppConfig",
    "Package",
    "RangePair",
    "Semver",
    "VersionRange",
    "Vulnerability",
    "parse_range_list",
]
