from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from ...shared.utils import parse_timestamp
from .enums import Severity
from .exceptions import InvalidVersionError, MismatchedRangeLengthsError
from .version import Semver, VersionRange


@dataclass(frozen=True)
class RangePair:
    """A vulnerable interval and the interval of versions that fix it.

    ``patched=None`` means no fix has been published for this interval.
    """

    vulnerable: VersionRange
    patched: Optional[VersionRange] = None


@dataclass(frozen=True)
class Vulnerability:
    id: str
    published_at: datetime
    ranges: tuple[RangePair, ...] = field(default_factory=tuple)

    cve_id: Optional[str] = None
    cwes: tuple[str, ...] = field(default_factory=tuple)
    score: float = 0.0
    summary: Optional[str] = None

    def __post_init__(self) -> None:
        # Naive timestamps are UTC, so feeds can be ordered together
        if self.published_at.tzinfo is None:
            object.__setattr__(self, "published_at", self.published_at.replace(tzinfo=timezone.utc))

    @property
    def severity(self) -> Severity:
        return Severity.from_score(self.score)

    @property
    def vulnerable_ranges(self) -> tuple[VersionRange, ...]:
        return tuple(p.vulnerable for p in self.ranges)

    @property
    def patched_ranges(self) -> tuple[Optional[VersionRange], ...]:
        return tuple(p.patched for p in self.ranges)

    def with_updates(self, **kwargs) -> "Vulnerability":
        return replace(self, **kwargs)

    @classmethod
    def from_feed(
        cls,
        id: str,
        *,
        cve_id: Optional[str],
        cwes: Iterable[str],
        score: float,
        published: str,
        vulnerable_ranges: Sequence[VersionRange],
        patched_ranges: Sequence[Optional[VersionRange]],
        layout: Optional[str] = None,
        summary: Optional[str] = None,
    ) -> "Vulnerability":
        """Build a Vulnerability from feed data with positionally paired ranges.

        ``patched_ranges[i]`` is the fix for ``vulnerable_ranges[i]`` (``None``
        when there is none). ``published`` is parsed with the strptime
        ``layout``, or as ISO-8601 when no layout is given.

        Raises:
            MismatchedRangeLengthsError: the two range lists differ in length.
            TimestampParseError: ``published`` does not match the layout.
        """
        if len(vulnerable_ranges) != len(patched_ranges):
            raise MismatchedRangeLengthsError(len(vulnerable_ranges), len(patched_ranges))

        return cls(
            id=id,
            cve_id=cve_id or None,
            cwes=tuple(cwes),
            score=float(score or 0.0),
            published_at=parse_timestamp(published, layout),
            ranges=tuple(RangePair(v, p) for v, p in zip(vulnerable_ranges, patched_ranges)),
            summary=summary,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Package:
    """A specific version of a package, identified as ``vendor/product``."""

    vendor: str
    product: str
    version: Semver
    published_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.version is None or not self.version.is_valid():
            raise InvalidVersionError(
                str(self.version or ""), "semver should be non-empty and valid"
            )

    @property
    def name(self) -> str:
        return f"{self.vendor}/{self.product}"

    @classmethod
    def create(cls, vendor: str, product: str, version: str, published_at: Optional[datetime] = None) -> "Package":
        """Parse ``version`` (``v`` prefix optional) and build the Package."""
        semver = Semver.parse(version)
        if published_at is None:
            return cls(vendor=vendor, product=product, version=semver)
        return cls(vendor=vendor, product=product, version=semver, published_at=published_at)
