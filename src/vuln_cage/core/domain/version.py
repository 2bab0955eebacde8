from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property, total_ordering
from typing import Optional

from .exceptions import (
    AsymmetricEmptyError,
    EmptyRangeError,
    InvalidRangeBoundError,
    InvalidVersionError,
    MalformedExpressionError,
    StartAfterEndError,
    UnknownOperatorError,
    UnsatisfiableSinglePointError,
)


_NUM = r"0|[1-9][0-9]*"
_PRERELEASE_ID = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"

# Shorthand forms (v1, v1.2) may not carry a prerelease or build suffix.
SEMVER_RE = re.compile(
    rf"v(?P<major>{_NUM})"
    rf"(?:\.(?P<minor>{_NUM})"
    rf"(?:\.(?P<patch>{_NUM})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?"
    r")?)?"
)

RANGE_EXPRESSION_RE = re.compile(r"(?P<operator>[<>=!~^]+)?\s*(?P<version>[0-9A-Za-z.+\-]+)")
OPERATORS = frozenset({">", ">=", "<", "<=", "=", "=="})
RANGE_LIST_SEPARATOR = ", "


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _compare_prerelease(x: str, y: str) -> int:
    if x == y:
        return 0
    # A release ranks above any of its prereleases
    if not x:
        return 1
    if not y:
        return -1
    xs, ys = x.split("."), y.split(".")
    for a, b in zip(xs, ys):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return _cmp(int(a), int(b))
        if a_num:
            return -1
        if b_num:
            return 1
        return _cmp(a, b)
    return _cmp(len(xs), len(ys))


@total_ordering
@dataclass(frozen=True, eq=False)
class Semver:
    """A semantic version, always written with a leading ``v``.

    ``Semver(text)`` stores the text as-is; use :meth:`parse` to normalize
    and validate. Build metadata never takes part in ordering, equality or
    hashing. Invalid values sort below every valid one.
    """

    value: str

    @classmethod
    def normalize(cls, text: str) -> "Semver":
        """Add (or lower-case) the ``v`` prefix without validating."""
        if text.startswith("V"):
            return cls(f"v{text[1:]}")
        if not text.startswith("v"):
            return cls(f"v{text}")
        return cls(text)

    @classmethod
    def parse(cls, text: str) -> "Semver":
        semver = cls.normalize(text)
        if not semver.is_valid():
            raise InvalidVersionError(semver.value)
        return semver

    @classmethod
    def minimum(cls) -> "Semver":
        return cls("v0.0.0")

    @cached_property
    def _match(self) -> Optional[re.Match[str]]:
        return SEMVER_RE.fullmatch(self.value)

    def is_valid(self) -> bool:
        return self._match is not None

    @property
    def major(self) -> int:
        return int(self._group("major"))

    @property
    def minor(self) -> int:
        return int(self._group("minor") or 0)

    @property
    def patch(self) -> int:
        return int(self._group("patch") or 0)

    @property
    def prerelease(self) -> str:
        return self._group("prerelease") or ""

    @property
    def build(self) -> str:
        return self._group("build") or ""

    def _group(self, name: str) -> Optional[str]:
        if self._match is None:
            raise InvalidVersionError(self.value)
        return self._match.group(name)

    @staticmethod
    def compare(a: "Semver", b: "Semver") -> int:
        """Return -1, 0 or 1 following semantic-versioning precedence."""
        a_valid, b_valid = a.is_valid(), b.is_valid()
        if not a_valid or not b_valid:
            return _cmp(a_valid, b_valid)
        return (
            _cmp(a.major, b.major)
            or _cmp(a.minor, b.minor)
            or _cmp(a.patch, b.patch)
            or _compare_prerelease(a.prerelease, b.prerelease)
        )

    def before(self, other: "Semver") -> bool:
        return Semver.compare(self, other) == -1

    def after(self, other: "Semver") -> bool:
        return Semver.compare(self, other) == 1

    def equals(self, other: "Semver") -> bool:
        return Semver.compare(self, other) == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Semver):
            return NotImplemented
        return self.equals(other)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Semver):
            return NotImplemented
        return self.before(other)

    def __hash__(self) -> int:
        if not self.is_valid():
            return hash(None)
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        return self.value


MINIMUM_VERSION = Semver.minimum()


def _coerce_bound(bound: Semver | str | None) -> Semver | None:
    if bound is None or bound == "":
        return None
    if isinstance(bound, Semver):
        return bound
    return Semver.normalize(bound)


@dataclass(frozen=True)
class VersionRange:
    """An interval of versions with independent inclusive/exclusive bounds.

    ``start=None`` means no lower bound and is stored as ``v0.0.0``;
    ``end=None`` means no upper bound and stays ``None``. Bounds may also be
    passed as strings, which get their ``v`` prefix normalized but are not
    otherwise validated before the range checks run.
    """

    start: Semver | None
    end: Semver | None
    include_left: bool
    include_right: bool

    def __post_init__(self) -> None:
        start = _coerce_bound(self.start)
        end = _coerce_bound(self.end)

        if start is None and end is None:
            raise EmptyRangeError()
        if start is None and not end.is_valid():
            raise AsymmetricEmptyError(end)
        if end is None and not start.is_valid():
            raise AsymmetricEmptyError(start)

        if start is not None and end is not None:
            if not start.is_valid() or not end.is_valid():
                raise InvalidRangeBoundError(start, end)
            if Semver.compare(start, end) == 1:
                raise StartAfterEndError(start, end)

        if start is None:
            start = MINIMUM_VERSION

        if end is not None and start == end and not (self.include_left and self.include_right):
            raise UnsatisfiableSinglePointError(start)

        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        """Parse ``operator? version`` (e.g. ``">= 1.0"``, ``"<v2"``, ``"1.4.2"``)."""
        match = RANGE_EXPRESSION_RE.fullmatch(text)
        if match is None:
            raise MalformedExpressionError(text)

        operator = match.group("operator") or ""
        if operator and operator not in OPERATORS:
            raise UnknownOperatorError(operator)

        version = Semver.parse(match.group("version"))

        if operator == ">=":
            return cls(version, None, True, False)
        if operator == ">":
            return cls(version, None, False, False)
        if operator == "<=":
            return cls(MINIMUM_VERSION, version, True, True)
        if operator == "<":
            return cls(MINIMUM_VERSION, version, True, False)
        return cls(version, version, True, True)

    def contains(self, version: Semver) -> bool:
        if self.include_left:
            after_left = version >= self.start
        else:
            after_left = version > self.start

        if self.end is None:
            before_right = True
        elif self.include_right:
            before_right = version <= self.end
        else:
            before_right = version < self.end

        return after_left and before_right

    def __contains__(self, version: object) -> bool:
        if isinstance(version, str):
            version = Semver.parse(version)
        if not isinstance(version, Semver):
            raise TypeError(f"expected Semver or str, got {type(version).__name__}")
        return self.contains(version)

    def __str__(self) -> str:
        left = "[" if self.include_left else "("
        if self.end is None:
            return f"{left}{self.start}, ∞)"
        right = "]" if self.include_right else ")"
        return f"{left}{self.start}, {self.end}{right}"


def parse_range_list(text: str) -> list[VersionRange]:
    """Parse an advisory range expression such as ``">= 1.0, < 2.0"``.

    Two comma-separated operands are merged into a single interval taking
    the lower bound of the first and the upper bound of the second.
    """
    operands = text.split(RANGE_LIST_SEPARATOR)
    if len(operands) == 2:
        lower, upper = (VersionRange.parse(op) for op in operands)
        return [VersionRange(lower.start, upper.end, lower.include_left, upper.include_right)]
    return [VersionRange.parse(op) for op in operands]
