"""Domain exceptions for vuln_cage."""

from __future__ import annotations


class CageError(Exception):
    """Base class for every error raised by vuln_cage."""


class InvalidVersionError(CageError, ValueError):
    """Raised when a string is not a valid semantic version."""

    def __init__(self, version: str, message: str | None = None) -> None:
        self.version = version
        if message is None:
            message = f'"{version}" is not a valid version'
        super().__init__(message)


class InvalidRangeError(CageError, ValueError):
    """Raised when a VersionRange cannot be constructed."""


class EmptyRangeError(InvalidRangeError):
    def __init__(self) -> None:
        super().__init__("at least one bound of a version range must be set")


class AsymmetricEmptyError(InvalidRangeError):
    def __init__(self, bound: object) -> None:
        self.bound = bound
        super().__init__(f"if one bound is empty, the other must be a valid version (got {bound!r})")


class InvalidRangeBoundError(InvalidRangeError):
    def __init__(self, start: object, end: object) -> None:
        self.start = start
        self.end = end
        super().__init__(f"both bounds must be valid versions (got {start!r}, {end!r})")


class StartAfterEndError(InvalidRangeError):
    def __init__(self, start: object, end: object) -> None:
        self.start = start
        self.end = end
        super().__init__(f"start {start} is greater than end {end}")


class UnsatisfiableSinglePointError(InvalidRangeError):
    def __init__(self, version: object) -> None:
        self.version = version
        super().__init__(f"single-point range at {version} must include both bounds")


class MalformedExpressionError(CageError, ValueError):
    """Raised when a range expression does not match `operator? version`."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(f'"{expression}" is not a version range expression')


class UnknownOperatorError(CageError, ValueError):
    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f'the operator "{operator}" is not valid')


class MismatchedRangeLengthsError(CageError, ValueError):
    def __init__(self, vulnerable: int, patched: int) -> None:
        self.vulnerable = vulnerable
        self.patched = patched
        super().__init__(
            f"vulnerable and patched ranges must have the same length ({vulnerable} != {patched})"
        )


class NoSourcesError(CageError, ValueError):
    def __init__(self) -> None:
        super().__init__("at least one source needs to be added")


class CollaboratorError(CageError):
    """Failure raised by an I/O collaborator (feed adapter, timestamp parsing, auth).

    The scan propagates these unchanged.
    """


class SourceFetchError(CollaboratorError):
    """Raised when an advisory source cannot fetch or decode its feed."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class TimestampParseError(CollaboratorError, ValueError):
    def __init__(self, value: str, layout: str | None) -> None:
        self.value = value
        self.layout = layout
        expected = f'layout "{layout}"' if layout else "ISO-8601"
        super().__init__(f'"{value}" does not match {expected}')


class TokenVerificationError(CollaboratorError):
    """Raised when a GitHub token cannot be verified."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class EmptyTokenError(TokenVerificationError, ValueError):
    def __init__(self) -> None:
        super().__init__("token must not be an empty string")


class InvalidTokenError(TokenVerificationError):
    def __init__(self) -> None:
        super().__init__("the given token is not valid", status=401)
