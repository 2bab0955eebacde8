from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from ..core.domain.exceptions import TimestampParseError

_ISO_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: str, layout: Optional[str] = None) -> datetime:
    """Parse a feed timestamp into an aware datetime.

    Args:
        value: Timestamp text, e.g. "2025-07-25T17:51:51Z".
        layout: strptime layout. If None, ``value`` is parsed as ISO-8601.

    Returns:
        The parsed datetime. Values without a zone are taken as UTC.

    Raises:
        TimestampParseError: If ``value`` does not match.

    Examples:
        >>> parse_timestamp("2025-07-25T17:51:51Z", "%Y-%m-%dT%H:%M:%SZ")
        datetime.datetime(2025, 7, 25, 17, 51, 51, tzinfo=datetime.timezone.utc)
    """
    try:
        if layout is None:
            if not isinstance(value, str):
                raise TypeError(f"expected str, got {type(value).__name__}")
            parsed = _ISO_DATETIME.validate_python(value)
        else:
            parsed = datetime.strptime(value, layout)
    except (TypeError, ValueError, ValidationError) as e:
        raise TimestampParseError(str(value), layout) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")
