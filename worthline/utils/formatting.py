# worthline/utils/formatting.py
"""
Timestamp formatting for API output.

Two wire variants exist and both are load-bearing for output compatibility:

1. RFC 3339 with numeric offset (history points):
   "2024-01-15T10:00:00+00:00"

2. "Z" suffix (change-point timestamps, price_timestamp):
   "2024-01-15T10:00:00Z"

Both render the instant in UTC and share the same subsecond rule:
subseconds are omitted entirely when zero, otherwise written as exactly
nine digits (nanoseconds). Python datetimes carry microseconds, so the
last three digits are always zero:
   "2024-01-15T10:00:00.123000000Z"

All helpers are pure functions of the instant passed in.
"""

from datetime import datetime, timezone

RFC3339_OFFSET_SUFFIX = "+00:00"
ZULU_SUFFIX = "Z"


def _as_utc(instant: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _format_core(instant: datetime) -> str:
    utc = _as_utc(instant)
    core = utc.strftime("%Y-%m-%dT%H:%M:%S")
    if utc.microsecond:
        core += f".{utc.microsecond * 1000:09d}"
    return core


def format_rfc3339(instant: datetime) -> str:
    """
    Format an instant as RFC 3339 with a "+00:00" offset.

    Example:
        >>> format_rfc3339(datetime(2024, 1, 15, 10, tzinfo=timezone.utc))
        '2024-01-15T10:00:00+00:00'
    """
    return _format_core(instant) + RFC3339_OFFSET_SUFFIX


def format_utc_z(instant: datetime) -> str:
    """
    Format an instant with a "Z" suffix.

    Example:
        >>> format_utc_z(datetime(2024, 1, 15, 10, 0, 0, 123000, tzinfo=timezone.utc))
        '2024-01-15T10:00:00.123000000Z'
    """
    return _format_core(instant) + ZULU_SUFFIX


__all__ = [
    "format_rfc3339",
    "format_utc_z",
]
