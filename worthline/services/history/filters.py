# worthline/services/history/filters.py
"""
Granularity downsampling and date-range filtering of change points.

Granularities bucket each point by its UTC timestamp:
    full     - no bucketing, input returned unchanged
    hourly   - calendar hour
    daily    - calendar day
    weekly   - ISO week (Monday 00:00 UTC to Sunday 23:59:59 UTC)
    monthly  - calendar month
    yearly   - calendar year
    custom   - fixed windows of N milliseconds starting at the Unix epoch;
               N <= 0 returns the input unchanged

One point survives per bucket (the first or the last, per strategy) and
surviving points stay in ascending order.

Parsing accepts "none" as an alias of "full", and durations such as
"90m", "6h", "2d" or "1w" for custom buckets.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Union

from worthline.services.exceptions import InvalidGranularityError
from worthline.services.history.types import (
    ChangePoint,
    CoalesceStrategy,
    CustomGranularity,
    Granularity,
)
from worthline.utils.date_utils import utc_date

GranularitySpec = Union[Granularity, CustomGranularity]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)

_DURATION_PATTERN = re.compile(r"^(\d+)\s*(ms|s|m|h|d|w)$")
_UNIT_MILLISECONDS = {
    "ms": 1,
    "s": 1_000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
    "w": 604_800_000,
}


def parse_granularity(value: str) -> GranularitySpec:
    """
    Parse a granularity string.

    Raises:
        InvalidGranularityError: If the string names no known granularity

    Example:
        >>> parse_granularity("None")
        <Granularity.FULL: 'full'>
        >>> parse_granularity("6h")
        CustomGranularity(milliseconds=21600000)
    """
    text = value.strip().lower()
    if text == "none":
        return Granularity.FULL
    try:
        return Granularity(text)
    except ValueError:
        pass

    match = _DURATION_PATTERN.match(text)
    if match is None:
        raise InvalidGranularityError(value)
    amount, unit = match.groups()
    return CustomGranularity(milliseconds=int(amount) * _UNIT_MILLISECONDS[unit])


def _bucket_key(timestamp: datetime, granularity: GranularitySpec) -> tuple[int, ...]:
    utc = timestamp.astimezone(timezone.utc)

    if isinstance(granularity, CustomGranularity):
        return ((utc - EPOCH) // ONE_MILLISECOND // granularity.milliseconds,)
    if granularity == Granularity.HOURLY:
        return (utc.year, utc.month, utc.day, utc.hour)
    if granularity == Granularity.DAILY:
        return (utc.year, utc.month, utc.day)
    if granularity == Granularity.WEEKLY:
        monday = utc.date() - timedelta(days=utc.weekday())
        return (monday.toordinal(),)
    if granularity == Granularity.MONTHLY:
        return (utc.year, utc.month)
    if granularity == Granularity.YEARLY:
        return (utc.year,)
    raise ValueError(f"Granularity {granularity!r} has no buckets")


def filter_by_granularity(
        points: list[ChangePoint],
        granularity: GranularitySpec,
        strategy: CoalesceStrategy = CoalesceStrategy.LAST,
) -> list[ChangePoint]:
    """
    Keep one change point per granularity bucket.

    Args:
        points: Change points in ascending timestamp order
        granularity: Bucket size
        strategy: Keep the first or the last point of each bucket

    Returns:
        The surviving points, ascending; the input list itself for FULL
        and for custom widths <= 0
    """
    if granularity == Granularity.FULL:
        return points
    if isinstance(granularity, CustomGranularity) and granularity.milliseconds <= 0:
        return points

    buckets: dict[tuple[int, ...], ChangePoint] = {}
    for point in points:
        key = _bucket_key(point.timestamp, granularity)
        if strategy == CoalesceStrategy.FIRST:
            buckets.setdefault(key, point)
        else:
            buckets[key] = point

    return [buckets[key] for key in sorted(buckets)]


def filter_by_date_range(
        points: list[ChangePoint],
        start: date | None = None,
        end: date | None = None,
) -> list[ChangePoint]:
    """
    Keep points whose UTC date lies within [start, end].

    Either bound may be None (unbounded on that side).
    """
    if start is None and end is None:
        return list(points)

    kept = []
    for point in points:
        point_date = utc_date(point.timestamp)
        if start is not None and point_date < start:
            continue
        if end is not None and point_date > end:
            continue
        kept.append(point)
    return kept


__all__ = [
    "GranularitySpec",
    "parse_granularity",
    "filter_by_granularity",
    "filter_by_date_range",
]
