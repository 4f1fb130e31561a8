# worthline/utils/date_utils.py
"""
Date utility functions.

The engine works on UTC calendar dates. A valuation "as of" a date
includes everything recorded up to the last second of that date:

    end_of_day(2024-03-01)   -> 2024-03-01T23:59:59Z

Usage:
    from worthline.utils.date_utils import parse_date, end_of_day

    as_of = parse_date("2024-03-01", field="date")
    cutoff = end_of_day(as_of)
"""

from datetime import date, datetime, time, timezone

from worthline.services.exceptions import InvalidDateError

END_OF_DAY_TIME = time(23, 59, 59)


def parse_date(value: str, field: str | None = None) -> date:
    """
    Parse a strict YYYY-MM-DD calendar date.

    Raises:
        InvalidDateError: If the string is not a valid calendar date

    Example:
        >>> parse_date("2024-02-29")
        datetime.date(2024, 2, 29)
    """
    text = value.strip()
    # date.fromisoformat also accepts "20240229" and week dates
    if len(text) != 10 or text[4] != "-" or text[7] != "-":
        raise InvalidDateError(value, field=field)
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(value, field=field) from None


def parse_optional_date(value: str | None, field: str | None = None) -> date | None:
    """Parse a date string, passing None through unchanged."""
    if value is None:
        return None
    return parse_date(value, field=field)


def end_of_day(d: date) -> datetime:
    """
    Last whole second (23:59:59 UTC) of a calendar date.

    Used both as the balance cutoff for valuations and as the anchor
    timestamp of price and FX change points.
    """
    return datetime.combine(d, END_OF_DAY_TIME, tzinfo=timezone.utc)


def utc_date(instant: datetime) -> date:
    """UTC calendar date of an instant (naive datetimes are taken as UTC)."""
    if instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(timezone.utc).date()


def today_utc() -> date:
    """Current UTC calendar date."""
    return datetime.now(timezone.utc).date()
