"""
Date / week keys used as rollover anchors.

The week key is a simplified scheme, not ISO-8601: days are counted from UTC
midnight of January 1 of the local year, so the key restarts with every calendar
year, does not line up with ISO year-boundary weeks, and its boundary moves with
the clock's UTC offset (east of UTC, early January 1 gives week 00).
"""
from datetime import date, datetime, timedelta, timezone


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def date_key(value: date | datetime) -> str:
    """YYYY-MM-DD (local calendar date)"""
    d = _as_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def days_since_year_start(value: date | datetime) -> int:
    """Whole days from UTC midnight Jan 1 of the local year. Naive values are taken as UTC."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        year_start = datetime(value.year, 1, 1, tzinfo=timezone.utc)
        return (value.astimezone(timezone.utc) - year_start) // timedelta(days=1)
    d = _as_date(value)
    return (d - date(d.year, 1, 1)).days


def week_number(value: date | datetime) -> int:
    return (days_since_year_start(value) + 7) // 7


def week_key(value: date | datetime) -> str:
    """YYYY-Www, e.g. 2024-W03."""
    return f"{value.year}-W{week_number(value):02d}"
