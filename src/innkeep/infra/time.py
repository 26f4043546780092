"""Time utilities for consistent timestamp and calendar-date handling.

Stay dates are calendar dates in the hotel's timezone. Instants coming
from clients are converted to that timezone before the time of day is
dropped, so a late-evening booking never lands on the next UTC day.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    """Return today's calendar date in the given timezone."""
    current = now if now is not None else utc_now()
    if current.tzinfo is None:
        return current.date()
    return current.astimezone(ZoneInfo(tz_name)).date()


def to_local_date(value: date | datetime, tz_name: str) -> date:
    """Normalize a date or instant to a calendar date in the given timezone.

    Naive datetimes are taken to already be local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(ZoneInfo(tz_name)).date()
    return value
