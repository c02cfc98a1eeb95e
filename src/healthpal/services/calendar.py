"""Local calendar day helpers."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def local_day(value: date | datetime, tz: ZoneInfo) -> date:
    """Return the calendar day of a value in the given timezone.

    Naive datetimes are taken as local wall-clock time.
    """
    if isinstance(value, datetime):
        return as_local(value, tz).date()
    return value


def as_local(value: datetime, tz: ZoneInfo) -> datetime:
    """Return a datetime in the given timezone, attaching it to naive values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    """Return local midnight for a calendar day."""
    return datetime.combine(day, time.min, tzinfo=tz)


def day_window(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the [start, end) window covering a local calendar day."""
    start = start_of_day(day, tz)
    end = start_of_day(day + timedelta(days=1), tz)
    return start, end


def today(tz: ZoneInfo) -> date:
    """Return the current local calendar day."""
    return datetime.now(tz=tz).date()
