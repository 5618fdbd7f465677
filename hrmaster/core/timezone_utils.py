"""
Timezone helpers for the organization clock.

Instants (check-in, check-out, created_at ...) are stored as naive UTC.
Calendar-day fields (attendance date, holidays, leave ranges) are stored as
naive midnight of the local calendar date.
"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from hrmaster.core.config import settings


@lru_cache(maxsize=None)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def org_tz() -> ZoneInfo:
    return _zone(settings.TIMEZONE)


def get_local_now() -> datetime:
    """
    Get current time in the organization timezone (timezone-aware)
    """
    return datetime.now(org_tz())


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a stored UTC datetime to the organization timezone

    Args:
        dt: UTC datetime (can be naive or aware)

    Returns:
        Local aware datetime or None
    """
    if dt is None:
        return None

    # naive values are stored UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(org_tz())


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize an instant to naive UTC for storage. Naive input is taken as local time."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=org_tz())
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def day_start(d: date) -> datetime:
    """Storage value of a calendar day."""
    if isinstance(d, datetime):
        d = d.date()
    return datetime.combine(d, time.min)


def local_day(now: datetime) -> datetime:
    """Storage value of the local calendar day containing `now`."""
    if now.tzinfo is not None:
        now = now.astimezone(org_tz())
    return day_start(now.date())


def month_bounds(d: date) -> Tuple[datetime, datetime]:
    """First and last calendar day (inclusive) of the month containing `d`."""
    first = date(d.year, d.month, 1)
    if d.month == 12:
        next_first = date(d.year + 1, 1, 1)
    else:
        next_first = date(d.year, d.month + 1, 1)
    return day_start(first), day_start(next_first - timedelta(days=1))


def previous_month_bounds(d: date) -> Tuple[datetime, datetime]:
    first = date(d.year, d.month, 1)
    return month_bounds(first - timedelta(days=1))


def week_bounds(d: date) -> Tuple[datetime, datetime]:
    """Monday..Sunday week containing `d`."""
    monday = d - timedelta(days=d.weekday())
    return day_start(monday), day_start(monday + timedelta(days=6))


def js_weekday(d: date) -> int:
    """Weekday as 0=Sunday ... 6=Saturday."""
    return (d.weekday() + 1) % 7


def parse_hhmm(value: str) -> Tuple[int, int]:
    hour, minute = value.split(":")
    return int(hour), int(minute)


def format_datetime_local(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a stored datetime as a local ISO string

    Example: "2025-12-09T15:07:11.545+05:30"
    """
    if dt is None:
        return None
    return to_local(dt).isoformat()


def format_time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    seconds = int((now - dt).total_seconds())
    intervals = [
        ("year", 31536000),
        ("month", 2592000),
        ("week", 604800),
        ("day", 86400),
        ("hour", 3600),
        ("minute", 60),
        ("second", 1),
    ]
    for label, size in intervals:
        count = seconds // size
        if count >= 1:
            return f"{count} {label}{'s' if count != 1 else ''} ago"
    return "just now"
