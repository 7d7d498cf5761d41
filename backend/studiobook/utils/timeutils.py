"""Time helpers.

Stored timestamps are naive UTC. Calendar days are computed in the
configured local time zone and converted back to naive UTC for queries.
"""
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple

from ..config import local_timezone


def utcnow() -> datetime:
    """Current server time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Normalise a datetime to a naive UTC instant.

    Naive input is read as wall-clock time in the local zone.
    """
    tz = tz or local_timezone()
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert a naive UTC instant to an aware local datetime."""
    tz = tz or local_timezone()
    return value.replace(tzinfo=timezone.utc).astimezone(tz)


def day_window(value: datetime, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Return the [start, end] of the local calendar day containing `value`.

    `value` is a naive UTC instant; both bounds come back as naive UTC.
    """
    tz = tz or local_timezone()
    local_day = to_local(value, tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day, time.max, tzinfo=tz)
    return to_utc_naive(start, tz), to_utc_naive(end, tz)


def days_ahead_window(now: datetime, days: int, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """From the start of today to the end of the day `days` ahead (local)."""
    tz = tz or local_timezone()
    start, _ = day_window(now, tz)
    _, end = day_window(now + timedelta(days=days), tz)
    return start, end
