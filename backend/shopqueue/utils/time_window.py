"""
Clock and day-window helpers.

Stored timestamps are naive wall-clock values in the tenant's timezone.
These helpers convert between that representation and aware instants, and
compute the half-open local day and week windows used by aggregation.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Tuple
from zoneinfo import ZoneInfo

from shopqueue.domain.entities import DayWindow

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current instant, timezone-aware (UTC)."""
    return datetime.now(timezone.utc)


def to_local_naive(moment: datetime, tz: ZoneInfo) -> datetime:
    """Convert an aware instant to naive wall-clock time in ``tz``.

    Naive input is taken to be wall-clock time in ``tz`` already.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def attach_timezone(moment: datetime, tz: ZoneInfo) -> datetime:
    """Inverse of ``to_local_naive`` for serialisation."""
    if moment.tzinfo is not None:
        return moment.astimezone(tz)
    return moment.replace(tzinfo=tz)


def day_window(now: datetime, tz: ZoneInfo) -> DayWindow:
    """``[local midnight, next local midnight)`` containing ``now``."""
    local = to_local_naive(now, tz)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return DayWindow(start=start, end=start + timedelta(days=1), timezone=str(tz))


def week_bounds(now: datetime, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """Start of the current week (Sunday 00:00 local) and of the previous one."""
    local = to_local_naive(now, tz)
    days_since_sunday = (local.weekday() + 1) % 7
    this_week = (local - timedelta(days=days_since_sunday)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return this_week, this_week - timedelta(days=7)
