"""
Calendar-day helpers shared by both lifecycles.

Every "is it today / before / after" decision goes through
``calendar_day`` so rentals and maintenance records truncate time the same
way (midnight of the local calendar day).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def calendar_day(value: date | datetime | str) -> date:
    """Truncate *value* to its calendar day.

    Aware datetimes are read in their own zone; ISO strings may carry a
    time part, which is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return date.fromisoformat(text[:10])
    raise TypeError(f"Cannot interpret {value!r} as a calendar day")


def make_clock(timezone: Optional[str] = None) -> Clock:
    """Return a clock reading "now" in *timezone* (server local time if unset)."""
    if not timezone:
        return datetime.now
    tz = ZoneInfo(timezone)
    return lambda: datetime.now(tz)


def today(clock: Clock) -> date:
    return calendar_day(clock())


def covers(start: date, end: date, day: date) -> bool:
    """Inclusive on both ends."""
    return calendar_day(start) <= calendar_day(day) <= calendar_day(end)
