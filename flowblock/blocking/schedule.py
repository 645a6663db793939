"""
Weekly schedule gating.

No schedule (disabled, or no slots) means blocking is always in effect. With a
schedule, blocking only applies inside an enabled slot for the current weekday.
Times compare as zero-padded "HH:MM" strings, both ends inclusive.
"""

from __future__ import annotations

from datetime import datetime

from ..models import WeeklySchedule


def weekday(now: datetime) -> int:
    """0 = Sunday … 6 = Saturday."""
    return (now.weekday() + 1) % 7


def hhmm(now: datetime) -> str:
    return f"{now.hour:02d}:{now.minute:02d}"


def normalize_hhmm(value: str) -> str:
    """"9:5" → "09:05". Raises ValueError for anything that is not a clock time."""
    hours, _, minutes = value.strip().partition(":")
    h, m = int(hours), int(minutes)
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Not a valid HH:MM time: {value!r}")
    return f"{h:02d}:{m:02d}"


def is_active(schedule: WeeklySchedule, now: datetime) -> bool:
    if not schedule.enabled or not schedule.slots:
        return True

    day = weekday(now)
    current = hhmm(now)
    return any(
        slot.enabled and slot.day == day and slot.start_time <= current <= slot.end_time
        for slot in schedule.slots
    )
