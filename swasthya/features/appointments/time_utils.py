"""Wall-clock helpers for slot arithmetic.

Times are local ``HH:MM`` strings and are compared as minutes since midnight.
No timezone conversion happens here; ``local_now`` is the only place that
decides which wall clock "now" refers to.
"""

from datetime import date, datetime
from typing import List, Tuple
from zoneinfo import ZoneInfo

from swasthya.config import settings


def time_to_minutes(time: str) -> int:
    """Convert ``"HH:MM"`` to minutes since midnight."""
    hours, minutes = time.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to ``"HH:MM"``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_slot_during_leave(slot_start: str, slot_end: str, leave) -> bool:
    """True when the slot overlaps the leave.

    ``leave`` is anything with ``start_time``/``end_time``; a leave without
    either covers the whole day.
    """
    if not leave.start_time or not leave.end_time:
        return True

    return (
        time_to_minutes(slot_start) < time_to_minutes(leave.end_time)
        and time_to_minutes(slot_end) > time_to_minutes(leave.start_time)
    )


def day_of_week(day: date) -> int:
    """Day index with 0 = Sunday, 6 = Saturday."""
    return (day.weekday() + 1) % 7


def generate_slots(start_time: str, end_time: str, duration_minutes: int) -> List[Tuple[str, str]]:
    """Split ``[start_time, end_time]`` into back-to-back slots of ``duration_minutes``.

    A trailing remainder shorter than one slot is dropped.
    """
    slots = []
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    current = start
    while current + duration_minutes <= end:
        slots.append((minutes_to_time(current), minutes_to_time(current + duration_minutes)))
        current += duration_minutes
    return slots


def local_now() -> datetime:
    """Current naive wall-clock time in the configured timezone."""
    if settings.TIMEZONE:
        return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)
    return datetime.now()
