"""Test the wall-clock helpers used by slot validation."""

from datetime import date
from types import SimpleNamespace

import pytest

from swasthya.features.appointments.time_utils import (
    day_of_week,
    generate_slots,
    is_slot_during_leave,
    minutes_to_time,
    time_to_minutes,
)


def leave(start=None, end=None):
    return SimpleNamespace(start_time=start, end_time=end)


@pytest.mark.parametrize("value, minutes", [
    ("00:00", 0),
    ("09:30", 570),
    ("12:00", 720),
    ("23:59", 1439),
])
def test_time_to_minutes(value, minutes):
    assert time_to_minutes(value) == minutes
    assert minutes_to_time(minutes) == value


def test_full_day_leave_blocks_every_slot():
    """A leave without start or end time covers the whole day."""
    for start, end in [("00:00", "00:15"), ("09:00", "09:30"), ("23:30", "23:59")]:
        assert is_slot_during_leave(start, end, leave())
        assert is_slot_during_leave(start, end, leave(start="10:00"))
        assert is_slot_during_leave(start, end, leave(end="11:00"))


def test_partial_leave_overlap():
    """Slots overlapping 10:00-11:00 are blocked; touching slots are not."""
    window = leave("10:00", "11:00")

    test_cases = [
        ("09:00", "09:30", False),
        ("09:30", "10:00", False),  # ends as the leave starts
        ("09:45", "10:15", True),
        ("10:00", "10:30", True),
        ("10:30", "11:00", True),
        ("10:45", "11:15", True),
        ("11:00", "11:30", False),  # starts as the leave ends
        ("09:00", "12:00", True),   # covers the leave
    ]
    for start, end, blocked in test_cases:
        assert is_slot_during_leave(start, end, window) is blocked, f"{start}-{end}"


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2025, 6, 1)) == 0  # Sunday
    assert day_of_week(date(2025, 6, 2)) == 1  # Monday
    assert day_of_week(date(2025, 6, 7)) == 6  # Saturday


def test_generate_slots():
    assert generate_slots("09:00", "10:00", 20) == [
        ("09:00", "09:20"),
        ("09:20", "09:40"),
        ("09:40", "10:00"),
    ]


def test_generate_slots_drops_short_remainder():
    slots = generate_slots("09:00", "10:10", 30)
    assert slots == [("09:00", "09:30"), ("09:30", "10:00")]
    assert generate_slots("09:00", "09:10", 15) == []
