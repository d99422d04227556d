# Schedules Feature - Models

from typing import Optional
from beanie import Document
from pymongo import ASCENDING, IndexModel
from swasthya.shared.models import TimestampMixin


class DoctorSchedule(Document, TimestampMixin):
    """Recurring weekly availability of a doctor at a clinic.

    Dates are stored as ``YYYY-MM-DD`` strings and times as ``HH:MM`` strings,
    both of which order correctly as plain strings.
    """

    clinic_id: str
    doctor_id: str
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    start_time: str
    end_time: str
    slot_duration_minutes: int = 15
    max_patients_per_slot: int = 1
    is_active: bool = True
    effective_from: str
    effective_to: Optional[str] = None

    class Settings:
        name = "doctor_schedules"
        use_state_management = True
        indexes = [
            IndexModel(
                [("clinic_id", ASCENDING), ("doctor_id", ASCENDING), ("day_of_week", ASCENDING)],
                name="schedule_lookup",
            ),
        ]


class DoctorLeave(Document, TimestampMixin):
    """A date on which a doctor is unavailable, for the whole day or a window."""

    clinic_id: str
    doctor_id: str
    leave_date: str
    # Both None means a full-day leave
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: str

    @property
    def is_full_day(self) -> bool:
        return not self.start_time or not self.end_time

    class Settings:
        name = "doctor_leaves"
        use_state_management = True
        indexes = [
            IndexModel(
                [("clinic_id", ASCENDING), ("doctor_id", ASCENDING), ("leave_date", ASCENDING)],
                name="leave_lookup",
            ),
        ]
