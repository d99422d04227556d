# Appointments Feature - Models

from typing import Optional, Dict, FrozenSet
from datetime import datetime, timedelta
from enum import Enum
from beanie import Document, Indexed
from pymongo import ASCENDING, IndexModel
from swasthya.config import settings
from swasthya.shared.models import TimestampMixin


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CHECKED_IN = "CHECKED_IN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class AppointmentType(str, Enum):
    NEW = "NEW"
    FOLLOW_UP = "FOLLOW_UP"


class AppointmentSource(str, Enum):
    ONLINE = "ONLINE"
    WALK_IN = "WALK_IN"


# Statuses that occupy a place in a slot
ACTIVE_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CHECKED_IN,
    AppointmentStatus.IN_PROGRESS,
})

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.CHECKED_IN: frozenset({
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.IN_PROGRESS: frozenset({
        AppointmentStatus.COMPLETED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class Appointment(Document, TimestampMixin):
    """One booking of a patient with a doctor in a slot."""

    clinic_id: str
    doctor_id: str
    patient_id: str
    appointment_date: str  # YYYY-MM-DD
    time_slot_start: str  # HH:MM
    time_slot_end: str  # HH:MM
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    type: AppointmentType = AppointmentType.NEW
    source: AppointmentSource = AppointmentSource.ONLINE
    token_number: int
    chief_complaint: Optional[str] = None
    family_member_id: Optional[str] = None

    @property
    def time_slot(self) -> str:
        return f"{self.time_slot_start}-{self.time_slot_end}"

    class Settings:
        name = "appointments"
        use_state_management = True
        indexes = [
            IndexModel(
                [
                    ("clinic_id", ASCENDING),
                    ("doctor_id", ASCENDING),
                    ("appointment_date", ASCENDING),
                    ("time_slot_start", ASCENDING),
                ],
                name="appointment_slot_lookup",
            ),
            IndexModel(
                [("clinic_id", ASCENDING), ("appointment_date", ASCENDING), ("token_number", ASCENDING)],
                unique=True,
                name="appointment_token_unique",
            ),
            IndexModel([("patient_id", ASCENDING)], name="appointment_patient"),
        ]


class SlotReservation(Document):
    """Number of active bookings held in one clinic/doctor/date/slot.

    Incremented with a conditional ``$inc`` when a booking is written and
    decremented when a booking leaves the active statuses, so the slot
    capacity holds under concurrent requests.
    """

    clinic_id: str
    doctor_id: str
    appointment_date: str
    time_slot: str
    booked: int = 0
    expires_at: Optional[datetime] = None

    class Settings:
        name = "slot_reservations"
        indexes = [
            IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0, name="slot_reservation_ttl"),
            IndexModel(
                [
                    ("clinic_id", ASCENDING),
                    ("doctor_id", ASCENDING),
                    ("appointment_date", ASCENDING),
                    ("time_slot", ASCENDING),
                ],
                unique=True,
                name="slot_reservation_unique",
            ),
        ]


class Counter(Document):
    """Named monotonically increasing sequence (patient numbers, daily tokens).

    Daily token counters carry ``expires_at``; patient-number counters never expire.
    """

    key: Indexed(str, unique=True)
    value: int = 0
    expires_at: Optional[datetime] = None

    class Settings:
        name = "counters"
        indexes = [
            IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0, name="counter_ttl"),
        ]


def retention_deadline(appointment_date: str) -> datetime:
    """When per-day records for ``appointment_date`` may be dropped."""
    day = datetime.strptime(appointment_date, "%Y-%m-%d")
    return day + timedelta(days=settings.DAILY_RECORD_RETENTION_DAYS)
