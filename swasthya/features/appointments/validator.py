"""Booking admission rules.

``parse_booking_request`` covers the request-shape checks; ``validate_slot``
walks the clinic, affiliation, schedule, leave, capacity and same-day gates in
order and raises on the first failure. The individual slot rules are plain
functions so the slot listing can reuse them without raising.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from beanie.operators import In, Or

from swasthya.config import settings
from swasthya.features.appointments.models import Appointment, AppointmentType, ACTIVE_STATUSES
from swasthya.features.appointments.schemas import CreateAppointmentRequest, WalkInRequest
from swasthya.features.appointments.time_utils import (
    day_of_week,
    is_slot_during_leave,
    time_to_minutes,
)
from swasthya.features.clinic.models import Clinic
from swasthya.features.clinic.service import ClinicService
from swasthya.features.doctors.models import Professional
from swasthya.features.doctors.service import DoctorService
from swasthya.features.schedules.models import DoctorLeave, DoctorSchedule
from swasthya.shared.exceptions import BadRequestException, SlotUnavailableException
from swasthya.shared.validators import (
    DATE_RE,
    TIME_SLOT_RE,
    is_valid_email,
    is_valid_phone,
    is_valid_time,
    normalize_phone,
    parse_iso_date,
)


NO_SCHEDULE = "Doctor has no schedule for this day"
OUTSIDE_SCHEDULE = "Time slot is outside doctor's schedule"
ON_LEAVE = "Doctor is on leave during this time"
FULLY_BOOKED = "This time slot is fully booked"
SLOT_PASSED = "This time slot has already passed"


@dataclass
class BookingRequest:
    """A booking request that passed the shape checks."""

    clinic_id: str
    doctor_id: str
    appointment_date: date
    slot_start: str
    slot_end: str
    patient_name: str
    patient_phone: str
    patient_email: Optional[str] = None
    chief_complaint: Optional[str] = None
    family_member_id: Optional[str] = None

    @property
    def date_str(self) -> str:
        return self.appointment_date.isoformat()

    @property
    def time_slot(self) -> str:
        return f"{self.slot_start}-{self.slot_end}"


@dataclass
class WalkIn:
    """A front-desk registration that passed the shape checks."""

    clinic_id: str
    doctor_id: str
    patient_name: str
    patient_phone: str
    type: AppointmentType = AppointmentType.NEW
    chief_complaint: Optional[str] = None
    existing_patient_id: Optional[str] = None


@dataclass
class SlotContext:
    """Records looked up while admitting a booking, reused by the writer."""

    clinic: Clinic
    doctor: Professional
    schedule: DoctorSchedule


def parse_booking_request(request: CreateAppointmentRequest, today: date) -> BookingRequest:
    """Check presence and format of every booking field.

    Raises:
        BadRequestException: with a field-specific message
    """
    if not request.clinic_id:
        raise BadRequestException("clinicId is required")
    if not request.doctor_id:
        raise BadRequestException("doctorId is required")
    if not request.date:
        raise BadRequestException("date is required (format: YYYY-MM-DD)")
    if not request.time_slot:
        raise BadRequestException("timeSlot is required (format: HH:MM-HH:MM)")
    if not request.patient_name or not request.patient_name.strip():
        raise BadRequestException("patientName is required")
    if not request.patient_phone or not request.patient_phone.strip():
        raise BadRequestException("patientPhone is required")

    phone = normalize_phone(request.patient_phone)
    if not is_valid_phone(phone):
        raise BadRequestException("Invalid phone number format. Must be 10 digits starting with 98 or 97.")

    email = request.patient_email.strip() if request.patient_email else None
    if email and not is_valid_email(email):
        raise BadRequestException("Invalid email format")

    if not DATE_RE.match(request.date):
        raise BadRequestException("Invalid date format. Use YYYY-MM-DD")
    appointment_date = parse_iso_date(request.date)
    if appointment_date is None:
        raise BadRequestException("Invalid date")
    if appointment_date < today:
        raise BadRequestException("Cannot book appointments for past dates")

    match = TIME_SLOT_RE.match(request.time_slot)
    if not match or not is_valid_time(match.group(1)) or not is_valid_time(match.group(2)):
        raise BadRequestException("Invalid timeSlot format. Use HH:MM-HH:MM")
    slot_start, slot_end = match.group(1), match.group(2)
    if time_to_minutes(slot_end) <= time_to_minutes(slot_start):
        raise BadRequestException("Invalid timeSlot. End time must be after start time")

    complaint = request.chief_complaint.strip() if request.chief_complaint else None

    return BookingRequest(
        clinic_id=request.clinic_id,
        doctor_id=request.doctor_id,
        appointment_date=appointment_date,
        slot_start=slot_start,
        slot_end=slot_end,
        patient_name=request.patient_name.strip(),
        patient_phone=phone,
        patient_email=email or None,
        chief_complaint=complaint or None,
        family_member_id=(request.family_member_id or "").strip() or None,
    )


def parse_walk_in_request(request: WalkInRequest) -> WalkIn:
    """Check presence and format of a walk-in registration."""
    if not request.clinic_id:
        raise BadRequestException("clinicId is required")
    if not request.doctor_id:
        raise BadRequestException("doctorId is required")
    if not request.patient_name or not request.patient_name.strip():
        raise BadRequestException("patientName is required")
    if not request.patient_phone or not request.patient_phone.strip():
        raise BadRequestException("patientPhone is required")

    phone = normalize_phone(request.patient_phone)
    if not is_valid_phone(phone):
        raise BadRequestException("Invalid phone number format. Must be 10 digits starting with 98 or 97.")

    try:
        appointment_type = AppointmentType(request.type) if request.type else AppointmentType.NEW
    except ValueError:
        raise BadRequestException(f"Invalid appointment type: {request.type}")

    complaint = request.chief_complaint.strip() if request.chief_complaint else None

    return WalkIn(
        clinic_id=request.clinic_id,
        doctor_id=request.doctor_id,
        patient_name=request.patient_name.strip(),
        patient_phone=phone,
        type=appointment_type,
        chief_complaint=complaint or None,
        existing_patient_id=request.existing_patient_id or None,
    )


# ============== Slot rules ==============

def is_within_schedule(slot_start: str, slot_end: str, schedule: DoctorSchedule) -> bool:
    return (
        time_to_minutes(slot_start) >= time_to_minutes(schedule.start_time)
        and time_to_minutes(slot_end) <= time_to_minutes(schedule.end_time)
    )


def find_blocking_leave(slot_start: str, slot_end: str, leaves: Iterable[DoctorLeave]) -> Optional[DoctorLeave]:
    for leave in leaves:
        if is_slot_during_leave(slot_start, slot_end, leave):
            return leave
    return None


def has_capacity(booked_count: int, schedule: DoctorSchedule) -> bool:
    return booked_count < schedule.max_patients_per_slot


def is_past_cutoff(appointment_date: date, slot_start: str, now: datetime) -> bool:
    """True when a same-day slot starts within the booking cutoff of ``now``."""
    if appointment_date != now.date():
        return False
    current_minutes = now.hour * 60 + now.minute
    return time_to_minutes(slot_start) <= current_minutes + settings.BOOKING_CUTOFF_MINUTES


# ============== Lookups ==============

async def find_schedule(clinic_id: str, doctor_id: str, appointment_date: date) -> Optional[DoctorSchedule]:
    """Active schedule for the date's weekday whose effective range covers the date."""
    date_str = appointment_date.isoformat()
    return await DoctorSchedule.find(
        DoctorSchedule.clinic_id == clinic_id,
        DoctorSchedule.doctor_id == doctor_id,
        DoctorSchedule.day_of_week == day_of_week(appointment_date),
        DoctorSchedule.is_active == True,
        DoctorSchedule.effective_from <= date_str,
        Or(DoctorSchedule.effective_to == None, DoctorSchedule.effective_to >= date_str),
    ).sort("-effective_from").first_or_none()


async def find_leaves(clinic_id: str, doctor_id: str, appointment_date: date) -> List[DoctorLeave]:
    return await DoctorLeave.find(
        DoctorLeave.clinic_id == clinic_id,
        DoctorLeave.doctor_id == doctor_id,
        DoctorLeave.leave_date == appointment_date.isoformat()
    ).to_list()


async def count_active_bookings(
    clinic_id: str,
    doctor_id: str,
    appointment_date: date,
    slot_start: str,
    slot_end: str,
) -> int:
    return await Appointment.find(
        Appointment.clinic_id == clinic_id,
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == appointment_date.isoformat(),
        Appointment.time_slot_start == slot_start,
        Appointment.time_slot_end == slot_end,
        In(Appointment.status, list(ACTIVE_STATUSES)),
    ).count()


async def require_bookable_doctor(clinic_id: str, doctor_id: str) -> Tuple[Clinic, Professional]:
    """Clinic must exist and be verified; doctor must be affiliated with it."""
    clinic = await ClinicService.get_clinic_or_404(clinic_id)
    if not clinic.verified:
        raise BadRequestException("Clinic is not verified")

    await DoctorService.require_affiliation(clinic_id, doctor_id)
    doctor = await DoctorService.get_professional(doctor_id)
    if not doctor:
        raise BadRequestException("Doctor is not affiliated with this clinic")

    return clinic, doctor


async def validate_slot(booking: BookingRequest, now: datetime) -> SlotContext:
    """Run the admission gates for a parsed booking.

    Raises:
        NotFoundException: unknown clinic
        BadRequestException: unverified clinic or unaffiliated doctor
        SlotUnavailableException: no schedule, outside schedule, leave,
            full slot or same-day cutoff
    """
    clinic, doctor = await require_bookable_doctor(booking.clinic_id, booking.doctor_id)

    schedule = await find_schedule(booking.clinic_id, booking.doctor_id, booking.appointment_date)
    if not schedule:
        raise SlotUnavailableException(NO_SCHEDULE)

    if not is_within_schedule(booking.slot_start, booking.slot_end, schedule):
        raise SlotUnavailableException(OUTSIDE_SCHEDULE)

    leaves = await find_leaves(booking.clinic_id, booking.doctor_id, booking.appointment_date)
    if find_blocking_leave(booking.slot_start, booking.slot_end, leaves):
        raise SlotUnavailableException(ON_LEAVE)

    booked = await count_active_bookings(
        booking.clinic_id,
        booking.doctor_id,
        booking.appointment_date,
        booking.slot_start,
        booking.slot_end,
    )
    if not has_capacity(booked, schedule):
        raise SlotUnavailableException(FULLY_BOOKED)

    if is_past_cutoff(booking.appointment_date, booking.slot_start, now):
        raise SlotUnavailableException(SLOT_PASSED)

    return SlotContext(clinic=clinic, doctor=doctor, schedule=schedule)
