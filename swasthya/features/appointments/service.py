# Appointments Feature - Service

import math
from collections import Counter
from datetime import datetime
from typing import Optional, List, Dict
from beanie import PydanticObjectId
from beanie.operators import In, Or
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError
from swasthya.features.appointments.models import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    AppointmentSource,
    SlotReservation,
    ACTIVE_STATUSES,
    can_transition,
    retention_deadline,
)
from swasthya.features.appointments.schemas import (
    CreateAppointmentRequest,
    BookingResponse,
    SlotInfo,
    SlotDoctor,
    SlotClinic,
    SlotSchedule,
    AvailableSlotsResponse,
    AppointmentStatusResponse,
    QueueEntry,
    QueueResponse,
    WalkInRequest,
    WalkInResponse,
    AppointmentDoctor,
    AppointmentClinic,
    AppointmentFamilyMember,
    MyAppointment,
    MyAppointmentsResponse,
    Pagination,
)
from swasthya.features.appointments.identifiers import generate_token_number
from swasthya.features.appointments.time_utils import day_of_week, generate_slots, local_now, minutes_to_time
from swasthya.features.appointments.validator import (
    FULLY_BOOKED,
    NO_SCHEDULE,
    BookingRequest,
    find_blocking_leave,
    find_leaves,
    find_schedule,
    has_capacity,
    is_past_cutoff,
    parse_booking_request,
    parse_walk_in_request,
    require_bookable_doctor,
    validate_slot,
)
from swasthya.features.auth.models import User
from swasthya.features.clinic.models import Clinic
from swasthya.features.doctors.models import Professional
from swasthya.features.doctors.service import DoctorService
from swasthya.features.family.models import FamilyMember
from swasthya.features.family.service import FamilyService
from swasthya.features.patients.models import Patient
from swasthya.features.patients.service import PatientService
from swasthya.config import settings
from swasthya.core.email import send_appointment_confirmation_email
from swasthya.core.logging import logger
from swasthya.shared.exceptions import (
    BadRequestException,
    CredentialsException,
    ForbiddenException,
    NotFoundException,
    SlotUnavailableException,
)
from swasthya.shared.validators import parse_iso_date


UPCOMING = "upcoming"
PAST = "past"


# ============== Slot reservations ==============

async def reserve_slot(booking: BookingRequest, capacity: int) -> None:
    """Take one place in the slot, failing when ``capacity`` places are taken.

    The conditional upsert either increments an existing reservation that still
    has room or creates a new one. When the reservation is full the filter
    misses, the upsert collides with the unique index and the slot is refused.
    """
    collection = SlotReservation.get_motor_collection()
    try:
        await collection.find_one_and_update(
            {
                "clinic_id": booking.clinic_id,
                "doctor_id": booking.doctor_id,
                "appointment_date": booking.date_str,
                "time_slot": booking.time_slot,
                "booked": {"$lt": capacity},
            },
            {
                "$inc": {"booked": 1},
                "$setOnInsert": {"expires_at": retention_deadline(booking.date_str)},
            },
            upsert=True,
        )
    except DuplicateKeyError:
        logger.info(f"Slot {booking.time_slot} on {booking.date_str} filled concurrently for doctor {booking.doctor_id}")
        raise SlotUnavailableException(FULLY_BOOKED)


async def release_slot(clinic_id: str, doctor_id: str, appointment_date: str, time_slot: str) -> None:
    """Give back one place in the slot."""
    collection = SlotReservation.get_motor_collection()
    await collection.update_one(
        {
            "clinic_id": clinic_id,
            "doctor_id": doctor_id,
            "appointment_date": appointment_date,
            "time_slot": time_slot,
            "booked": {"$gt": 0},
        },
        {"$inc": {"booked": -1}},
    )


async def resolve_family_member(member_id: Optional[str], user: Optional[User]) -> Optional[FamilyMember]:
    """The family member a booking is made for, owned by the signed-in user."""
    if not member_id:
        return None
    if user is None:
        raise CredentialsException("Authentication required to book for a family member")
    return await FamilyService.get_member(member_id, str(user.id))


# Walk-in slots are clamped to the end of the day
LAST_MINUTE_OF_DAY = 23 * 60 + 59


class AppointmentService:
    """Booking, clinic queue and appointment listings."""

    @staticmethod
    async def book_appointment(
        request: CreateAppointmentRequest,
        now: Optional[datetime] = None,
        user: Optional[User] = None
    ) -> BookingResponse:
        """
        Validate and write a public booking.

        Args:
            request: Booking payload
            now: Local wall-clock time used for the past-date and same-day checks
            user: Signed-in user, required only when booking for a family member

        Returns:
            BookingResponse: Token and display details for the confirmation page
        """
        now = now or local_now()
        booking = parse_booking_request(request, now.date())
        context = await validate_slot(booking, now)
        family_member = await resolve_family_member(booking.family_member_id, user)

        await reserve_slot(booking, context.schedule.max_patients_per_slot)
        try:
            patient = await PatientService.upsert_patient(
                booking.clinic_id,
                booking.patient_name,
                booking.patient_phone,
                booking.patient_email,
            )
            token_number = await generate_token_number(booking.clinic_id, booking.date_str)

            appointment = Appointment(
                clinic_id=booking.clinic_id,
                doctor_id=booking.doctor_id,
                patient_id=str(patient.id),
                appointment_date=booking.date_str,
                time_slot_start=booking.slot_start,
                time_slot_end=booking.slot_end,
                status=AppointmentStatus.SCHEDULED,
                type=AppointmentType.NEW,
                source=AppointmentSource.ONLINE,
                token_number=token_number,
                chief_complaint=booking.chief_complaint,
                family_member_id=str(family_member.id) if family_member else None,
            )
            await appointment.insert()
        except Exception:
            await release_slot(booking.clinic_id, booking.doctor_id, booking.date_str, booking.time_slot)
            raise

        logger.info(
            f"Booked appointment {appointment.id}: token {token_number} at clinic {booking.clinic_id} "
            f"on {booking.date_str} {booking.time_slot}"
        )

        clinic, doctor = context.clinic, context.doctor
        if booking.patient_email:
            try:
                await send_appointment_confirmation_email(
                    email=booking.patient_email,
                    patient_name=booking.patient_name,
                    token_number=token_number,
                    date=booking.date_str,
                    time_slot=booking.time_slot,
                    doctor_name=doctor.full_name,
                    clinic_name=clinic.name,
                    clinic_address=clinic.address,
                )
            except Exception as e:
                logger.error(f"Failed to send confirmation for appointment {appointment.id}: {e}")

        return BookingResponse(
            appointment_id=str(appointment.id),
            token_number=token_number,
            date=booking.date_str,
            time_slot=booking.time_slot,
            doctor_name=doctor.full_name,
            doctor_type=doctor.type.value,
            clinic_name=clinic.name,
            clinic_address=clinic.address,
            clinic_phone=clinic.phone,
            patient_name=patient.full_name,
            patient_phone=patient.phone,
            family_member_name=family_member.name if family_member else None,
        )

    @staticmethod
    async def get_available_slots(
        clinic_id: str,
        doctor_id: Optional[str],
        date_str: Optional[str],
        now: Optional[datetime] = None
    ) -> AvailableSlotsResponse:
        """List a doctor's slots on a date with availability, using the booking rules."""
        if not doctor_id:
            raise BadRequestException("doctor_id query parameter is required")
        if not date_str:
            raise BadRequestException("date query parameter is required (format: YYYY-MM-DD)")

        requested = parse_iso_date(date_str)
        if requested is None:
            raise BadRequestException("Invalid date format. Use YYYY-MM-DD")

        now = now or local_now()
        if requested < now.date():
            raise BadRequestException("Cannot get slots for past dates")

        clinic, doctor = await require_bookable_doctor(clinic_id, doctor_id)
        slot_doctor = SlotDoctor(id=str(doctor.id), name=doctor.full_name, type=doctor.type.value)
        weekday = day_of_week(requested)

        schedule = await find_schedule(clinic_id, doctor_id, requested)
        if not schedule:
            return AvailableSlotsResponse(
                slots=[],
                doctor=slot_doctor,
                date=requested.isoformat(),
                day_of_week=weekday,
                message=NO_SCHEDULE,
            )

        leaves = await find_leaves(clinic_id, doctor_id, requested)
        booked = await Appointment.find(
            Appointment.clinic_id == clinic_id,
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == requested.isoformat(),
            In(Appointment.status, list(ACTIVE_STATUSES)),
        ).to_list()
        counts = Counter((a.time_slot_start, a.time_slot_end) for a in booked)

        slots = []
        for start, end in generate_slots(schedule.start_time, schedule.end_time, schedule.slot_duration_minutes):
            booked_count = counts[(start, end)]
            available = (
                find_blocking_leave(start, end, leaves) is None
                and has_capacity(booked_count, schedule)
                and not is_past_cutoff(requested, start, now)
            )
            slots.append(SlotInfo(
                start=start,
                end=end,
                available=available,
                booked_count=booked_count,
                max_patients=schedule.max_patients_per_slot,
            ))

        return AvailableSlotsResponse(
            slots=slots,
            doctor=slot_doctor,
            clinic=SlotClinic(id=str(clinic.id), name=clinic.name),
            date=requested.isoformat(),
            day_of_week=weekday,
            schedule=SlotSchedule(
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                slot_duration=schedule.slot_duration_minutes,
            ),
        )

    @staticmethod
    async def get_appointment(appointment_id: str) -> Appointment:
        try:
            appointment = await Appointment.get(PydanticObjectId(appointment_id))
        except (InvalidId, TypeError):
            appointment = None

        if not appointment:
            raise NotFoundException("Appointment not found")
        return appointment

    @staticmethod
    async def update_status(clinic_id: str, appointment_id: str, status: str) -> AppointmentStatusResponse:
        """
        Move an appointment through its lifecycle.

        Raises:
            BadRequestException: Unknown status or transition not allowed
            NotFoundException: Unknown appointment
            ForbiddenException: Appointment belongs to another clinic
        """
        try:
            target = AppointmentStatus(status)
        except ValueError:
            raise BadRequestException(f"Invalid status: {status}")

        appointment = await AppointmentService.get_appointment(appointment_id)
        if appointment.clinic_id != clinic_id:
            raise ForbiddenException("Appointment belongs to another clinic")

        previous = appointment.status
        if not can_transition(previous, target):
            raise BadRequestException(f"Cannot change status from {previous.value} to {target.value}")

        appointment.status = target
        appointment.update_timestamp()
        await appointment.save()

        # Walk-ins never took a reservation
        if (
            appointment.source == AppointmentSource.ONLINE
            and previous in ACTIVE_STATUSES
            and target not in ACTIVE_STATUSES
        ):
            await release_slot(
                appointment.clinic_id,
                appointment.doctor_id,
                appointment.appointment_date,
                appointment.time_slot,
            )

        logger.info(f"Appointment {appointment_id}: {previous.value} -> {target.value}")
        return AppointmentStatusResponse(
            id=str(appointment.id),
            status=target.value,
            previous_status=previous.value,
        )

    @staticmethod
    async def get_queue(clinic_id: str, date_str: Optional[str] = None) -> QueueResponse:
        """The clinic's appointments for a date (default today) in token order."""
        if date_str:
            if parse_iso_date(date_str) is None:
                raise BadRequestException("Invalid date format. Use YYYY-MM-DD")
        else:
            date_str = local_now().date().isoformat()

        appointments = await Appointment.find(
            Appointment.clinic_id == clinic_id,
            Appointment.appointment_date == date_str
        ).sort("token_number").to_list()

        patients = await _patients_by_id({a.patient_id for a in appointments})
        doctors = await _professionals_by_id({a.doctor_id for a in appointments})

        entries = []
        for a in appointments:
            patient = patients.get(a.patient_id)
            doctor = doctors.get(a.doctor_id)
            entries.append(QueueEntry(
                id=str(a.id),
                token_number=a.token_number,
                time_slot=a.time_slot,
                status=a.status.value,
                type=a.type.value,
                source=a.source.value,
                chief_complaint=a.chief_complaint,
                doctor_id=a.doctor_id,
                doctor_name=doctor.full_name if doctor else None,
                patient_id=a.patient_id,
                patient_name=patient.full_name if patient else None,
                patient_phone=patient.phone if patient else None,
                patient_number=patient.patient_number if patient else None,
            ))

        return QueueResponse(date=date_str, total=len(entries), appointments=entries)

    @staticmethod
    async def register_walk_in(
        clinic: Clinic,
        request: WalkInRequest,
        now: Optional[datetime] = None
    ) -> WalkInResponse:
        """
        Register a patient at the front desk and put them in today's queue.

        The appointment is checked in immediately and occupies a slot starting
        now. Walk-ins skip the schedule, leave and capacity gates.

        Raises:
            BadRequestException: Missing or malformed field, unaffiliated doctor
            NotFoundException: clinicId is not the caller's clinic, or
                existingPatientId is not a patient of this clinic
        """
        walk_in = parse_walk_in_request(request)
        clinic_id = str(clinic.id)
        if walk_in.clinic_id != clinic_id:
            raise NotFoundException("Clinic not found or not authorized")

        await DoctorService.require_affiliation(clinic_id, walk_in.doctor_id)
        doctor = await DoctorService.get_professional(walk_in.doctor_id)
        if not doctor:
            raise BadRequestException("Doctor is not affiliated with this clinic")

        if walk_in.existing_patient_id:
            patient = await PatientService.get_patient(walk_in.existing_patient_id, clinic_id)
        else:
            patient = await PatientService.upsert_patient(clinic_id, walk_in.patient_name, walk_in.patient_phone)

        now = now or local_now()
        today = now.date().isoformat()
        start = now.hour * 60 + now.minute
        slot_start = minutes_to_time(start)
        slot_end = minutes_to_time(min(start + settings.WALK_IN_SLOT_MINUTES, LAST_MINUTE_OF_DAY))

        token_number = await generate_token_number(clinic_id, today)
        appointment = Appointment(
            clinic_id=clinic_id,
            doctor_id=walk_in.doctor_id,
            patient_id=str(patient.id),
            appointment_date=today,
            time_slot_start=slot_start,
            time_slot_end=slot_end,
            status=AppointmentStatus.CHECKED_IN,
            type=walk_in.type,
            source=AppointmentSource.WALK_IN,
            token_number=token_number,
            chief_complaint=walk_in.chief_complaint,
        )
        await appointment.insert()

        logger.info(f"Registered walk-in {appointment.id}: token {token_number} at clinic {clinic_id}")
        return WalkInResponse(
            appointment_id=str(appointment.id),
            token_number=token_number,
            patient_number=patient.patient_number,
            patient_name=patient.full_name,
            doctor_name=doctor.full_name,
            time_slot=appointment.time_slot,
        )

    @staticmethod
    async def get_user_appointments(
        user: User,
        filter: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> MyAppointmentsResponse:
        """
        A signed-in user's bookings across clinics.

        Patient rows are clinic-scoped, so bookings are found through every
        patient row carrying the user's email or phone.
        """
        if filter == "all":
            filter = None
        if filter and filter not in (UPCOMING, PAST):
            raise BadRequestException("Invalid filter. Must be 'upcoming' or 'past'.")

        page = max(1, page)
        limit = min(100, max(1, limit))

        identities = []
        if user.email:
            identities.append(Patient.email == user.email)
        if user.phone:
            identities.append(Patient.phone == user.phone)

        patients = []
        if identities:
            patients = await Patient.find(Or(*identities)).to_list()

        if not patients:
            return MyAppointmentsResponse(
                appointments=[],
                pagination=Pagination(total=0, page=page, limit=limit, total_pages=0),
                message="No patient records found for your account",
            )

        today = local_now().date().isoformat()
        active = [s.value for s in ACTIVE_STATUSES]
        conditions = {"patient_id": {"$in": [str(p.id) for p in patients]}}
        if filter == UPCOMING:
            conditions["appointment_date"] = {"$gte": today}
            conditions["status"] = {"$in": active}
        elif filter == PAST:
            conditions["$or"] = [
                {"appointment_date": {"$lt": today}},
                {"status": {"$nin": active}},
            ]

        direction = DESCENDING if filter == PAST else ASCENDING
        total = await Appointment.find(conditions).count()
        appointments = await Appointment.find(conditions).sort(
            [("appointment_date", direction), ("time_slot_start", direction)]
        ).skip((page - 1) * limit).limit(limit).to_list()

        doctors = await _professionals_by_id({a.doctor_id for a in appointments})
        clinics = await _clinics_by_id({a.clinic_id for a in appointments})
        members = await _family_members_by_id({a.family_member_id for a in appointments if a.family_member_id})

        return MyAppointmentsResponse(
            appointments=[
                _to_my_appointment(
                    a,
                    doctors.get(a.doctor_id),
                    clinics.get(a.clinic_id),
                    members.get(a.family_member_id),
                )
                for a in appointments
            ],
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
            ),
        )


def _object_ids(ids) -> List[PydanticObjectId]:
    result = []
    for value in ids:
        try:
            result.append(PydanticObjectId(value))
        except (InvalidId, TypeError):
            logger.warning(f"Skipping malformed id {value}")
    return result


async def _patients_by_id(ids) -> Dict[str, Patient]:
    object_ids = _object_ids(ids)
    if not object_ids:
        return {}
    patients = await Patient.find(In(Patient.id, object_ids)).to_list()
    return {str(p.id): p for p in patients}


async def _professionals_by_id(ids) -> Dict[str, Professional]:
    object_ids = _object_ids(ids)
    if not object_ids:
        return {}
    professionals = await Professional.find(In(Professional.id, object_ids)).to_list()
    return {str(p.id): p for p in professionals}


async def _clinics_by_id(ids) -> Dict[str, Clinic]:
    object_ids = _object_ids(ids)
    if not object_ids:
        return {}
    clinics = await Clinic.find(In(Clinic.id, object_ids)).to_list()
    return {str(c.id): c for c in clinics}


async def _family_members_by_id(ids) -> Dict[str, FamilyMember]:
    object_ids = _object_ids(ids)
    if not object_ids:
        return {}
    members = await FamilyMember.find(In(FamilyMember.id, object_ids)).to_list()
    return {str(m.id): m for m in members}


def _to_my_appointment(
    appointment: Appointment,
    doctor: Optional[Professional],
    clinic: Optional[Clinic],
    family_member: Optional[FamilyMember] = None
) -> MyAppointment:
    return MyAppointment(
        id=str(appointment.id),
        appointment_date=appointment.appointment_date,
        time_slot_start=appointment.time_slot_start,
        time_slot_end=appointment.time_slot_end,
        status=appointment.status.value,
        type=appointment.type.value,
        source=appointment.source.value,
        chief_complaint=appointment.chief_complaint,
        token_number=appointment.token_number,
        created_at=appointment.created_at,
        doctor=AppointmentDoctor(
            id=str(doctor.id),
            full_name=doctor.full_name,
            type=doctor.type.value,
            specialties=doctor.specialties or [],
        ) if doctor else None,
        clinic=AppointmentClinic(
            id=str(clinic.id),
            name=clinic.name,
            address=clinic.address,
            phone=clinic.phone,
        ) if clinic else None,
        family_member=AppointmentFamilyMember(
            id=str(family_member.id),
            name=family_member.name,
            relation=family_member.relation.value,
        ) if family_member else None,
    )
