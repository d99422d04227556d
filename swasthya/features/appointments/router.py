# Appointments router

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from swasthya.features.appointments.schemas import (
    CreateAppointmentRequest,
    BookingResponse,
    AvailableSlotsResponse,
    UpdateStatusRequest,
    AppointmentStatusResponse,
    QueueResponse,
    WalkInRequest,
    WalkInResponse,
    MyAppointmentsResponse,
)
from swasthya.features.appointments.service import AppointmentService
from swasthya.features.auth.dependencies import get_current_user, get_optional_user
from swasthya.features.auth.models import User
from swasthya.features.clinic.dependencies import get_current_clinic
from swasthya.features.clinic.models import Clinic
from swasthya.core.logging import logger
from swasthya.shared.exceptions import InternalServerException

router = APIRouter(tags=["Appointments"])
queue_router = APIRouter(prefix="/clinic/queue", tags=["Clinic Queue"])


@router.post("/appointments", response_model=BookingResponse)
async def create_appointment(
    request: CreateAppointmentRequest,
    user: Optional[User] = Depends(get_optional_user)
):
    """
    Book an appointment (public; a bearer token is needed only with familyMemberId).

    - **clinicId**, **doctorId**: Verified clinic and an affiliated doctor
    - **date**: YYYY-MM-DD, today or later
    - **timeSlot**: HH:MM-HH:MM inside the doctor's schedule
    - **patientName**, **patientPhone**: Patient identity (phone 98/97 + 8 digits)
    - **patientEmail**, **chiefComplaint**: Optional
    - **familyMemberId**: Book for a family member of the signed-in user

    Slot problems return 400 with `{"error": "SLOT_UNAVAILABLE", "message": ...}`.
    """
    try:
        return await AppointmentService.book_appointment(request, user=user)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error creating appointment: {e}")
        raise InternalServerException("Failed to create appointment")


@router.get("/appointments", response_model=MyAppointmentsResponse)
async def get_my_appointments(
    filter: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    current_user: User = Depends(get_current_user)
):
    """
    Get the current user's appointments across clinics.

    - **filter**: upcoming, past or all (default)
    - **limit**: Page size, at most 100
    """
    return await AppointmentService.get_user_appointments(current_user, filter, page, limit)


@router.get("/clinic/{clinic_id}/slots", response_model=AvailableSlotsResponse, response_model_exclude_none=True)
async def get_available_slots(
    clinic_id: str,
    doctor_id: Optional[str] = Query(None),
    date: Optional[str] = Query(None)
):
    """
    Available slots of a doctor on a date (public).

    Slots on leave, fully booked, or starting too soon today are returned with
    `available: false`.
    """
    try:
        return await AppointmentService.get_available_slots(clinic_id, doctor_id, date)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching available slots: {e}")
        raise InternalServerException("Failed to fetch available slots")


@queue_router.get("", response_model=QueueResponse)
async def get_queue(
    date: Optional[str] = Query(None),
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    The clinic's appointments for a date in token order.

    - **date**: YYYY-MM-DD, defaults to today
    """
    return await AppointmentService.get_queue(str(clinic.id), date)


@queue_router.patch("/{appointment_id}/status", response_model=AppointmentStatusResponse)
async def update_appointment_status(
    appointment_id: str,
    request: UpdateStatusRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Move an appointment to its next status.

    SCHEDULED -> CHECKED_IN, CANCELLED or NO_SHOW;
    CHECKED_IN -> IN_PROGRESS, CANCELLED or NO_SHOW;
    IN_PROGRESS -> COMPLETED.
    """
    return await AppointmentService.update_status(str(clinic.id), appointment_id, request.status)


@queue_router.post("/register", response_model=WalkInResponse)
async def register_walk_in(
    request: WalkInRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Register a walk-in patient, checked in to today's queue.

    - **clinicId**, **doctorId**: The caller's clinic and an affiliated doctor
    - **patientName**, **patientPhone**: Patient identity
    - **existingPatientId**: Use this clinic patient instead of matching by phone
    - **type**: NEW (default) or FOLLOW_UP
    - **chiefComplaint**: Optional
    """
    try:
        return await AppointmentService.register_walk_in(clinic, request)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error registering walk-in: {e}")
        raise InternalServerException("Failed to register patient")
