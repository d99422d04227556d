# Schedules router

from typing import Optional
from fastapi import APIRouter, Depends, Query
from swasthya.features.schedules.schemas import (
    ReplaceSchedulesRequest,
    ScheduleListResponse,
    CreateLeaveRequest,
    CreateLeaveResponse,
    LeaveListResponse,
)
from swasthya.features.schedules.service import ScheduleService
from swasthya.features.clinic.dependencies import get_current_clinic
from swasthya.features.clinic.models import Clinic
from swasthya.shared.schemas import SuccessResponse

router = APIRouter(prefix="/clinic", tags=["Clinic Schedules"])


@router.get("/schedules", response_model=ScheduleListResponse)
async def list_schedules(
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Weekly schedules at the current clinic.

    - **doctorId**: Only this doctor's schedules (optional)
    """
    schedules = await ScheduleService.list_schedules(str(clinic.id), doctor_id)
    return ScheduleListResponse(
        count=len(schedules),
        schedules=[ScheduleService.schedule_to_response(s) for s in schedules],
    )


@router.post("/schedules", response_model=ScheduleListResponse)
async def replace_schedules(
    request: ReplaceSchedulesRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Replace all schedules of a doctor at the current clinic.

    - **doctorId**: Affiliated doctor
    - **schedules**: day_of_week (0 = Sunday), start_time, end_time,
      slot_duration_minutes, max_patients_per_slot, is_active,
      effective_from, effective_to
    """
    schedules = await ScheduleService.replace_schedules(str(clinic.id), request)
    return ScheduleListResponse(
        count=len(schedules),
        schedules=[ScheduleService.schedule_to_response(s) for s in schedules],
    )


@router.delete("/schedules/{schedule_id}", response_model=SuccessResponse)
async def delete_schedule(schedule_id: str, clinic: Clinic = Depends(get_current_clinic)):
    """Delete one schedule rule of the current clinic."""
    await ScheduleService.delete_schedule(str(clinic.id), schedule_id)
    return SuccessResponse(message="Schedule deleted")


@router.get("/leaves", response_model=LeaveListResponse)
async def list_leaves(
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    upcoming: bool = Query(False),
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Leaves at the current clinic, earliest first.

    - **doctorId**: Only this doctor's leaves (optional)
    - **upcoming**: Only today and later
    """
    leaves = await ScheduleService.list_leaves(str(clinic.id), doctor_id, upcoming)
    return LeaveListResponse(leaves=[ScheduleService.leave_to_response(leave) for leave in leaves])


@router.post("/leaves", response_model=CreateLeaveResponse, response_model_exclude_none=True)
async def create_leave(
    request: CreateLeaveRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Record a full-day or partial leave for a doctor.

    With **checkAffected** the leave is not saved; only the SCHEDULED and
    CHECKED_IN bookings it would overlap are returned.
    """
    leave, affected = await ScheduleService.create_leave(str(clinic.id), request)
    return CreateLeaveResponse(
        leave=ScheduleService.leave_to_response(leave) if leave else None,
        affected_count=len(affected),
        affected_appointments=affected,
    )


@router.delete("/leaves/{leave_id}", response_model=SuccessResponse)
async def delete_leave(leave_id: str, clinic: Clinic = Depends(get_current_clinic)):
    """Delete a leave of the current clinic."""
    await ScheduleService.delete_leave(str(clinic.id), leave_id)
    return SuccessResponse(message="Leave deleted")
