# Schedules Feature - Schemas

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from swasthya.shared.validators import is_valid_time, parse_iso_date
from swasthya.features.appointments.time_utils import time_to_minutes


def _check_time(value: Optional[str], label: str) -> Optional[str]:
    if value is not None and not is_valid_time(value):
        raise ValueError(f"Invalid {label} format (use HH:MM)")
    return value


def _check_date(value: Optional[str], label: str) -> Optional[str]:
    if value is not None and parse_iso_date(value) is None:
        raise ValueError(f"Invalid {label} (use YYYY-MM-DD)")
    return value


# ============== Schedules ==============

class ScheduleInput(BaseModel):
    """One weekly availability rule."""
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration_minutes: int
    max_patients_per_slot: int = Field(1, ge=1, le=100)
    is_active: bool = True
    effective_from: Optional[str] = None
    effective_to: Optional[str] = None

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v: int) -> int:
        if v < 0 or v > 6:
            raise ValueError("Invalid day_of_week value (must be 0-6)")
        return v

    @field_validator("slot_duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v < 5:
            raise ValueError("slot_duration_minutes must be at least 5")
        return v

    @model_validator(mode="after")
    def validate_window(self):
        _check_time(self.start_time, "start_time")
        _check_time(self.end_time, "end_time")
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError("start_time must be before end_time")
        _check_date(self.effective_from, "effective_from")
        _check_date(self.effective_to, "effective_to")
        if self.effective_from and self.effective_to and self.effective_to < self.effective_from:
            raise ValueError("effective_to must not be before effective_from")
        return self


class ReplaceSchedulesRequest(BaseModel):
    """Replace all schedules of a doctor at the clinic."""
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: str = Field(..., alias="doctorId", min_length=1)
    schedules: List[ScheduleInput]


class ScheduleResponse(BaseModel):
    id: str
    doctor_id: str
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration_minutes: int
    max_patients_per_slot: int
    is_active: bool
    effective_from: str
    effective_to: Optional[str] = None


class ScheduleListResponse(BaseModel):
    success: bool = True
    count: int
    schedules: List[ScheduleResponse]


# ============== Leaves ==============

class CreateLeaveRequest(BaseModel):
    """Mark a doctor unavailable on a date, fully or for a window."""
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: str = Field(..., alias="doctorId", min_length=1)
    leave_date: str = Field(..., alias="leaveDate")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    reason: str
    check_affected: bool = Field(False, alias="checkAffected")

    @field_validator("leave_date")
    @classmethod
    def validate_leave_date(cls, v: str) -> str:
        return _check_date(v, "leave date")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return v or None

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Reason is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_window(self):
        _check_time(self.start_time, "start time")
        _check_time(self.end_time, "end time")
        if bool(self.start_time) != bool(self.end_time):
            raise ValueError("Both start time and end time must be provided for partial day leave")
        if self.start_time and time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError("Leave start time must be before end time")
        return self


class LeaveResponse(BaseModel):
    id: str
    doctor_id: str
    leave_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: str
    created_at: datetime


class AffectedAppointment(BaseModel):
    id: str
    time_slot: str = Field(..., serialization_alias="timeSlot")
    patient_name: str = Field(..., serialization_alias="patientName")


class CreateLeaveResponse(BaseModel):
    success: bool = True
    leave: Optional[LeaveResponse] = None
    affected_count: int = Field(..., serialization_alias="affectedCount")
    affected_appointments: List[AffectedAppointment] = Field(
        default_factory=list, serialization_alias="affectedAppointments"
    )


class LeaveListResponse(BaseModel):
    leaves: List[LeaveResponse]
