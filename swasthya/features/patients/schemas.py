# Patient Management Feature - Schemas

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class PatientResponse(BaseModel):
    """Response schema for patient data."""
    id: str
    patient_number: str
    full_name: str
    phone: str
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PatientListResponse(BaseModel):
    patients: List[PatientResponse]
    total: int


class PatientAppointmentSummary(BaseModel):
    id: str
    doctor_id: str
    appointment_date: str
    time_slot: str
    status: str
    token_number: int


class PatientDetailResponse(BaseModel):
    patient: PatientResponse
    appointments: List[PatientAppointmentSummary]
