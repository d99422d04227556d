# Appointments Feature - Schemas

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and renders camelCase keys (``clinicId``, ``tokenNumber``)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============== Booking ==============

class CreateAppointmentRequest(CamelModel):
    """Public booking request.

    Every field is optional at the schema level so that missing fields are
    reported with booking-specific messages by the validator.
    """
    clinic_id: Optional[str] = None
    doctor_id: Optional[str] = None
    date: Optional[str] = None
    time_slot: Optional[str] = None
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None
    chief_complaint: Optional[str] = None
    # Books for one of the signed-in user's family members
    family_member_id: Optional[str] = None


class BookingResponse(CamelModel):
    success: bool = True
    appointment_id: str
    token_number: int
    date: str
    time_slot: str
    doctor_name: str
    doctor_type: str
    clinic_name: str
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    patient_name: str
    patient_phone: str
    family_member_name: Optional[str] = None


# ============== Slot listing ==============

class SlotInfo(CamelModel):
    start: str
    end: str
    available: bool = True
    booked_count: int = 0
    max_patients: int


class SlotDoctor(BaseModel):
    id: str
    name: str
    type: str


class SlotClinic(BaseModel):
    id: str
    name: str


class SlotSchedule(CamelModel):
    start_time: str
    end_time: str
    slot_duration: int


class AvailableSlotsResponse(CamelModel):
    slots: List[SlotInfo]
    doctor: SlotDoctor
    clinic: Optional[SlotClinic] = None
    date: str
    day_of_week: int
    schedule: Optional[SlotSchedule] = None
    message: Optional[str] = None


# ============== Clinic queue ==============

class UpdateStatusRequest(BaseModel):
    status: str


class AppointmentStatusResponse(BaseModel):
    success: bool = True
    id: str
    status: str
    previous_status: str


class QueueEntry(BaseModel):
    id: str
    token_number: int
    time_slot: str
    status: str
    type: str
    source: str
    chief_complaint: Optional[str] = None
    doctor_id: str
    doctor_name: Optional[str] = None
    patient_id: str
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_number: Optional[str] = None


class QueueResponse(BaseModel):
    date: str
    total: int
    appointments: List[QueueEntry]


class WalkInRequest(CamelModel):
    """Patient registered at the front desk for today's queue."""
    clinic_id: Optional[str] = None
    doctor_id: Optional[str] = None
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    chief_complaint: Optional[str] = None
    existing_patient_id: Optional[str] = None
    type: Optional[str] = None  # NEW (default) or FOLLOW_UP


class WalkInResponse(CamelModel):
    success: bool = True
    appointment_id: str
    token_number: int
    patient_number: str
    patient_name: str
    doctor_name: str
    time_slot: str


# ============== Patient's own appointments ==============

class AppointmentDoctor(BaseModel):
    id: str
    full_name: str
    type: str
    specialties: List[str] = []


class AppointmentClinic(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None


class AppointmentFamilyMember(BaseModel):
    id: str
    name: str
    relation: str


class MyAppointment(BaseModel):
    id: str
    appointment_date: str
    time_slot_start: str
    time_slot_end: str
    status: str
    type: str
    source: str
    chief_complaint: Optional[str] = None
    token_number: int
    created_at: datetime
    doctor: Optional[AppointmentDoctor] = None
    clinic: Optional[AppointmentClinic] = None
    family_member: Optional[AppointmentFamilyMember] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class MyAppointmentsResponse(BaseModel):
    appointments: List[MyAppointment]
    pagination: Pagination
    message: Optional[str] = None
