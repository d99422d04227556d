# Doctors Feature - Schemas

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from swasthya.features.doctors.models import ProfessionalType


class AffiliateDoctorRequest(BaseModel):
    """Link an existing professional to the clinic."""
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: str = Field(..., alias="doctorId")


class CreateDoctorRequest(BaseModel):
    """Create a professional and link it to the clinic."""
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., alias="fullName", min_length=2, max_length=100)
    type: ProfessionalType = ProfessionalType.DOCTOR
    registration_number: str = Field(..., alias="registrationNumber", min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    specialties: List[str] = Field(default_factory=list)


class ProfessionalResponse(BaseModel):
    id: str
    full_name: str
    type: ProfessionalType
    registration_number: str
    phone: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    created_at: datetime


class ClinicDoctorListResponse(BaseModel):
    doctors: List[ProfessionalResponse]
    total: int
