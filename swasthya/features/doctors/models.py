# Doctors Feature - Models

from typing import Optional, List
from enum import Enum
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel
from swasthya.shared.models import TimestampMixin


class ProfessionalType(str, Enum):
    DOCTOR = "DOCTOR"
    DENTIST = "DENTIST"
    PHARMACIST = "PHARMACIST"


class Professional(Document, TimestampMixin):
    """A registered healthcare professional listed in the directory."""

    full_name: str
    type: ProfessionalType = ProfessionalType.DOCTOR
    # NMC / NDA / pharmacy council number
    registration_number: Indexed(str, unique=True)
    phone: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)

    class Settings:
        name = "professionals"
        use_state_management = True


class ClinicDoctor(Document, TimestampMixin):
    """Affiliation of a professional with a clinic (many-to-many)."""

    clinic_id: str
    doctor_id: str

    class Settings:
        name = "clinic_doctors"
        use_state_management = True
        indexes = [
            IndexModel(
                [("clinic_id", ASCENDING), ("doctor_id", ASCENDING)],
                unique=True,
                name="clinic_doctor_unique",
            ),
        ]
