# Patient Management Feature - Models

from typing import Optional
from beanie import Document
from pymongo import ASCENDING, IndexModel
from swasthya.shared.models import TimestampMixin


class Patient(Document, TimestampMixin):
    """Clinic-scoped patient record.

    The phone number is the patient's identity within a clinic: one record per
    (clinic, phone), enforced by a unique index.
    """

    clinic_id: str
    # Clinic-scoped number, e.g. P-000001
    patient_number: str
    full_name: str
    phone: str
    email: Optional[str] = None

    class Settings:
        name = "patients"
        use_state_management = True
        indexes = [
            IndexModel(
                [("clinic_id", ASCENDING), ("phone", ASCENDING)],
                unique=True,
                name="patient_clinic_phone_unique",
            ),
            IndexModel(
                [("clinic_id", ASCENDING), ("patient_number", ASCENDING)],
                unique=True,
                name="patient_clinic_number_unique",
            ),
            IndexModel([("email", ASCENDING)], name="patient_email"),
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "clinic_id": "665f1c2e9b1e8a3d4c2b1a00",
                "patient_number": "P-000001",
                "full_name": "Ram Bahadur Thapa",
                "phone": "9812345678",
                "email": "ram.thapa@example.com",
            }
        }
