# Patient Management Feature - Service

import re
from typing import Optional, List
from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError
from swasthya.features.patients.models import Patient
from swasthya.features.patients.schemas import PatientResponse
from swasthya.features.appointments.identifiers import generate_patient_number
from swasthya.core.logging import logger
from swasthya.shared.exceptions import NotFoundException


class PatientService:
    """Service class for patient records."""

    @staticmethod
    async def find_by_phone(clinic_id: str, phone: str) -> Optional[Patient]:
        return await Patient.find_one(
            Patient.clinic_id == clinic_id,
            Patient.phone == phone
        )

    @staticmethod
    async def upsert_patient(
        clinic_id: str,
        full_name: str,
        phone: str,
        email: Optional[str] = None,
    ) -> Patient:
        """
        Find the clinic's patient with this phone or create one.

        A returning patient's name is replaced with the latest one given, and
        the email is replaced only when a new one is supplied.
        """
        patient = await PatientService.find_by_phone(clinic_id, phone)

        if patient is None:
            patient = Patient(
                clinic_id=clinic_id,
                patient_number=await generate_patient_number(clinic_id),
                full_name=full_name,
                phone=phone,
                email=email or None,
            )
            try:
                await patient.insert()
                logger.info(f"Created patient {patient.patient_number} for clinic {clinic_id}")
                return patient
            except DuplicateKeyError:
                # Another request registered the same phone first; update theirs
                patient = await PatientService.find_by_phone(clinic_id, phone)
                if patient is None:
                    raise

        patient.full_name = full_name
        if email:
            patient.email = email
        patient.update_timestamp()
        await patient.save()

        logger.info(f"Updated returning patient {patient.patient_number} for clinic {clinic_id}")
        return patient

    @staticmethod
    async def search_patients(clinic_id: str, query: Optional[str] = None, limit: int = 50) -> List[Patient]:
        """List a clinic's patients, optionally filtered by name, phone or patient number."""
        conditions = {"clinic_id": clinic_id}
        if query and query.strip():
            pattern = {"$regex": re.escape(query.strip()), "$options": "i"}
            conditions["$or"] = [
                {"full_name": pattern},
                {"phone": pattern},
                {"patient_number": pattern},
            ]
        return await Patient.find(conditions).sort("-created_at").limit(limit).to_list()

    @staticmethod
    async def get_patient(patient_id: str, clinic_id: str) -> Patient:
        try:
            patient = await Patient.get(PydanticObjectId(patient_id))
        except (InvalidId, TypeError):
            patient = None

        if not patient or patient.clinic_id != clinic_id:
            raise NotFoundException("Patient not found")

        return patient

    @staticmethod
    def patient_to_response(patient: Patient) -> PatientResponse:
        return PatientResponse(
            id=str(patient.id),
            patient_number=patient.patient_number,
            full_name=patient.full_name,
            phone=patient.phone,
            email=patient.email,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )
