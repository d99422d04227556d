# Doctors Feature - Service

from typing import Optional, List
from beanie import PydanticObjectId
from beanie.operators import In
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError
from swasthya.features.doctors.models import Professional, ClinicDoctor
from swasthya.features.doctors.schemas import CreateDoctorRequest, ProfessionalResponse
from swasthya.core.logging import logger
from swasthya.shared.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)


class DoctorService:
    """Professionals and their clinic affiliations."""

    @staticmethod
    async def get_professional(doctor_id: str) -> Optional[Professional]:
        try:
            return await Professional.get(PydanticObjectId(doctor_id))
        except (InvalidId, TypeError):
            return None

    @staticmethod
    async def get_affiliation(clinic_id: str, doctor_id: str) -> Optional[ClinicDoctor]:
        return await ClinicDoctor.find_one(
            ClinicDoctor.clinic_id == clinic_id,
            ClinicDoctor.doctor_id == doctor_id
        )

    @staticmethod
    async def require_affiliation(clinic_id: str, doctor_id: str) -> ClinicDoctor:
        affiliation = await DoctorService.get_affiliation(clinic_id, doctor_id)
        if not affiliation:
            raise BadRequestException("Doctor is not affiliated with this clinic")
        return affiliation

    @staticmethod
    async def list_clinic_doctors(clinic_id: str) -> List[Professional]:
        affiliations = await ClinicDoctor.find(ClinicDoctor.clinic_id == clinic_id).to_list()
        ids = []
        for affiliation in affiliations:
            try:
                ids.append(PydanticObjectId(affiliation.doctor_id))
            except InvalidId:
                logger.warning(f"Skipping malformed doctor id {affiliation.doctor_id} in clinic {clinic_id}")
        if not ids:
            return []
        return await Professional.find(In(Professional.id, ids)).sort("full_name").to_list()

    @staticmethod
    async def affiliate(clinic_id: str, doctor_id: str) -> Professional:
        """Link an existing professional to a clinic."""
        professional = await DoctorService.get_professional(doctor_id)
        if not professional:
            raise NotFoundException("Professional not found")

        try:
            await ClinicDoctor(clinic_id=clinic_id, doctor_id=str(professional.id)).insert()
        except DuplicateKeyError:
            raise ConflictException("Doctor is already affiliated with this clinic")

        logger.info(f"Affiliated doctor {professional.id} with clinic {clinic_id}")
        return professional

    @staticmethod
    async def create_and_affiliate(clinic_id: str, request: CreateDoctorRequest) -> Professional:
        """Create a professional profile and link it to the clinic."""
        existing = await Professional.find_one(
            Professional.registration_number == request.registration_number.strip()
        )
        if existing:
            raise ConflictException("A professional with this registration number already exists")

        professional = Professional(
            full_name=request.full_name.strip(),
            type=request.type,
            registration_number=request.registration_number.strip(),
            phone=request.phone,
            specialties=request.specialties,
        )
        await professional.insert()
        await ClinicDoctor(clinic_id=clinic_id, doctor_id=str(professional.id)).insert()

        logger.info(f"Created professional {professional.id} for clinic {clinic_id}")
        return professional

    @staticmethod
    async def remove_affiliation(clinic_id: str, doctor_id: str) -> None:
        affiliation = await DoctorService.get_affiliation(clinic_id, doctor_id)
        if not affiliation:
            raise NotFoundException("Doctor is not affiliated with this clinic")
        await affiliation.delete()
        logger.info(f"Removed doctor {doctor_id} from clinic {clinic_id}")

    @staticmethod
    def professional_to_response(professional: Professional) -> ProfessionalResponse:
        return ProfessionalResponse(
            id=str(professional.id),
            full_name=professional.full_name,
            type=professional.type,
            registration_number=professional.registration_number,
            phone=professional.phone,
            specialties=professional.specialties or [],
            created_at=professional.created_at,
        )
