# Doctors Feature - Router

from fastapi import APIRouter, Depends, status
from swasthya.features.doctors.schemas import (
    AffiliateDoctorRequest,
    CreateDoctorRequest,
    ProfessionalResponse,
    ClinicDoctorListResponse,
)
from swasthya.features.doctors.service import DoctorService
from swasthya.features.clinic.dependencies import get_current_clinic
from swasthya.features.clinic.models import Clinic
from swasthya.shared.exceptions import NotFoundException
from swasthya.shared.schemas import SuccessResponse


router = APIRouter(prefix="/clinic/doctors", tags=["Clinic Doctors"])
professionals_router = APIRouter(prefix="/professionals", tags=["Professionals"])


@router.get("", response_model=ClinicDoctorListResponse)
async def list_doctors(clinic: Clinic = Depends(get_current_clinic)):
    """List the doctors affiliated with the current clinic."""
    doctors = await DoctorService.list_clinic_doctors(str(clinic.id))
    return ClinicDoctorListResponse(
        doctors=[DoctorService.professional_to_response(d) for d in doctors],
        total=len(doctors),
    )


@router.post("", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
async def affiliate_doctor(
    request: AffiliateDoctorRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    Add an existing professional to the current clinic.

    - **doctorId**: Professional ID
    """
    professional = await DoctorService.affiliate(str(clinic.id), request.doctor_id)
    return DoctorService.professional_to_response(professional)


@router.post("/create", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    request: CreateDoctorRequest,
    clinic: Clinic = Depends(get_current_clinic)
):
    """Create a professional profile and add it to the current clinic."""
    professional = await DoctorService.create_and_affiliate(str(clinic.id), request)
    return DoctorService.professional_to_response(professional)


@router.delete("/{doctor_id}", response_model=SuccessResponse)
async def remove_doctor(doctor_id: str, clinic: Clinic = Depends(get_current_clinic)):
    """Remove a doctor from the current clinic. The professional profile is kept."""
    await DoctorService.remove_affiliation(str(clinic.id), doctor_id)
    return SuccessResponse(message="Doctor removed from clinic")


@professionals_router.get("/{doctor_id}", response_model=ProfessionalResponse)
async def get_professional(doctor_id: str):
    """Public professional profile."""
    professional = await DoctorService.get_professional(doctor_id)
    if not professional:
        raise NotFoundException("Professional not found")
    return DoctorService.professional_to_response(professional)
