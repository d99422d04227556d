# Patient Management Feature - Router

from typing import Optional
from fastapi import APIRouter, Depends, Query
from swasthya.features.patients.schemas import (
    PatientListResponse,
    PatientDetailResponse,
    PatientAppointmentSummary,
)
from swasthya.features.patients.service import PatientService
from swasthya.features.appointments.models import Appointment
from swasthya.features.clinic.dependencies import get_current_clinic
from swasthya.features.clinic.models import Clinic


router = APIRouter(prefix="/clinic/patients", tags=["Clinic Patients"])


@router.get("", response_model=PatientListResponse)
async def list_patients(
    q: Optional[str] = Query(None, max_length=100),
    limit: int = Query(50, ge=1, le=200),
    clinic: Clinic = Depends(get_current_clinic)
):
    """
    List the current clinic's patients, newest first.

    - **q**: Optional search over name, phone and patient number
    """
    patients = await PatientService.search_patients(str(clinic.id), q, limit)
    return PatientListResponse(
        patients=[PatientService.patient_to_response(p) for p in patients],
        total=len(patients),
    )


@router.get("/{patient_id}", response_model=PatientDetailResponse)
async def get_patient(patient_id: str, clinic: Clinic = Depends(get_current_clinic)):
    """Get a patient with their appointment history at this clinic."""
    patient = await PatientService.get_patient(patient_id, str(clinic.id))

    appointments = await Appointment.find(
        Appointment.clinic_id == str(clinic.id),
        Appointment.patient_id == str(patient.id)
    ).sort("-appointment_date", "-time_slot_start").to_list()

    return PatientDetailResponse(
        patient=PatientService.patient_to_response(patient),
        appointments=[
            PatientAppointmentSummary(
                id=str(a.id),
                doctor_id=a.doctor_id,
                appointment_date=a.appointment_date,
                time_slot=a.time_slot,
                status=a.status.value,
                token_number=a.token_number,
            )
            for a in appointments
        ],
    )
