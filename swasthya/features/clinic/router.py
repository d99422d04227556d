# Clinic router
from typing import List, Literal
from fastapi import APIRouter, Depends, Query, status
from swasthya.features.clinic.schemas import (
    RegisterClinicRequest,
    ClinicResponse,
    ClinicInfoResponse,
    ClinicListResponse,
    VerifyClinicRequest,
)
from swasthya.features.clinic.service import ClinicService
from swasthya.features.auth.dependencies import get_current_user, get_current_admin
from swasthya.features.auth.models import User
from swasthya.shared.exceptions import NotFoundException

router = APIRouter(prefix="/clinic", tags=["Clinic"])
admin_router = APIRouter(prefix="/admin/clinics", tags=["Admin"])


@router.post("/register", response_model=ClinicResponse, status_code=status.HTTP_201_CREATED)
async def register_clinic(
    request: RegisterClinicRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Register a clinic owned by the current user.

    The clinic cannot take bookings until an admin verifies it.

    - **name**: Clinic name
    - **slug**: Public URL name (optional, derived from the name)
    - **address**, **phone**, **email**: Contact details (optional)
    """
    clinic = await ClinicService.register_clinic(current_user, request)
    return ClinicService.clinic_to_response(clinic)


@router.get("/me", response_model=List[ClinicResponse])
async def get_my_clinics(current_user: User = Depends(get_current_user)):
    """
    Get the clinics registered by the current user, newest first.

    Requires authentication.
    """
    clinics = await ClinicService.get_clinics_for_owner(current_user)
    if not clinics:
        raise NotFoundException("No clinic registered", code="NO_CLINIC")
    return [ClinicService.clinic_to_response(c) for c in clinics]


@router.get("/{clinic_id}/info", response_model=ClinicInfoResponse)
async def get_clinic_info(clinic_id: str):
    """
    Public clinic details for the booking page (no authentication required).
    """
    clinic = await ClinicService.get_clinic_or_404(clinic_id)
    return ClinicService.clinic_to_info(clinic)


@admin_router.get("", response_model=ClinicListResponse)
async def list_clinics(
    status: Literal["pending", "verified", "all"] = Query("pending"),
    admin: User = Depends(get_current_admin)
):
    """
    List clinics for review.

    - **status**: pending (default), verified or all
    """
    clinics = await ClinicService.list_clinics(status)
    return ClinicListResponse(
        clinics=[ClinicService.clinic_to_response(c) for c in clinics],
        total=len(clinics),
    )


@admin_router.post("/{clinic_id}", response_model=ClinicResponse)
async def verify_clinic(
    clinic_id: str,
    request: VerifyClinicRequest,
    admin: User = Depends(get_current_admin)
):
    """
    Approve or reject a clinic registration.

    - **action**: approve or reject
    - **reason**: Required when rejecting
    """
    clinic = await ClinicService.verify_clinic(clinic_id, request.action, request.reason)
    return ClinicService.clinic_to_response(clinic)
