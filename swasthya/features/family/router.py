# Family Members Feature - Router

from fastapi import APIRouter, Depends, status
from swasthya.features.family.schemas import (
    CreateFamilyMemberRequest,
    UpdateFamilyMemberRequest,
    FamilyMemberListResponse,
    FamilyMemberEnvelope,
)
from swasthya.features.family.service import FamilyService
from swasthya.features.auth.dependencies import get_current_user
from swasthya.features.auth.models import User
from swasthya.shared.schemas import SuccessResponse


router = APIRouter(prefix="/patient/family-members", tags=["Family Members"])


@router.get("", response_model=FamilyMemberListResponse)
async def list_family_members(current_user: User = Depends(get_current_user)):
    """Family members of the signed-in user, oldest entry first."""
    members = await FamilyService.list_members(str(current_user.id))
    return FamilyMemberListResponse(
        family_members=[FamilyService.member_to_response(m) for m in members]
    )


@router.post("", response_model=FamilyMemberEnvelope, status_code=status.HTTP_201_CREATED)
async def create_family_member(
    request: CreateFamilyMemberRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Add a family member.

    - **name**, **relation**: Required
    - **date_of_birth**, **gender**, **blood_group**, **phone**: Optional
    """
    member = await FamilyService.create_member(str(current_user.id), request)
    return FamilyMemberEnvelope(family_member=FamilyService.member_to_response(member))


@router.get("/{member_id}")
async def get_family_member(member_id: str, current_user: User = Depends(get_current_user)):
    member = await FamilyService.get_member(member_id, str(current_user.id))
    return {"family_member": FamilyService.member_to_response(member)}


@router.put("/{member_id}", response_model=FamilyMemberEnvelope)
async def update_family_member(
    member_id: str,
    request: UpdateFamilyMemberRequest,
    current_user: User = Depends(get_current_user)
):
    """Update the given fields; null clears date_of_birth, gender, blood_group or phone."""
    member = await FamilyService.update_member(member_id, str(current_user.id), request)
    return FamilyMemberEnvelope(family_member=FamilyService.member_to_response(member))


@router.delete("/{member_id}", response_model=SuccessResponse)
async def delete_family_member(member_id: str, current_user: User = Depends(get_current_user)):
    await FamilyService.delete_member(member_id, str(current_user.id))
    return SuccessResponse()
