# Clinic Management Feature - Service

import re
from datetime import datetime
from typing import Optional, List
from beanie import PydanticObjectId
from bson.errors import InvalidId
from swasthya.features.clinic.models import Clinic
from swasthya.features.clinic.schemas import (
    RegisterClinicRequest,
    ClinicResponse,
    ClinicInfoResponse,
)
from swasthya.features.auth.models import User
from swasthya.features.auth.service import AuthService
from swasthya.core.email import send_clinic_verification_email
from swasthya.core.logging import logger
from swasthya.shared.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)


def slugify(name: str) -> str:
    """Turn a clinic name into a URL slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "clinic"


class ClinicService:
    """Service class for clinic registration and verification."""

    @staticmethod
    async def get_clinic(clinic_id: str) -> Optional[Clinic]:
        """Get a clinic by id; None for unknown or malformed ids."""
        try:
            return await Clinic.get(PydanticObjectId(clinic_id))
        except (InvalidId, TypeError):
            return None

    @staticmethod
    async def get_clinic_or_404(clinic_id: str) -> Clinic:
        clinic = await ClinicService.get_clinic(clinic_id)
        if not clinic:
            raise NotFoundException("Clinic not found")
        return clinic

    @staticmethod
    async def register_clinic(owner: User, request: RegisterClinicRequest) -> Clinic:
        """Register a clinic for ``owner``; it stays unverified until an admin approves it."""
        pending = await Clinic.find_one(
            Clinic.claimed_by_id == str(owner.id),
            Clinic.verified == False,
            Clinic.rejection_reason == None
        )
        if pending:
            raise ConflictException("You already have a clinic registration pending review")

        slug = request.slug or slugify(request.name)
        if await Clinic.find_one(Clinic.slug == slug):
            raise ConflictException("This clinic URL is already taken")

        clinic = Clinic(
            name=request.name.strip(),
            slug=slug,
            address=request.address or "",
            phone=request.phone or "",
            email=request.email or owner.email or "",
            claimed_by_id=str(owner.id),
        )
        await clinic.insert()

        logger.info(f"Clinic {clinic.id} ({slug}) registered by user {owner.id}")
        return clinic

    @staticmethod
    async def get_clinics_for_owner(owner: User) -> List[Clinic]:
        return await Clinic.find(Clinic.claimed_by_id == str(owner.id)).sort("-created_at").to_list()

    @staticmethod
    async def get_verified_clinic_for_owner(owner: User) -> Optional[Clinic]:
        return await Clinic.find_one(
            Clinic.claimed_by_id == str(owner.id),
            Clinic.verified == True
        )

    @staticmethod
    async def list_clinics(status: str = "pending") -> List[Clinic]:
        """List clinics for the admin review queue."""
        if status == "pending":
            query = Clinic.find(Clinic.verified == False, Clinic.rejection_reason == None)
        elif status == "verified":
            query = Clinic.find(Clinic.verified == True)
        else:
            query = Clinic.find_all()
        return await query.sort("-created_at").to_list()

    @staticmethod
    async def verify_clinic(clinic_id: str, action: str, reason: Optional[str] = None) -> Clinic:
        """Approve or reject a clinic registration and notify its owner."""
        clinic = await ClinicService.get_clinic_or_404(clinic_id)

        if clinic.verified:
            raise BadRequestException("This clinic has already been verified")

        if action == "approve":
            clinic.verified = True
            clinic.verified_at = datetime.utcnow()
            clinic.rejection_reason = None
        else:
            clinic.rejection_reason = (reason or "").strip()

        clinic.update_timestamp()
        await clinic.save()
        logger.info(f"Clinic {clinic.id} {action}d")

        owner = await AuthService.get_user_by_id(clinic.claimed_by_id) if clinic.claimed_by_id else None
        if owner and owner.email:
            try:
                await send_clinic_verification_email(
                    email=owner.email,
                    owner_name=owner.name,
                    clinic_name=clinic.name,
                    approved=clinic.verified,
                    reason=clinic.rejection_reason,
                )
            except Exception as e:
                # Don't fail the review if email fails
                logger.error(f"Failed to send verification email for clinic {clinic.id}: {e}")

        return clinic

    @staticmethod
    def clinic_to_response(clinic: Clinic) -> ClinicResponse:
        return ClinicResponse(
            id=str(clinic.id),
            name=clinic.name,
            slug=clinic.slug,
            address=clinic.address or "",
            phone=clinic.phone or "",
            email=clinic.email or "",
            verified=clinic.verified,
            claimed_by_id=clinic.claimed_by_id,
            verified_at=clinic.verified_at,
            rejection_reason=clinic.rejection_reason,
            created_at=clinic.created_at,
            updated_at=clinic.updated_at,
        )

    @staticmethod
    def clinic_to_info(clinic: Clinic) -> ClinicInfoResponse:
        return ClinicInfoResponse(
            id=str(clinic.id),
            name=clinic.name,
            slug=clinic.slug,
            address=clinic.address or "",
            phone=clinic.phone or "",
            verified=clinic.verified,
        )
