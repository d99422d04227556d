# Family Members Feature - Service

from typing import List
from beanie import PydanticObjectId
from bson.errors import InvalidId
from swasthya.features.family.models import FamilyMember, FamilyRelation
from swasthya.features.family.schemas import (
    CreateFamilyMemberRequest,
    UpdateFamilyMemberRequest,
    FamilyMemberResponse,
)
from swasthya.config import settings
from swasthya.core.logging import logger
from swasthya.shared.exceptions import BadRequestException, NotFoundException


class FamilyService:
    """Service class for a user's family members."""

    @staticmethod
    async def list_members(user_id: str) -> List[FamilyMember]:
        return await FamilyMember.find(FamilyMember.user_id == user_id).sort("+created_at").to_list()

    @staticmethod
    async def get_member(member_id: str, user_id: str) -> FamilyMember:
        """Fetch a member owned by ``user_id``; anyone else's is reported as missing."""
        try:
            member = await FamilyMember.get(PydanticObjectId(member_id))
        except (InvalidId, TypeError):
            member = None

        if not member or member.user_id != user_id:
            raise NotFoundException("Family member not found")

        return member

    @staticmethod
    async def create_member(user_id: str, request: CreateFamilyMemberRequest) -> FamilyMember:
        count = await FamilyMember.find(FamilyMember.user_id == user_id).count()
        if count >= settings.MAX_FAMILY_MEMBERS:
            raise BadRequestException(f"Maximum of {settings.MAX_FAMILY_MEMBERS} family members allowed")

        member = FamilyMember(
            user_id=user_id,
            name=request.name,
            relation=FamilyRelation(request.relation),
            date_of_birth=request.date_of_birth,
            gender=request.gender,
            blood_group=request.blood_group,
            phone=request.phone,
        )
        await member.insert()

        logger.info(f"User {user_id} added family member {member.id}")
        return member

    @staticmethod
    async def update_member(member_id: str, user_id: str, request: UpdateFamilyMemberRequest) -> FamilyMember:
        """Apply only the fields present in the request body."""
        changes = request.model_dump(include=request.model_fields_set)
        if not changes:
            raise BadRequestException("No fields to update")

        member = await FamilyService.get_member(member_id, user_id)
        if "relation" in changes:
            changes["relation"] = FamilyRelation(changes["relation"])
        for field, value in changes.items():
            setattr(member, field, value)

        member.update_timestamp()
        await member.save()
        return member

    @staticmethod
    async def delete_member(member_id: str, user_id: str) -> None:
        member = await FamilyService.get_member(member_id, user_id)
        await member.delete()
        logger.info(f"User {user_id} removed family member {member_id}")

    @staticmethod
    def member_to_response(member: FamilyMember) -> FamilyMemberResponse:
        return FamilyMemberResponse(
            id=str(member.id),
            name=member.name,
            relation=member.relation,
            date_of_birth=member.date_of_birth,
            gender=member.gender,
            blood_group=member.blood_group,
            phone=member.phone,
            created_at=member.created_at,
            updated_at=member.updated_at,
        )
