# Family Members Feature - Schemas

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator
from swasthya.features.family.models import FamilyRelation, GENDERS, BLOOD_GROUPS
from swasthya.features.appointments.time_utils import local_now
from swasthya.shared.validators import normalize_phone, is_valid_phone, parse_iso_date


RELATIONS = [r.value for r in FamilyRelation]


def _check_relation(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in RELATIONS:
        raise ValueError(f"Invalid relation. Must be one of: {', '.join(RELATIONS)}")
    return v


def _check_date_of_birth(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    born = parse_iso_date(v)
    if born is None:
        raise ValueError("Invalid date_of_birth format")
    if born > local_now().date():
        raise ValueError("Date of birth cannot be in the future")
    return v


def _check_gender(v: Optional[str]) -> Optional[str]:
    if v and v not in GENDERS:
        raise ValueError(f"Invalid gender. Must be one of: {', '.join(GENDERS)}")
    return v or None


def _check_blood_group(v: Optional[str]) -> Optional[str]:
    if v and v not in BLOOD_GROUPS:
        raise ValueError(f"Invalid blood group. Must be one of: {', '.join(BLOOD_GROUPS)}")
    return v or None


def _check_phone(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    phone = normalize_phone(v)
    if not is_valid_phone(phone):
        raise ValueError("Invalid phone number format. Must be 10 digits starting with 98 or 97.")
    return phone


class FamilyMemberFields(BaseModel):
    name: Optional[str] = None
    relation: Optional[str] = None
    date_of_birth: Optional[str] = None  # YYYY-MM-DD
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: Optional[str]) -> Optional[str]:
        return _check_date_of_birth(v)

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: Optional[str]) -> Optional[str]:
        return _check_gender(v)

    @field_validator("blood_group")
    @classmethod
    def validate_blood_group(cls, v: Optional[str]) -> Optional[str]:
        return _check_blood_group(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)


class CreateFamilyMemberRequest(FamilyMemberFields):
    """New family member. Missing required fields get their own messages."""
    model_config = ConfigDict(validate_default=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("relation")
    @classmethod
    def validate_relation(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("Relation is required")
        return _check_relation(v)


class UpdateFamilyMemberRequest(FamilyMemberFields):
    """Partial update; an explicit null clears an optional field."""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("relation")
    @classmethod
    def validate_relation(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("Relation cannot be empty")
        return _check_relation(v)


class FamilyMemberResponse(BaseModel):
    id: str
    name: str
    relation: FamilyRelation
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FamilyMemberListResponse(BaseModel):
    family_members: List[FamilyMemberResponse]


class FamilyMemberEnvelope(BaseModel):
    success: bool = True
    family_member: FamilyMemberResponse
