# Clinic schemas
from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field, model_validator


class RegisterClinicRequest(BaseModel):
    """Request schema for registering a clinic."""
    name: str = Field(..., min_length=2, max_length=200)
    slug: Optional[str] = Field(None, min_length=3, max_length=60, pattern=r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)


class ClinicResponse(BaseModel):
    """Response schema for clinic data."""
    id: str
    name: str
    slug: str
    address: Optional[str] = ""
    phone: Optional[str] = ""
    email: Optional[str] = ""
    verified: bool
    claimed_by_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ClinicInfoResponse(BaseModel):
    """Public clinic details shown on the booking page."""
    id: str
    name: str
    slug: str
    address: Optional[str] = ""
    phone: Optional[str] = ""
    verified: bool


class ClinicListResponse(BaseModel):
    clinics: List[ClinicResponse]
    total: int


class VerifyClinicRequest(BaseModel):
    """Admin decision on a pending clinic."""
    action: Literal["approve", "reject"]
    reason: Optional[str] = None

    @model_validator(mode="after")
    def require_reason_for_rejection(self):
        if self.action == "reject" and not (self.reason and self.reason.strip()):
            raise ValueError("Rejection reason is required")
        return self
