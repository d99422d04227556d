from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from swasthya.features.auth.models import UserRole
from swasthya.shared.validators import normalize_phone, is_valid_phone


# Request Schemas
class RegisterRequest(BaseModel):
    """Account registration request schema."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    phone: Optional[str] = None

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not any(c.isalpha() for c in v):
            raise ValueError('Password must contain at least one letter')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        phone = normalize_phone(v)
        if not is_valid_phone(phone):
            raise ValueError('Invalid phone number format. Must be 10 digits starting with 98 or 97.')
        return phone


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class SendOtpRequest(BaseModel):
    """Request an SMS login code."""

    phone: str

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        phone = normalize_phone(v)
        if not is_valid_phone(phone):
            raise ValueError('Invalid phone number format. Must be 10 digits starting with 98 or 97.')
        return phone


class VerifyOtpRequest(SendOtpRequest):
    """Exchange an SMS login code for an access token."""

    code: str = Field(..., min_length=6, max_length=6, pattern=r'^\d{6}$')
    name: Optional[str] = Field(None, max_length=100)


# Response Schemas
class UserResponse(BaseModel):
    """User response schema."""

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TokenResponse(BaseModel):
    """Access token with the authenticated user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class OtpSentResponse(BaseModel):
    success: bool = True
    message: str
    expires_in_minutes: int
