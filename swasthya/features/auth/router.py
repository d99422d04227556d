from fastapi import APIRouter, Depends, status
from swasthya.config import settings
from swasthya.features.auth.schemas import (
    RegisterRequest,
    LoginRequest,
    SendOtpRequest,
    VerifyOtpRequest,
    TokenResponse,
    UserResponse,
    OtpSentResponse,
)
from swasthya.features.auth.service import AuthService
from swasthya.features.auth.dependencies import get_current_user
from swasthya.features.auth.models import User


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Create an account with email and password.

    - **name**: Full name
    - **email**: Email address
    - **password**: At least 8 characters with a letter and a digit
    - **phone**: Optional Nepali mobile number (98/97 + 8 digits)
    """
    user, access_token = await AuthService.register(request)

    return TokenResponse(access_token=access_token, user=AuthService.user_to_response(user))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Authenticate user and return access token.

    - **email**: User's email address
    - **password**: User's password
    """
    user, access_token = await AuthService.login(request)

    return TokenResponse(access_token=access_token, user=AuthService.user_to_response(user))


@router.post("/otp/send", response_model=OtpSentResponse)
async def send_otp(request: SendOtpRequest):
    """
    Send a 6-digit login code by SMS.

    Any code issued earlier for the same phone stops working.
    """
    await AuthService.send_login_otp(request.phone)

    return OtpSentResponse(
        message="OTP sent",
        expires_in_minutes=settings.OTP_EXPIRE_MINUTES,
    )


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_otp(request: VerifyOtpRequest):
    """
    Verify an SMS login code. First-time phones get a new account.
    """
    user, access_token = await AuthService.verify_login_otp(request)

    return TokenResponse(access_token=access_token, user=AuthService.user_to_response(user))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the current user's profile."""
    return AuthService.user_to_response(current_user)
