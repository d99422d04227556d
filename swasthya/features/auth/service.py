from datetime import datetime, timedelta
from typing import Optional
from beanie import PydanticObjectId
from bson.errors import InvalidId
from swasthya.config import settings
from swasthya.features.auth.models import User, PhoneOtp
from swasthya.features.auth.schemas import (
    RegisterRequest,
    LoginRequest,
    VerifyOtpRequest,
    UserResponse,
)
from swasthya.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    generate_otp,
    hash_otp,
    otp_matches,
)
from swasthya.core.sms import send_sms
from swasthya.shared.exceptions import (
    BadRequestException,
    CredentialsException,
    ConflictException,
)
from swasthya.core.logging import logger


def utcnow() -> datetime:
    """Clock used for OTP expiry."""
    return datetime.utcnow()


class AuthService:
    """Authentication service for handling auth business logic."""

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(str(user.id), user.role.value)

    @staticmethod
    async def register(request: RegisterRequest) -> tuple[User, str]:
        """
        Register a new account with email and password.

        Returns:
            tuple: (user, access_token)
        """
        email = request.email.lower()
        existing_user = await User.find_one(User.email == email)
        if existing_user:
            raise ConflictException("Email already registered")

        if request.phone:
            phone_owner = await User.find_one(User.phone == request.phone)
            if phone_owner:
                raise ConflictException("Phone number already registered")

        user = User(
            email=email,
            phone=request.phone,
            name=request.name.strip(),
            password_hash=get_password_hash(request.password),
        )
        await user.insert()

        logger.info(f"Registered user {user.id} ({email})")
        return user, AuthService.issue_token(user)

    @staticmethod
    async def login(request: LoginRequest) -> tuple[User, str]:
        """
        Authenticate user and return access token.

        Returns:
            tuple: (user, access_token)
        """
        user = await User.find_one(User.email == request.email.lower())
        if not user or not user.password_hash:
            raise CredentialsException("Invalid email or password")

        if not verify_password(request.password, user.password_hash):
            raise CredentialsException("Invalid email or password")

        if not user.is_active:
            raise CredentialsException("Account is inactive")

        return user, AuthService.issue_token(user)

    @staticmethod
    async def send_login_otp(phone: str) -> None:
        """Issue a fresh SMS code for ``phone``, retiring any earlier ones."""
        pending = await PhoneOtp.find(
            PhoneOtp.phone == phone,
            PhoneOtp.used == False
        ).to_list()
        for otp in pending:
            otp.used = True
            await otp.save()

        code = generate_otp()
        otp = PhoneOtp(
            phone=phone,
            code_hash=hash_otp(phone, code),
            expires_at=utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
        )
        await otp.insert()

        await send_sms(
            phone,
            f"Your Swasthya login code is {code}. It expires in {settings.OTP_EXPIRE_MINUTES} minutes.",
        )
        logger.info(f"Sent login OTP to {phone}")

    @staticmethod
    async def verify_login_otp(request: VerifyOtpRequest) -> tuple[User, str]:
        """
        Check an SMS code and sign the phone owner in, creating the account
        on first login.

        Returns:
            tuple: (user, access_token)
        """
        otp = await PhoneOtp.find(
            PhoneOtp.phone == request.phone,
            PhoneOtp.used == False
        ).sort("-created_at").first_or_none()
        if not otp:
            raise BadRequestException("Invalid or expired OTP code")

        # Expired rows are left for the TTL index to remove
        if otp.expires_at < utcnow():
            raise BadRequestException("OTP code has expired")

        if otp.attempts >= settings.OTP_MAX_ATTEMPTS:
            otp.used = True
            await otp.save()
            raise BadRequestException("Too many attempts. Please request a new code")

        if not otp_matches(request.phone, request.code, otp.code_hash):
            otp.attempts += 1
            await otp.save()
            logger.warning(f"Wrong OTP for {request.phone} (attempt {otp.attempts})")
            raise BadRequestException("Invalid or expired OTP code")

        otp.used = True
        await otp.save()

        user = await User.find_one(User.phone == request.phone)
        if not user:
            user = User(
                phone=request.phone,
                name=(request.name or "").strip() or request.phone,
                phone_verified=True,
            )
            await user.insert()
            logger.info(f"Created user {user.id} from phone login {request.phone}")
        elif not user.phone_verified:
            user.phone_verified = True
            await user.save()

        if not user.is_active:
            raise CredentialsException("Account is inactive")

        return user, AuthService.issue_token(user)

    @staticmethod
    async def get_user_by_id(user_id: str) -> Optional[User]:
        """Get user by ID."""
        try:
            return await User.get(PydanticObjectId(user_id))
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def user_to_response(user: User) -> UserResponse:
        return UserResponse(
            id=str(user.id),
            email=user.email,
            phone=user.phone,
            name=user.name,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
