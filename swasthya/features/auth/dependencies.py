from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from swasthya.features.auth.models import User, UserRole
from swasthya.features.auth.service import AuthService
from swasthya.core.security import decode_token
from swasthya.shared.exceptions import CredentialsException, ForbiddenException


# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Resolve the signed-in user from the bearer token.

    A missing header yields "Unauthorized"; a bad or expired token yields
    "Invalid authentication credentials".
    """
    if credentials is None:
        raise CredentialsException("Unauthorized")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise CredentialsException("Invalid authentication credentials")

    user = await AuthService.get_user_by_id(payload["sub"])
    if user is None:
        raise CredentialsException("User not found")

    if not user.is_active:
        raise CredentialsException("Inactive user")

    return user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency restricting a route to platform administrators."""
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenException("Forbidden")
    return current_user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    """The signed-in user when a valid token is sent, otherwise None."""
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None:
        return None

    user = await AuthService.get_user_by_id(payload["sub"])
    if user is None or not user.is_active:
        return None

    return user
