"""
Authentication dependencies.

This module contains dependency injection functions that resolve the
session token on a request to a user record.
"""

from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from weather_tracker.config import Settings
from weather_tracker.core.exceptions import AuthenticationError
from weather_tracker.core.security import decode_access_token
from weather_tracker.crud.user import user as user_crud
from weather_tracker.database import get_db
from weather_tracker.dependencies.services import get_app_settings
from weather_tracker.models.user import User
from weather_tracker.utils import audit

# Bearer token extractor; the cookie is checked first
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_from_request(
    request: Request,
    settings: Settings,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """
    Extract the session token from the auth cookie or the Authorization header.

    The cookie takes precedence when both are present.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency that requires authentication.

    Returns:
        The authenticated user

    Raises:
        AuthenticationError: "Authentication required", "Token expired",
            "Invalid token" or "User not found"
    """
    client_ip = request.client.host if request.client else None

    token = get_token_from_request(request, settings, credentials)
    if not token:
        audit.log_auth_failure("Authentication required", ip=client_ip)
        raise AuthenticationError("Authentication required")

    try:
        user_id = decode_access_token(token, settings)
    except AuthenticationError as e:
        audit.log_auth_failure(e.message, ip=client_ip)
        raise

    user_obj = await user_crud.get(db, user_id)
    if user_obj is None:
        audit.log_auth_failure("User not found", ip=client_ip)
        raise AuthenticationError("User not found")

    return user_obj


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Dependency that optionally resolves the user.

    A missing, expired or invalid token leaves the request unauthenticated
    instead of failing it.
    """
    token = get_token_from_request(request, settings, credentials)
    if not token:
        return None

    try:
        user_id = decode_access_token(token, settings)
    except AuthenticationError:
        return None

    return await user_crud.get(db, user_id)
