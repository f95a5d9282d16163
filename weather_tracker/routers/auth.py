"""
Authentication router.

This module contains registration, login, logout and current-user endpoints.
Successful register/login set the session cookie and also return the token
in the body for clients that send it as a Bearer header.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from weather_tracker.config import Settings
from weather_tracker.core.exceptions import AuthenticationError, ConflictError
from weather_tracker.core.security import create_access_token
from weather_tracker.crud.user import user as crud_user
from weather_tracker.database import get_db
from weather_tracker.dependencies.auth import get_current_user, get_optional_user
from weather_tracker.dependencies.services import get_app_settings
from weather_tracker.models.user import User
from weather_tracker.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    MessageResponse,
    User as UserSchema,
    UserCreate,
    UserLogin,
)
from weather_tracker.utils import audit

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={401: {"description": "Unauthorized"}},
)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session cookie to a response."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    response: Response,
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new user.

    Creates the account, starts a session and returns the user without
    the password hash.

    Raises:
        ConflictError: If the email or username is already taken (409)
    """
    try:
        new_user = await crud_user.create(db, obj_in=user_in)
    except ConflictError:
        audit.log_registration(user_in.email, None, False, ip=_client_ip(request))
        raise
    audit.log_registration(new_user.email, new_user.id, True, ip=_client_ip(request))

    token = create_access_token(new_user.id, settings)
    set_auth_cookie(response, token, settings)

    return AuthResponse(
        message="User registered successfully",
        user=UserSchema.model_validate(new_user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Authenticate with email and password.

    Raises:
        AuthenticationError: If the credentials are invalid (401)
    """
    user_obj = await crud_user.get_by_email(db, email=credentials.email)

    if user_obj is None or not await crud_user.compare_password(user_obj, credentials.password):
        audit.log_login(credentials.email, False, ip=_client_ip(request))
        raise AuthenticationError("Invalid email or password")

    audit.log_login(user_obj.email, True, user_id=user_obj.id, ip=_client_ip(request))

    token = create_access_token(user_obj.id, settings)
    set_auth_cookie(response, token, settings)

    return AuthResponse(
        message="Login successful",
        user=UserSchema.model_validate(user_obj),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: Optional[User] = Depends(get_optional_user),
    settings: Settings = Depends(get_app_settings),
):
    """Clear the session cookie. Works with or without a valid session."""
    if current_user is not None:
        audit.log_logout(current_user.id, ip=_client_ip(request))

    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get the authenticated user."""
    return CurrentUserResponse(user=UserSchema.model_validate(current_user))
