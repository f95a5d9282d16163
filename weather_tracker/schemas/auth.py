"""
Authentication schemas.

This module contains Pydantic schemas for authentication requests and responses.
"""

from datetime import datetime
from typing import List

from pydantic import EmailStr, Field, field_validator

from weather_tracker.schemas.base import BaseSchema
from weather_tracker.schemas.cities import TrackedCity


class UserCreate(BaseSchema):
    """Schema for registering a new user."""
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")
    username: str = Field(..., min_length=3, max_length=30)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserLogin(BaseSchema):
    """Schema for logging in."""
    email: EmailStr
    password: str = Field(..., min_length=1, description="Password is required")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserUpdate(BaseSchema):
    """Schema for updating profile fields."""
    username: str | None = Field(None, min_length=3, max_length=30)
    password: str | None = Field(None, min_length=6)


class User(BaseSchema):
    """Public user representation. Never carries the password hash."""
    id: int
    email: EmailStr
    username: str
    tracked_cities: List[TrackedCity] = []
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseSchema):
    """Response for register and login."""
    message: str
    user: User
    token: str


class CurrentUserResponse(BaseSchema):
    user: User


class MessageResponse(BaseSchema):
    message: str
