"""User-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import Pagination

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def _check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one lowercase letter, "
            "one uppercase letter, and one number"
        )
    return value


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    username: str = Field(..., min_length=3, max_length=30, description="Unique handle")
    email: str = Field(..., max_length=255, description="Unique email address")
    display_name: str = Field(..., min_length=1, max_length=50, description="Public name")
    password: str = Field(..., min_length=8, description="Plain-text password")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames are restricted to letters, digits and underscores."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_strength(v)


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    identifier: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    """Schema for updating user profile information."""

    display_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=160)
    avatar: str | None = Field(None, max_length=500)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password_strength(v)


class UserSummary(BaseModel):
    """Minimal author/actor card embedded in other payloads."""

    id: int
    username: str
    display_name: str
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserSummary):
    """Public profile including cached social counters."""

    bio: str | None = None
    followers_count: int
    following_count: int
    murmurs_count: int
    created_at: datetime


class UserProfileView(UserProfile):
    """Profile as seen by a particular viewer."""

    is_following: bool = False
    is_own_profile: bool = False


class UserPrivate(UserProfile):
    """The authenticated user's own account record."""

    email: str
    is_active: bool
    last_login: datetime | None = None
    updated_at: datetime


class UserPage(BaseModel):
    users: list[UserProfile]
    pagination: Pagination


class AuthResponse(BaseModel):
    """Response returned after registration or login."""

    user: UserPrivate
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always 'bearer')")


class FollowResponse(BaseModel):
    is_following: bool
    followers_count: int
