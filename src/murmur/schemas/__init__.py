# src/murmur/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import Pagination
from .murmur import LikeToggleResponse, MurmurCreate, MurmurPage, MurmurResponse
from .notification import NotificationPage, NotificationResponse, UnreadCountResponse
from .user import (
    AuthResponse,
    FollowResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserPage,
    UserPrivate,
    UserProfile,
    UserProfileView,
    UserSummary,
)

__all__ = [
    "Pagination",
    "LikeToggleResponse", "MurmurCreate", "MurmurPage", "MurmurResponse",
    "NotificationPage", "NotificationResponse", "UnreadCountResponse",
    "AuthResponse", "FollowResponse", "LoginRequest", "PasswordChangeRequest",
    "ProfileUpdateRequest", "RegisterRequest", "UserPage", "UserPrivate",
    "UserProfile", "UserProfileView", "UserSummary",
]
