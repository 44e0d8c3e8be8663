# src/murmur/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .murmurs import router as murmurs_router
from .notifications import router as notifications_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "murmurs_router",
    "notifications_router",
    "system_router",
    "users_router",
]
