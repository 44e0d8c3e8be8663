# src/murmur/models/__init__.py
"""SQLAlchemy models for the Murmur application."""

from .follow import Follow
from .like import Like
from .murmur import Murmur
from .notification import Notification, NotificationType
from .user import User

__all__ = [
    "Follow",
    "Like",
    "Murmur",
    "Notification", "NotificationType",
    "User",
]
