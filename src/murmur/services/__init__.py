# src/murmur/services/__init__.py
"""Business logic services for the Murmur application."""

from .content import MurmurService
from .engagement import LikeService
from .feed import FeedService
from .graph import FollowService
from .identity import UserService
from .notifications import NotificationService
from .reconcile import ReconciliationReport, ReconciliationService

__all__ = [
    "FeedService",
    "FollowService",
    "LikeService",
    "MurmurService",
    "NotificationService",
    "ReconciliationReport",
    "ReconciliationService",
    "UserService",
]
