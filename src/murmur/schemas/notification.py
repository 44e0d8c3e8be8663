"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .user import UserSummary


class NotificationMurmur(BaseModel):
    id: int
    content: str

    model_config = ConfigDict(from_attributes=True)


class NotificationResponse(BaseModel):
    id: int
    type: Literal["like", "follow", "reply"]
    user_id: int
    actor_id: int
    murmur_id: int | None
    is_read: bool
    created_at: datetime
    actor: UserSummary
    murmur: NotificationMurmur | None = None

    model_config = ConfigDict(from_attributes=True)


class NotificationPage(BaseModel):
    """Cursor-paginated slice of a user's inbox."""

    notifications: list[NotificationResponse]
    has_more: bool
    next_cursor: int | None


class UnreadCountResponse(BaseModel):
    count: int
