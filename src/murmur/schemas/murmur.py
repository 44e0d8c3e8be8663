"""Murmur-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import Pagination
from .user import UserSummary


class MurmurCreate(BaseModel):
    """Schema for creating a new murmur or reply."""

    content: str = Field(..., description="Murmur text; length is checked against MURMUR_MAX_LENGTH")


class MurmurResponse(BaseModel):
    """Schema for murmur information returned by the API.

    ``likes_count`` is recomputed from the like table when a murmur is served
    through the feed layer; ``is_liked_by_user`` is False for anonymous viewers.
    """

    id: int
    user_id: int
    content: str
    reply_to_id: int | None
    likes_count: int
    replies_count: int
    retweets_count: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary = Field(validation_alias="author")
    is_liked_by_user: bool = False

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MurmurPage(BaseModel):
    murmurs: list[MurmurResponse]
    pagination: Pagination


class LikeToggleResponse(BaseModel):
    is_liked: bool
    likes_count: int
