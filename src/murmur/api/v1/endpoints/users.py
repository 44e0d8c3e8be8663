# src/murmur/api/v1/endpoints/users.py
"""User profile and follow-graph endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from murmur.api.v1.dependencies import (
    CurrentUserDep,
    FollowServiceDep,
    LimitDep,
    OptionalUserDep,
    PageDep,
    SessionDep,
    UserServiceDep,
)
from murmur.models import User
from murmur.schemas.common import Pagination
from murmur.schemas.user import FollowResponse, UserPage, UserProfile, UserProfileView

router = APIRouter(prefix="/users", tags=["users"])


def _user_page(users: list[User], total: int, page: int, limit: int) -> UserPage:
    return UserPage(
        users=[UserProfile.model_validate(user) for user in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/search/{query}", response_model=UserPage)
async def search_users(query: str, users: UserServiceDep, page: PageDep, limit: LimitDep) -> UserPage:
    """Find active users by username or display name, most followed first."""
    found, total = users.search(query, page, limit)
    return _user_page(found, total, page, limit)


@router.get("/{user_id}", response_model=UserProfileView)
async def get_user(
    user_id: int,
    users: UserServiceDep,
    follows: FollowServiceDep,
    viewer: OptionalUserDep,
) -> UserProfileView:
    """Return a public profile, annotated for the caller when authenticated."""
    user = users.get_or_404(user_id)
    profile = UserProfileView.model_validate(user)
    if viewer is not None:
        profile.is_own_profile = viewer.id == user.id
        if not profile.is_own_profile:
            profile.is_following = follows.is_following(viewer.id, user.id)
    return profile


@router.post("/{user_id}/follow", response_model=FollowResponse)
async def follow_user(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    users: UserServiceDep,
    follows: FollowServiceDep,
) -> FollowResponse:
    """Follow ``user_id``.

    Raises:
        NotFoundError: If the target does not exist (404).
        ConflictError: On self-follow or an existing edge (409).
    """
    target = users.get_or_404(user_id)
    follows.follow(current_user.id, target.id)
    db.commit()
    db.refresh(target)
    return FollowResponse(is_following=True, followers_count=target.followers_count)


@router.delete("/{user_id}/follow", response_model=FollowResponse)
async def unfollow_user(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    users: UserServiceDep,
    follows: FollowServiceDep,
) -> FollowResponse:
    target = users.get_or_404(user_id)
    follows.unfollow(current_user.id, target.id)
    db.commit()
    db.refresh(target)
    return FollowResponse(is_following=False, followers_count=target.followers_count)


@router.get("/{user_id}/followers", response_model=UserPage)
async def list_followers(
    user_id: int,
    users: UserServiceDep,
    follows: FollowServiceDep,
    page: PageDep,
    limit: LimitDep,
) -> UserPage:
    users.get_or_404(user_id)
    found, total = follows.followers(user_id, page, limit)
    return _user_page(found, total, page, limit)


@router.get("/{user_id}/following", response_model=UserPage)
async def list_following(
    user_id: int,
    users: UserServiceDep,
    follows: FollowServiceDep,
    page: PageDep,
    limit: LimitDep,
) -> UserPage:
    users.get_or_404(user_id)
    found, total = follows.following(user_id, page, limit)
    return _user_page(found, total, page, limit)
