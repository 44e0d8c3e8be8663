# src/murmur/api/v1/endpoints/murmurs.py
"""Murmur, reply and like endpoints for the Murmur API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Response, status

from murmur.api.v1.dependencies import (
    CurrentUserDep,
    FeedServiceDep,
    LikeServiceDep,
    LimitDep,
    MurmurServiceDep,
    OptionalUserDep,
    PageDep,
    SessionDep,
)
from murmur.core.errors import NotFoundError
from murmur.models import Murmur, User
from murmur.schemas.common import Pagination
from murmur.schemas.murmur import LikeToggleResponse, MurmurCreate, MurmurPage, MurmurResponse
from murmur.schemas.user import UserPage, UserProfile
from murmur.services import LikeService, MurmurService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/murmurs", tags=["murmurs"])

NOT_OWNED = "Murmur not found or you do not have permission to delete it"


def _murmur_page(result: tuple[list[MurmurResponse], int], page: int, limit: int) -> MurmurPage:
    items, total = result
    return MurmurPage(murmurs=items, pagination=Pagination.build(page, limit, total))


def _owned_murmur(murmurs: MurmurService, murmur_id: int, user: User) -> Murmur:
    # Someone else's murmur is reported exactly like a missing one.
    murmur = murmurs.find_by_id(murmur_id)
    if murmur is None or murmur.user_id != user.id:
        raise NotFoundError(NOT_OWNED)
    return murmur


def toggle_like(likes: LikeService, murmurs: MurmurService, user: User, murmur_id: int) -> bool:
    """Flip the caller's like on ``murmur_id`` and return the new state.

    Check-then-act: two concurrent toggles from the same user can both take
    the same branch; ``like`` and ``unlike`` are idempotent so the edge and
    counter stay consistent either way.
    """
    if murmurs.find_by_id(murmur_id) is None:
        raise NotFoundError("Murmur not found")
    if likes.is_liked(user.id, murmur_id):
        likes.unlike(user.id, murmur_id)
        return False
    likes.like(user.id, murmur_id)
    return True


@router.get("/timeline", response_model=MurmurPage)
async def get_timeline(
    current_user: CurrentUserDep, feed: FeedServiceDep, page: PageDep, limit: LimitDep
) -> MurmurPage:
    """Root murmurs from followed users and the caller, newest first."""
    return _murmur_page(feed.timeline(current_user, page, limit), page, limit)


@router.get("/", response_model=MurmurPage)
async def list_murmurs(
    feed: FeedServiceDep,
    viewer: OptionalUserDep,
    page: PageDep,
    limit: LimitDep,
    exclude_own: bool = Query(False, description="Hide the caller's own murmurs"),
) -> MurmurPage:
    """Public feed of every root murmur."""
    exclude_user_id = viewer.id if exclude_own and viewer is not None else None
    result = feed.public_feed(page, limit, viewer=viewer, exclude_user_id=exclude_user_id)
    return _murmur_page(result, page, limit)


@router.get("/trending", response_model=MurmurPage)
async def list_trending(
    feed: FeedServiceDep, viewer: OptionalUserDep, page: PageDep, limit: LimitDep
) -> MurmurPage:
    return _murmur_page(feed.trending(page, limit, viewer=viewer), page, limit)


@router.get("/search", response_model=MurmurPage)
async def search_murmurs(
    feed: FeedServiceDep,
    viewer: OptionalUserDep,
    page: PageDep,
    limit: LimitDep,
    q: str = Query(..., min_length=1, max_length=100, description="Substring to match"),
) -> MurmurPage:
    return _murmur_page(feed.search(q, page, limit, viewer=viewer), page, limit)


@router.get("/user/{user_id}", response_model=MurmurPage)
async def list_user_murmurs(
    user_id: int,
    feed: FeedServiceDep,
    viewer: OptionalUserDep,
    page: PageDep,
    limit: LimitDep,
    include_replies: bool = Query(True, description="Include the user's replies"),
) -> MurmurPage:
    result = feed.user_feed(
        user_id, page, limit, viewer=viewer, include_replies=include_replies
    )
    return _murmur_page(result, page, limit)


@router.post("/", response_model=MurmurResponse, status_code=status.HTTP_201_CREATED)
async def create_murmur(
    payload: MurmurCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    murmurs: MurmurServiceDep,
    feed: FeedServiceDep,
) -> MurmurResponse:
    murmur = murmurs.create(current_user.id, payload.content)
    db.commit()
    return feed.murmur(murmur.id, current_user)


@router.get("/{murmur_id}", response_model=MurmurResponse)
async def get_murmur(murmur_id: int, feed: FeedServiceDep, viewer: OptionalUserDep) -> MurmurResponse:
    return feed.murmur(murmur_id, viewer)


@router.delete("/{murmur_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_murmur(
    murmur_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    murmurs: MurmurServiceDep,
) -> Response:
    """Soft-delete one of the caller's murmurs.

    Raises:
        NotFoundError: If the murmur is missing, deleted or not the caller's.
    """
    murmur = _owned_murmur(murmurs, murmur_id, current_user)
    murmurs.soft_delete(murmur.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{murmur_id}/like", response_model=LikeToggleResponse)
async def like_murmur(
    murmur_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    likes: LikeServiceDep,
    murmurs: MurmurServiceDep,
) -> LikeToggleResponse:
    """Toggle the caller's like and report the fresh count."""
    is_liked = toggle_like(likes, murmurs, current_user, murmur_id)
    db.commit()
    return LikeToggleResponse(is_liked=is_liked, likes_count=likes.like_count(murmur_id))


@router.delete("/{murmur_id}/like", response_model=LikeToggleResponse)
async def unlike_murmur(
    murmur_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    likes: LikeServiceDep,
    murmurs: MurmurServiceDep,
) -> LikeToggleResponse:
    if murmurs.find_by_id(murmur_id) is None:
        raise NotFoundError("Murmur not found")
    likes.unlike(current_user.id, murmur_id)
    db.commit()
    return LikeToggleResponse(is_liked=False, likes_count=likes.like_count(murmur_id))


@router.get("/{murmur_id}/likes", response_model=UserPage)
async def list_likers(
    murmur_id: int,
    likes: LikeServiceDep,
    murmurs: MurmurServiceDep,
    page: PageDep,
    limit: LimitDep,
) -> UserPage:
    if murmurs.find_by_id(murmur_id) is None:
        raise NotFoundError("Murmur not found")
    users, total = likes.likers(murmur_id, page, limit)
    return UserPage(
        users=[UserProfile.model_validate(user) for user in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{murmur_id}/replies", response_model=MurmurPage)
async def list_replies(
    murmur_id: int,
    feed: FeedServiceDep,
    viewer: OptionalUserDep,
    page: PageDep,
    limit: LimitDep,
) -> MurmurPage:
    """Replies in conversation order, oldest first."""
    return _murmur_page(feed.replies(murmur_id, page, limit, viewer=viewer), page, limit)


@router.post(
    "/{murmur_id}/replies",
    response_model=MurmurResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reply(
    murmur_id: int,
    payload: MurmurCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    murmurs: MurmurServiceDep,
    feed: FeedServiceDep,
) -> MurmurResponse:
    reply = murmurs.create(current_user.id, payload.content, reply_to_id=murmur_id)
    db.commit()
    return feed.murmur(reply.id, current_user)


@router.delete("/{murmur_id}/replies/{reply_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reply(
    murmur_id: int,
    reply_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    murmurs: MurmurServiceDep,
) -> Response:
    reply = _owned_murmur(murmurs, reply_id, current_user)
    if reply.reply_to_id != murmur_id:
        raise NotFoundError("Reply not found")
    murmurs.soft_delete(reply.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
