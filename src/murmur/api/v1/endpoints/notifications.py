# src/murmur/api/v1/endpoints/notifications.py
"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from murmur.api.v1.dependencies import CurrentUserDep, NotificationServiceDep, SessionDep
from murmur.core.settings import settings
from murmur.schemas.notification import (
    NotificationPage,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=NotificationPage)
async def list_notifications(
    current_user: CurrentUserDep,
    notifications: NotificationServiceDep,
    limit: int = Query(settings.notifications_page_size, ge=1, le=settings.max_page_size),
    cursor: int | None = Query(None, description="Id of the last notification already seen"),
) -> NotificationPage:
    """Return the caller's notifications newest first using cursor pagination."""
    items, has_more, next_cursor = notifications.list_for_user(current_user.id, limit, cursor)
    return NotificationPage(
        notifications=[NotificationResponse.model_validate(item) for item in items],
        has_more=has_more,
        next_cursor=next_cursor,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: CurrentUserDep, notifications: NotificationServiceDep
) -> UnreadCountResponse:
    return UnreadCountResponse(count=notifications.unread_count(current_user.id))


@router.put("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    current_user: CurrentUserDep,
    db: SessionDep,
    notifications: NotificationServiceDep,
) -> Response:
    notifications.mark_all_read(current_user.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifications: NotificationServiceDep,
) -> Response:
    """Mark one notification read; another user's id is silently ignored."""
    notifications.mark_read(notification_id, current_user.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifications: NotificationServiceDep,
) -> Response:
    notifications.delete(notification_id, current_user.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
