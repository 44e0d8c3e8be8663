"""Notification fanout: deduplicated notices for likes, follows and replies."""
from __future__ import annotations

import logging

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from murmur.models import Murmur, Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """Derives notification rows from primary actions and serves the inbox."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def notify(
        self,
        type_: NotificationType | str,
        recipient_id: int,
        actor_id: int,
        murmur_id: int | None = None,
    ) -> Notification | None:
        """Find or create the notification for ``(type, recipient, actor, murmur)``.

        Returns:
            None when the actor is the recipient; otherwise the existing row if
            one matches the key, else a freshly inserted one.
        """
        if recipient_id == actor_id:
            return None

        kind = NotificationType(type_).value
        existing = self._find(kind, recipient_id, actor_id, murmur_id)
        if existing is not None:
            logger.debug(
                "Reusing %s notification %s for user %s", kind, existing.id, recipient_id
            )
            return existing

        notification = Notification(
            type=kind,
            user_id=recipient_id,
            actor_id=actor_id,
            murmur_id=murmur_id,
            is_read=False,
        )
        try:
            with self.db.begin_nested():
                self.db.add(notification)
                self.db.flush()
        except IntegrityError:
            existing = self._find(kind, recipient_id, actor_id, murmur_id)
            if existing is None:
                raise
            logger.debug(
                "Concurrent %s notification for user %s already stored", kind, recipient_id
            )
            return existing
        logger.info("Created %s notification for user %s from %s", kind, recipient_id, actor_id)
        return notification

    def _find(
        self, kind: str, recipient_id: int, actor_id: int, murmur_id: int | None
    ) -> Notification | None:
        query = self.db.query(Notification).filter(
            Notification.type == kind,
            Notification.user_id == recipient_id,
            Notification.actor_id == actor_id,
        )
        if murmur_id is None:
            query = query.filter(Notification.murmur_id.is_(None))
        else:
            query = query.filter(Notification.murmur_id == murmur_id)
        return query.first()

    def _visible(self, user_id: int) -> Query:
        """Inbox rows for ``user_id``, minus those about soft-deleted murmurs."""
        return (
            self.db.query(Notification)
            .outerjoin(Murmur, Notification.murmur_id == Murmur.id)
            .filter(
                Notification.user_id == user_id,
                or_(Notification.murmur_id.is_(None), Murmur.is_deleted.is_(False)),
            )
        )

    def list_for_user(
        self,
        user_id: int,
        limit: int = 20,
        cursor: int | None = None,
    ) -> tuple[list[Notification], bool, int | None]:
        """Return one page of a user's notifications, newest first.

        Notifications about a murmur that has since been deleted are left out.

        Args:
            user_id: Recipient whose inbox is read.
            limit: Page size.
            cursor: Id of the last notification of the previous page.

        Returns:
            ``(items, has_more, next_cursor)``; ``next_cursor`` is None on the
            last page.
        """
        query = self._visible(user_id)
        if cursor is not None:
            query = query.filter(Notification.id < cursor)

        rows = (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit + 1)
            .all()
        )
        has_more = len(rows) > limit
        items = rows[:limit]
        next_cursor = items[-1].id if has_more and items else None
        return items, has_more, next_cursor

    def mark_read(self, notification_id: int, user_id: int) -> int:
        """Mark one notification read; returns the number of rows touched."""
        result = self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def mark_all_read(self, user_id: int) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def unread_count(self, user_id: int) -> int:
        return self._visible(user_id).filter(Notification.is_read.is_(False)).count()

    def delete(self, notification_id: int, user_id: int) -> int:
        """Delete one notification owned by ``user_id``; returns rows removed."""
        result = self.db.execute(
            delete(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
