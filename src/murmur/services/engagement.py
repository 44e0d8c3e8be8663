"""Engagement store: like edges and the like-count aggregate."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from murmur.core.errors import NotFoundError
from murmur.models import Like, Murmur, NotificationType, User
from murmur.services.counters import adjust_counter
from murmur.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class LikeService:
    """Owns the ``likes`` table.

    Like/unlike are individually idempotent. Deciding between them (the
    toggle) is left to the caller, which checks :meth:`is_liked` first.
    """

    def __init__(self, db: Session, notifications: NotificationService | None = None) -> None:
        self.db = db
        self.notifications = notifications or NotificationService(db)

    def _find(self, user_id: int, murmur_id: int) -> Like | None:
        return (
            self.db.query(Like)
            .filter(Like.user_id == user_id, Like.murmur_id == murmur_id)
            .first()
        )

    def like(self, user_id: int, murmur_id: int) -> Like:
        """Record that ``user_id`` likes ``murmur_id``.

        An existing edge is returned untouched. A new edge bumps the murmur's
        ``likes_count`` and notifies its author.

        Raises:
            NotFoundError: If the murmur is absent or deleted.
        """
        existing = self._find(user_id, murmur_id)
        if existing is not None:
            return existing

        murmur = (
            self.db.query(Murmur)
            .filter(Murmur.id == murmur_id, Murmur.is_deleted.is_(False))
            .first()
        )
        if murmur is None:
            raise NotFoundError("Murmur not found")

        edge = Like(user_id=user_id, murmur_id=murmur_id)
        try:
            with self.db.begin_nested():
                self.db.add(edge)
                self.db.flush()
                adjust_counter(self.db, Murmur.likes_count, murmur_id, 1)
                self.notifications.notify(NotificationType.LIKE, murmur.user_id, user_id, murmur_id)
        except IntegrityError:
            # Lost a race with an identical request; the other insert won.
            logger.info("Duplicate like %s -> %s resolved to existing edge", user_id, murmur_id)
            existing = self._find(user_id, murmur_id)
            if existing is None:
                raise
            return existing

        logger.info("User %s liked murmur %s", user_id, murmur_id)
        return edge

    def unlike(self, user_id: int, murmur_id: int) -> bool:
        """Remove the like edge; returns False if there was nothing to remove."""
        with self.db.begin_nested():
            result = self.db.execute(
                delete(Like)
                .where(Like.user_id == user_id, Like.murmur_id == murmur_id)
                .execution_options(synchronize_session="fetch")
            )
            if result.rowcount == 0:
                logger.debug("Unlike %s -> %s was a no-op", user_id, murmur_id)
                return False
            adjust_counter(self.db, Murmur.likes_count, murmur_id, -1)

        logger.info("User %s unliked murmur %s", user_id, murmur_id)
        return True

    def is_liked(self, user_id: int, murmur_id: int) -> bool:
        return self._find(user_id, murmur_id) is not None

    def like_count(self, murmur_id: int) -> int:
        """Count likes from the edge table rather than the cached column."""
        return self.db.query(func.count(Like.id)).filter(Like.murmur_id == murmur_id).scalar() or 0

    def like_counts(self, murmur_ids: Iterable[int]) -> dict[int, int]:
        """Bulk form of :meth:`like_count`; every requested id is present in the result."""
        ids = list(murmur_ids)
        counts = dict.fromkeys(ids, 0)
        if not ids:
            return counts
        rows = (
            self.db.query(Like.murmur_id, func.count(Like.id))
            .filter(Like.murmur_id.in_(ids))
            .group_by(Like.murmur_id)
            .all()
        )
        for murmur_id, count in rows:
            counts[murmur_id] = int(count)
        return counts

    def liked_ids(self, user_id: int, murmur_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``murmur_ids`` that ``user_id`` has liked."""
        ids = list(murmur_ids)
        if not ids:
            return set()
        rows = (
            self.db.query(Like.murmur_id)
            .filter(Like.user_id == user_id, Like.murmur_id.in_(ids))
            .all()
        )
        return {murmur_id for (murmur_id,) in rows}

    def likers(self, murmur_id: int, page: int = 1, limit: int = 20) -> tuple[list[User], int]:
        """Return users who liked ``murmur_id``, most recent first."""
        query = self.db.query(Like).filter(Like.murmur_id == murmur_id)
        total = query.count()
        likes = (
            query.order_by(Like.created_at.desc(), Like.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [like.user for like in likes], total

    def delete_all_for_murmur(self, murmur_id: int) -> int:
        result = self.db.execute(
            delete(Like)
            .where(Like.murmur_id == murmur_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_all_for_user(self, user_id: int) -> int:
        """Drop every like cast by ``user_id``.

        Cached ``likes_count`` values on the affected murmurs go stale until
        the reconciler runs.
        """
        result = self.db.execute(
            delete(Like)
            .where(Like.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
