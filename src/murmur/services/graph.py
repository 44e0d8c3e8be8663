"""Relationship graph: follow edges and the follower/following counters."""
from __future__ import annotations

import logging

from sqlalchemy import delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from murmur.core.errors import (
    AlreadyFollowingError,
    NotFollowingError,
    NotFoundError,
    SelfFollowError,
)
from murmur.models import Follow, NotificationType, User
from murmur.services.counters import adjust_counter
from murmur.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class FollowService:
    """Owns the ``follows`` table and keeps user follow counters in step with it."""

    def __init__(self, db: Session, notifications: NotificationService | None = None) -> None:
        self.db = db
        self.notifications = notifications or NotificationService(db)

    def follow(self, follower_id: int, following_id: int) -> Follow:
        """Create the edge ``follower_id -> following_id``.

        The edge, both counter increments and the follow notification are
        written inside one savepoint; if any step fails none of them persist.

        Raises:
            SelfFollowError: If both ids are the same user.
            AlreadyFollowingError: If the edge exists, including when a
                concurrent request inserted it first.
            NotFoundError: If either user does not exist.
        """
        if follower_id == following_id:
            raise SelfFollowError()
        if self.is_following(follower_id, following_id):
            raise AlreadyFollowingError()

        edge = Follow(follower_id=follower_id, following_id=following_id)
        try:
            with self.db.begin_nested():
                self.db.add(edge)
                self.db.flush()
                adjust_counter(self.db, User.following_count, follower_id, 1)
                adjust_counter(self.db, User.followers_count, following_id, 1)
                self.notifications.notify(NotificationType.FOLLOW, following_id, follower_id)
        except IntegrityError as err:
            stored = (
                self.db.query(Follow.id)
                .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
                .first()
            )
            if stored is not None:
                logger.info(
                    "Concurrent follow %s -> %s rejected by unique constraint",
                    follower_id,
                    following_id,
                )
                raise AlreadyFollowingError() from err
            if self.db.get(User, follower_id) is None or self.db.get(User, following_id) is None:
                raise NotFoundError("User not found") from err
            raise

        logger.info("User %s followed %s", follower_id, following_id)
        return edge

    def unfollow(self, follower_id: int, following_id: int) -> None:
        """Remove the edge and decrement both counters, floored at zero.

        Raises:
            NotFollowingError: If there is no such edge.
        """
        with self.db.begin_nested():
            result = self.db.execute(
                delete(Follow)
                .where(Follow.follower_id == follower_id, Follow.following_id == following_id)
                .execution_options(synchronize_session="fetch")
            )
            if result.rowcount == 0:
                raise NotFollowingError()
            adjust_counter(self.db, User.following_count, follower_id, -1)
            adjust_counter(self.db, User.followers_count, following_id, -1)

        logger.info("User %s unfollowed %s", follower_id, following_id)

    def is_following(self, follower_id: int, following_id: int) -> bool:
        return (
            self.db.query(Follow.id)
            .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
            .first()
            is not None
        )

    def followers(self, user_id: int, page: int = 1, limit: int = 20) -> tuple[list[User], int]:
        """Return users following ``user_id``, most recent edge first."""
        query = self.db.query(Follow).filter(Follow.following_id == user_id)
        total = query.count()
        edges = (
            query.order_by(Follow.created_at.desc(), Follow.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [edge.follower for edge in edges], total

    def following(self, user_id: int, page: int = 1, limit: int = 20) -> tuple[list[User], int]:
        """Return users that ``user_id`` follows, most recent edge first."""
        query = self.db.query(Follow).filter(Follow.follower_id == user_id)
        total = query.count()
        edges = (
            query.order_by(Follow.created_at.desc(), Follow.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [edge.following for edge in edges], total

    def follow_counts(self, user_id: int) -> dict[str, int]:
        """Count followers and following straight from the edge table."""
        followers = (
            self.db.query(func.count(Follow.id)).filter(Follow.following_id == user_id).scalar()
            or 0
        )
        following = (
            self.db.query(func.count(Follow.id)).filter(Follow.follower_id == user_id).scalar()
            or 0
        )
        return {"followers_count": int(followers), "following_count": int(following)}

    def remove_all_for_user(self, user_id: int) -> int:
        """Delete every edge touching ``user_id``.

        The other endpoint's counters are left as they are until the next
        reconciliation run.
        """
        result = self.db.execute(
            delete(Follow)
            .where(or_(Follow.follower_id == user_id, Follow.following_id == user_id))
            .execution_options(synchronize_session="fetch")
        )
        logger.info("Removed %s follow edges for user %s", result.rowcount, user_id)
        return result.rowcount
