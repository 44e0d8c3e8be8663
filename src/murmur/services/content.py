"""Content store: murmurs, the reply tree and soft deletion."""
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from murmur.core.errors import NotFoundError, ValidationError
from murmur.core.settings import settings
from murmur.db.time import utcnow
from murmur.models import Follow, Murmur, NotificationType, User
from murmur.services.counters import adjust_counter
from murmur.services.engagement import LikeService
from murmur.services.notifications import NotificationService

logger = logging.getLogger(__name__)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MurmurService:
    """Owns the ``murmurs`` table and the murmur/reply counters derived from it."""

    def __init__(
        self,
        db: Session,
        likes: LikeService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self.db = db
        self.notifications = notifications or NotificationService(db)
        self.likes = likes or LikeService(db, self.notifications)

    def _visible(self) -> Query[Murmur]:
        return self.db.query(Murmur).filter(Murmur.is_deleted.is_(False))

    @staticmethod
    def _page(query: Query[Murmur], page: int, limit: int) -> tuple[list[Murmur], int]:
        total = query.count()
        items = (
            query.order_by(Murmur.created_at.desc(), Murmur.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def create(self, user_id: int, content: str, reply_to_id: int | None = None) -> Murmur:
        """Publish a murmur, or a reply when ``reply_to_id`` is given.

        Root murmurs count toward the author's ``murmurs_count``. Replies
        instead bump the parent's ``replies_count`` and notify its author.

        Raises:
            ValidationError: If the trimmed content is empty or too long.
            NotFoundError: If the parent is absent or deleted.
        """
        text = (content or "").strip()
        if not 1 <= len(text) <= settings.murmur_max_length:
            raise ValidationError(
                f"Content must be between 1 and {settings.murmur_max_length} characters"
            )

        parent: Murmur | None = None
        if reply_to_id is not None:
            parent = self.find_by_id(reply_to_id)
            if parent is None:
                raise NotFoundError("Parent murmur not found")

        murmur = Murmur(user_id=user_id, content=text, reply_to_id=reply_to_id)
        with self.db.begin_nested():
            self.db.add(murmur)
            self.db.flush()
            if parent is None:
                adjust_counter(self.db, User.murmurs_count, user_id, 1)
            else:
                adjust_counter(self.db, Murmur.replies_count, parent.id, 1)
                self.notifications.notify(
                    NotificationType.REPLY, parent.user_id, user_id, murmur.id
                )

        self.db.refresh(murmur)
        logger.info(
            "User %s created murmur %s%s",
            user_id,
            murmur.id,
            f" replying to {reply_to_id}" if reply_to_id is not None else "",
        )
        return murmur

    def soft_delete(self, murmur_id: int) -> bool:
        """Hide a murmur and unwind its counter effects.

        Returns:
            False if the murmur does not exist or is already deleted.
        """
        murmur = self.find_by_id(murmur_id)
        if murmur is None:
            return False

        with self.db.begin_nested():
            murmur.is_deleted = True
            murmur.likes_count = 0
            self.db.flush()
            if murmur.reply_to_id is None:
                adjust_counter(self.db, User.murmurs_count, murmur.user_id, -1)
            else:
                adjust_counter(self.db, Murmur.replies_count, murmur.reply_to_id, -1)
            removed = self.likes.delete_all_for_murmur(murmur_id)

        logger.info("Murmur %s soft-deleted; %s likes removed", murmur_id, removed)
        return True

    def find_by_id(self, murmur_id: int) -> Murmur | None:
        """Return a visible murmur; deleted murmurs resolve to None."""
        return self._visible().filter(Murmur.id == murmur_id).first()

    def get_any(self, murmur_id: int) -> Murmur | None:
        """Return a murmur regardless of deletion state (internal use only)."""
        return self.db.get(Murmur, murmur_id)

    def get_user_murmurs(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        include_replies: bool = True,
    ) -> tuple[list[Murmur], int]:
        query = self._visible().filter(Murmur.user_id == user_id)
        if not include_replies:
            query = query.filter(Murmur.reply_to_id.is_(None))
        return self._page(query, page, limit)

    def get_public_murmurs(
        self,
        page: int = 1,
        limit: int = 10,
        exclude_user_id: int | None = None,
    ) -> tuple[list[Murmur], int]:
        """Return every root murmur, newest first, optionally skipping one author."""
        query = self._visible().filter(Murmur.reply_to_id.is_(None))
        if exclude_user_id is not None:
            query = query.filter(Murmur.user_id != exclude_user_id)
        return self._page(query, page, limit)

    def get_timeline(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        include_own: bool = True,
    ) -> tuple[list[Murmur], int]:
        """Return root murmurs by the users ``user_id`` follows.

        With ``include_own`` the caller's own root murmurs are mixed in.
        """
        followed = (
            self.db.query(Follow.following_id)
            .filter(Follow.follower_id == user_id)
            .scalar_subquery()
        )
        authors = Murmur.user_id.in_(followed)
        if include_own:
            authors = or_(authors, Murmur.user_id == user_id)
        query = self._visible().filter(Murmur.reply_to_id.is_(None), authors)
        return self._page(query, page, limit)

    def get_replies(
        self,
        murmur_id: int,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Murmur], int]:
        """Return visible replies to a visible murmur in conversation order.

        Raises:
            NotFoundError: If the parent is absent or deleted.
        """
        if self.find_by_id(murmur_id) is None:
            raise NotFoundError("Murmur not found")
        query = self._visible().filter(Murmur.reply_to_id == murmur_id)
        total = query.count()
        items = (
            query.order_by(Murmur.created_at.asc(), Murmur.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def search(self, query_text: str, page: int = 1, limit: int = 20) -> tuple[list[Murmur], int]:
        """Case-insensitive substring search over murmur content."""
        pattern = f"%{escape_like(query_text)}%"
        query = self._visible().filter(Murmur.content.ilike(pattern, escape="\\"))
        return self._page(query, page, limit)

    def get_trending(self, page: int = 1, limit: int = 10) -> tuple[list[Murmur], int]:
        """Return recent root murmurs ranked by cached like count, then recency."""
        since = utcnow() - timedelta(hours=settings.trending_window_hours)
        query = self._visible().filter(
            Murmur.reply_to_id.is_(None),
            Murmur.created_at >= since,
        )
        total = query.count()
        items = (
            query.order_by(
                Murmur.likes_count.desc(),
                Murmur.created_at.desc(),
                Murmur.id.desc(),
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
