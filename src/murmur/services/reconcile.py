"""Counter reconciliation: recompute cached counters from the edge tables."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session, aliased

from murmur.models import Follow, Like, Murmur, User

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Number of rows rewritten per cached counter."""

    followers_count: int = 0
    following_count: int = 0
    murmurs_count: int = 0
    likes_count: int = 0
    replies_count: int = 0

    @property
    def total(self) -> int:
        return sum(asdict(self).values())


class ReconciliationService:
    """Repairs drift between cached counters and the rows they summarize.

    Drift comes from hard user deletion, which removes edges without touching
    the counters at the other end, and from lost updates under concurrency.
    Only rows whose cached value differs are written, so a second run right
    after a first one touches nothing.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _repair(
        self,
        column: InstrumentedAttribute[int],
        actual: ColumnElement[int],
    ) -> int:
        model = column.class_
        result = self.db.execute(
            update(model)
            .where(column != actual)
            .values({column.key: actual})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.warning("Repaired %s drifted %s rows", result.rowcount, column.key)
        return result.rowcount

    def reconcile(self) -> ReconciliationReport:
        """Recompute every cached counter in one pass and flush the fixes."""
        followers = (
            select(func.count(Follow.id))
            .where(Follow.following_id == User.id)
            .scalar_subquery()
        )
        following = (
            select(func.count(Follow.id))
            .where(Follow.follower_id == User.id)
            .scalar_subquery()
        )
        authored = aliased(Murmur)
        roots = (
            select(func.count(authored.id))
            .where(
                and_(
                    authored.user_id == User.id,
                    authored.reply_to_id.is_(None),
                    authored.is_deleted.is_(False),
                )
            )
            .scalar_subquery()
        )
        likes = (
            select(func.count(Like.id))
            .where(Like.murmur_id == Murmur.id)
            .scalar_subquery()
        )
        child = aliased(Murmur)
        replies = (
            select(func.count(child.id))
            .where(and_(child.reply_to_id == Murmur.id, child.is_deleted.is_(False)))
            .scalar_subquery()
        )

        report = ReconciliationReport(
            followers_count=self._repair(User.followers_count, followers),
            following_count=self._repair(User.following_count, following),
            murmurs_count=self._repair(User.murmurs_count, roots),
            likes_count=self._repair(Murmur.likes_count, likes),
            replies_count=self._repair(Murmur.replies_count, replies),
        )
        self.db.flush()
        # Bulk updates bypass the identity map.
        self.db.expire_all()
        logger.info("Reconciliation finished: %s", report)
        return report
