# src/murmur/models/notification.py
"""Notification records derived from likes, follows and replies."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from murmur.db.session import Base
from murmur.db.time import utcnow

from .murmur import Murmur
from .user import User


class NotificationType(str, enum.Enum):
    """Kinds of events that notify a user."""

    LIKE = "like"
    FOLLOW = "follow"
    REPLY = "reply"


class Notification(Base):
    """Notice to ``user_id`` that ``actor_id`` did something.

    At most one row exists per (type, user_id, actor_id, murmur_id). The
    fanout service does a find-or-create; two unique indexes back it up, the
    partial one covering follow notices whose murmur_id is NULL.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint("type IN ('like', 'follow', 'reply')", name="ck_notifications_type"),
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
        Index("ix_notifications_user_id_created_at", "user_id", "created_at"),
        Index(
            "uq_notifications_dedup", "type", "user_id", "actor_id", "murmur_id", unique=True
        ),
        Index(
            "uq_notifications_dedup_no_murmur",
            "type",
            "user_id",
            "actor_id",
            unique=True,
            sqlite_where=text("murmur_id IS NULL"),
            postgresql_where=text("murmur_id IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    murmur_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("murmurs.id", ondelete="CASCADE"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    actor: Mapped[User] = relationship("User", foreign_keys=[actor_id], lazy="joined")
    murmur: Mapped[Murmur | None] = relationship("Murmur", lazy="joined")
