# src/murmur/models/murmur.py
"""SQLAlchemy model for murmurs and their reply tree."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from murmur.db.session import Base
from murmur.db.time import utcnow

from .user import User


class Murmur(Base):
    """A short post; a reply when ``reply_to_id`` is set.

    Replies point at their parent through a nullable key into the same table.
    Deletion is soft: ``is_deleted`` hides the row from every public read.
    """

    __tablename__ = "murmurs"
    __table_args__ = (
        Index("ix_murmurs_user_id_created_at", "user_id", "created_at"),
        Index("ix_murmurs_reply_to_id", "reply_to_id"),
        Index("ix_murmurs_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Top-level murmurs have reply_to_id = NULL.
    reply_to_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("murmurs.id", ondelete="SET NULL"),
        nullable=True,
    )

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    replies_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    retweets_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")

    @property
    def is_reply(self) -> bool:
        """Return True when this murmur answers another one."""
        return self.reply_to_id is not None
