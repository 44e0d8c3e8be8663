# src/murmur/models/like.py
"""Models capturing like interactions on murmurs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from murmur.db.session import Base
from murmur.db.time import utcnow

from .user import User


class Like(Base):
    """Per-user like on a murmur."""

    __tablename__ = "likes"
    __table_args__ = (
        # One like per (user, murmur); a second insert is rejected by the store.
        UniqueConstraint("user_id", "murmur_id", name="uq_likes_user_murmur"),
        Index("ix_likes_murmur_id", "murmur_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    murmur_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("murmurs.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User")
