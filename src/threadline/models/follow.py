"""Follow edges between users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow


class Follow(Base):
    """Directed edge: ``follower_id`` follows ``user_id``."""

    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("user_id <> follower_id", name="ck_follow_no_self"),
        Index("ix_follow_follower_id", "follower_id"),
    )

    # Followed user.
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), primary_key=True)
    follower_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
