"""Models capturing reactions on threads."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow


class ReactionType(str, enum.Enum):
    """Reaction polarity; UP counts +1 and DOWN counts -1 toward the score."""

    UP = "UP"
    DOWN = "DOWN"


class Vote(Base):
    """Per-user reaction on a thread.

    The composite primary key allows a single reaction per user per thread;
    switching polarity means cancelling first.
    """

    __tablename__ = "votes"
    __table_args__ = (Index("ix_votes_thread_id", "thread_id"),)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), primary_key=True)
    thread_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("thread.id", ondelete="CASCADE"),
        primary_key=True,
    )
    reaction: Mapped[ReactionType] = mapped_column(
        Enum(ReactionType, name="reaction_enum"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
