"""SQLAlchemy model for threads and replies."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow


class Thread(Base):
    """Primary content entity produced by users.

    Replies are threads whose ``parent_thread`` points at another thread;
    top-level threads have ``parent_thread = NULL``. Deletion is soft.
    """

    __tablename__ = "thread"
    __table_args__ = (
        Index("ix_thread_created_at", "created_at"),
        Index("ix_thread_user_id", "user_id"),
        Index("ix_thread_parent_thread", "parent_thread"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parent_thread: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("thread.id"),
        nullable=True,
    )

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
