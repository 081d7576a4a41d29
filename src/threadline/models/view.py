"""Per-thread view counters."""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base


class ThreadView(Base):
    """Aggregate view count for a thread; one row per viewed thread."""

    __tablename__ = "views"

    thread_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("thread.id", ondelete="CASCADE"),
        primary_key=True,
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
