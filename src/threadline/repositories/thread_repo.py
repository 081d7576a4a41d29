"""Data access for threads and the ranked thread listings."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import ColumnElement, Select, and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from threadline.db.time import as_utc, utcnow
from threadline.models import Follow, ReactionType, Thread, ThreadView, Vote
from threadline.repositories.base import BaseRepository
from threadline.schemas.thread import ThreadCreate, ThreadOut, ThreadUpdate
from threadline.services.cursor import CursorClaims

__all__ = [
    "ThreadRepository",
    "ThreadStore",
    "annotated_threads",
    "hot_score",
    "to_thread_out",
]

# Weights of the time-decayed popularity score.
UPVOTE_WEIGHT = 2.0
VIEW_WEIGHT = 0.5
AGE_OFFSET_HOURS = 2.0
GRAVITY = 1.5


class ThreadStore(Protocol):
    """Thread persistence and ranked listings."""

    async def create(self, user_id: int, data: ThreadCreate) -> int: ...

    async def get_by_id(self, thread_id: int) -> ThreadOut | None: ...

    async def exists(self, thread_id: int) -> bool: ...

    async def update(self, thread_id: int, data: ThreadUpdate) -> None: ...

    async def soft_delete(self, thread_id: int) -> bool: ...

    async def record_view(self, thread_id: int) -> None: ...

    async def list_by_author(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]: ...

    async def list_by_following(
        self, viewer_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]: ...

    async def list_by_popularity(
        self, cursor: CursorClaims, limit: int, now: datetime | None = None
    ) -> list[ThreadOut]: ...

    async def list_by_recency(self, cursor: CursorClaims, limit: int) -> list[ThreadOut]: ...

    async def list_by_parent(
        self, parent_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]: ...


def _vote_score() -> Any:
    scored = aliased(Vote)
    return (
        select(
            func.coalesce(
                func.sum(case((scored.reaction == ReactionType.UP, 1), else_=-1)),
                0,
            )
        )
        .where(scored.thread_id == Thread.id)
        .correlate(Thread)
        .scalar_subquery()
    )


def _view_count() -> Any:
    return (
        select(func.coalesce(func.max(ThreadView.view_count), 0))
        .where(ThreadView.thread_id == Thread.id)
        .correlate(Thread)
        .scalar_subquery()
    )


def _reply_count() -> Any:
    child = aliased(Thread)
    return (
        select(func.count(child.id))
        .where(child.parent_thread == Thread.id, child.is_deleted.is_(False))
        .correlate(Thread)
        .scalar_subquery()
    )


def _upvote_count() -> Any:
    upvote = aliased(Vote)
    return (
        select(func.count())
        .select_from(upvote)
        .where(upvote.thread_id == Thread.id, upvote.reaction == ReactionType.UP)
        .correlate(Thread)
        .scalar_subquery()
    )


def annotated_threads(*extra: Any) -> Select[Any]:
    """Select non-deleted threads together with their derived counters."""
    return select(
        Thread,
        _vote_score().label("vote_score"),
        _view_count().label("view_count"),
        _reply_count().label("reply_count"),
        *extra,
    ).where(Thread.is_deleted.is_(False))


def to_thread_out(row: Any) -> ThreadOut:
    """Convert an :func:`annotated_threads` row into the read model."""
    thread: Thread = row[0]
    return ThreadOut(
        id=thread.id,
        user_id=thread.user_id,
        title=thread.title,
        content=thread.content,
        parent_thread=thread.parent_thread,
        created_at=as_utc(thread.created_at),
        updated_at=as_utc(thread.updated_at),
        vote_score=int(row.vote_score or 0),
        view_count=int(row.view_count or 0),
        reply_count=int(row.reply_count or 0),
    )


def _older_than(cursor: CursorClaims) -> ColumnElement[bool]:
    return Thread.created_at < (cursor.created_at or utcnow())


def hot_score(upvotes: int, views: int, created_at: datetime, now: datetime) -> float:
    """Return the time-decayed popularity of a thread.

    ``(upvotes * 2 + views * 0.5) / (age_hours + 2) ** 1.5``
    """
    age_hours = max((as_utc(now) - as_utc(created_at)).total_seconds() / 3600.0, 0.0)
    return (upvotes * UPVOTE_WEIGHT + views * VIEW_WEIGHT) / (
        (age_hours + AGE_OFFSET_HOURS) ** GRAVITY
    )


class ThreadRepository(BaseRepository):
    """SQLAlchemy-backed :class:`ThreadStore`."""

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        *,
        popularity_window: int = 500,
    ) -> None:
        super().__init__(sessions)
        self._popularity_window = popularity_window

    async def create(self, user_id: int, data: ThreadCreate) -> int:
        """Insert a new thread and return its identifier."""
        async with self.session() as session:
            thread = Thread(
                user_id=user_id,
                title=data.title,
                content=data.content,
                parent_thread=data.parent_thread,
            )
            session.add(thread)
            await session.commit()
            return thread.id

    async def get_by_id(self, thread_id: int) -> ThreadOut | None:
        """Return a non-deleted thread with its counters."""
        async with self.session() as session:
            result = await session.execute(annotated_threads().where(Thread.id == thread_id))
            row = result.first()
        return to_thread_out(row) if row is not None else None

    async def exists(self, thread_id: int) -> bool:
        """Return True if a non-deleted thread with this id exists."""
        async with self.session() as session:
            found = await session.scalar(
                select(Thread.id).where(Thread.id == thread_id, Thread.is_deleted.is_(False))
            )
        return found is not None

    async def update(self, thread_id: int, data: ThreadUpdate) -> None:
        """Replace the editable fields of a thread."""
        async with self.session() as session:
            await session.execute(
                update(Thread)
                .where(Thread.id == thread_id)
                .values(
                    title=data.title,
                    content=data.content,
                    parent_thread=data.parent_thread,
                    updated_at=utcnow(),
                )
            )
            await session.commit()

    async def soft_delete(self, thread_id: int) -> bool:
        """Flag a thread as deleted; returns False if nothing was changed."""
        now = utcnow()
        async with self.session() as session:
            result = await session.execute(
                update(Thread)
                .where(Thread.id == thread_id, Thread.is_deleted.is_(False))
                .values(is_deleted=True, deleted_at=now, updated_at=now)
            )
            await session.commit()
        return bool(result.rowcount)

    async def record_view(self, thread_id: int) -> None:
        """Increment the view counter of a thread."""
        async with self.session() as session:
            result = await session.execute(
                update(ThreadView)
                .where(ThreadView.thread_id == thread_id)
                .values(view_count=ThreadView.view_count + 1)
            )
            if not result.rowcount:
                session.add(ThreadView(thread_id=thread_id, view_count=1))
            await session.commit()

    async def list_by_author(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return an author's threads, newest first.

        With a cursor id, rows sharing the cursor's instant are continued by id.
        """
        older: ColumnElement[bool] = _older_than(cursor)
        if cursor.id is not None and cursor.created_at is not None:
            older = or_(
                older,
                and_(Thread.created_at == cursor.created_at, Thread.id < cursor.id),
            )
        stmt = (
            annotated_threads()
            .where(Thread.user_id == user_id, older)
            .order_by(Thread.created_at.desc(), Thread.id.desc())
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def list_by_following(
        self, viewer_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return top-level threads written by users the viewer follows."""
        followed = select(Follow.user_id).where(Follow.follower_id == viewer_id)
        stmt = (
            annotated_threads()
            .where(
                Thread.parent_thread.is_(None),
                Thread.user_id.in_(followed),
                _older_than(cursor),
            )
            .order_by(Thread.created_at.desc(), Thread.id.desc())
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def list_by_popularity(
        self, cursor: CursorClaims, limit: int, now: datetime | None = None
    ) -> list[ThreadOut]:
        """Return top-level threads ranked by time-decayed popularity.

        Scores are computed over the most recent candidates only, bounded by
        the configured popularity window.
        """
        now = now or utcnow()
        stmt = (
            annotated_threads(_upvote_count().label("upvotes"))
            .where(Thread.parent_thread.is_(None), _older_than(cursor))
            .order_by(Thread.created_at.desc(), Thread.id.desc())
            .limit(max(self._popularity_window, limit))
        )
        async with self.session() as session:
            rows = (await session.execute(stmt)).all()

        scored = []
        for row in rows:
            thread = to_thread_out(row)
            score = hot_score(int(row.upvotes or 0), thread.view_count, thread.created_at, now)
            scored.append((score, thread))
        scored.sort(key=lambda item: (item[0], item[1].created_at), reverse=True)
        return [thread for _, thread in scored[:limit]]

    async def list_by_recency(self, cursor: CursorClaims, limit: int) -> list[ThreadOut]:
        """Return the newest top-level threads."""
        stmt = (
            annotated_threads()
            .where(Thread.parent_thread.is_(None), _older_than(cursor))
            .order_by(Thread.created_at.desc(), Thread.id.desc())
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def list_by_parent(
        self, parent_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return replies to a thread, best scored first."""
        vote_score = _vote_score().label("vote_score")
        stmt = (
            select(
                Thread,
                vote_score,
                _view_count().label("view_count"),
                _reply_count().label("reply_count"),
            )
            .where(
                Thread.is_deleted.is_(False),
                Thread.parent_thread == parent_id,
                _older_than(cursor),
            )
            .order_by(vote_score.desc(), Thread.created_at.desc())
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def _fetch(self, stmt: Select[Any]) -> list[ThreadOut]:
        async with self.session() as session:
            result = await session.execute(stmt)
            return [to_thread_out(row) for row in result.all()]
