"""Data access helpers for thread reactions."""
from __future__ import annotations

from typing import Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from threadline.db.time import as_utc, utcnow
from threadline.models import ReactionType, Thread, Vote
from threadline.repositories.base import BaseRepository
from threadline.repositories.thread_repo import annotated_threads, to_thread_out
from threadline.schemas.thread import ReactedThreadOut
from threadline.services.cursor import CursorClaims

__all__ = ["VoteLedger", "VoteRepository"]


class VoteLedger(Protocol):
    """Reaction state per (user, thread)."""

    async def has_reaction(
        self, user_id: int, thread_id: int, reaction: ReactionType | None = None
    ) -> bool: ...

    async def insert(self, user_id: int, thread_id: int, reaction: ReactionType) -> bool: ...

    async def delete(self, user_id: int, thread_id: int, reaction: ReactionType) -> bool: ...

    async def list_reacted(
        self, user_id: int, reaction: ReactionType, cursor: CursorClaims, limit: int
    ) -> list[ReactedThreadOut]: ...


class VoteRepository(BaseRepository):
    """SQLAlchemy-backed :class:`VoteLedger`."""

    async def has_reaction(
        self, user_id: int, thread_id: int, reaction: ReactionType | None = None
    ) -> bool:
        """Return True if the user holds a reaction (of ``reaction`` kind, if given)."""
        stmt = (
            select(func.count())
            .select_from(Vote)
            .where(Vote.user_id == user_id, Vote.thread_id == thread_id)
        )
        if reaction is not None:
            stmt = stmt.where(Vote.reaction == reaction)
        async with self.session() as session:
            count = await session.scalar(stmt)
        return bool(count)

    async def insert(self, user_id: int, thread_id: int, reaction: ReactionType) -> bool:
        """Record a reaction; returns False if one already exists."""
        async with self.session() as session:
            session.add(Vote(user_id=user_id, thread_id=thread_id, reaction=reaction))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
        return True

    async def delete(self, user_id: int, thread_id: int, reaction: ReactionType) -> bool:
        """Remove a reaction of the given kind; returns False if none matched."""
        async with self.session() as session:
            result = await session.execute(
                delete(Vote).where(
                    Vote.user_id == user_id,
                    Vote.thread_id == thread_id,
                    Vote.reaction == reaction,
                )
            )
            await session.commit()
        return bool(result.rowcount)

    async def list_reacted(
        self, user_id: int, reaction: ReactionType, cursor: CursorClaims, limit: int
    ) -> list[ReactedThreadOut]:
        """Return threads the user reacted to with ``reaction``, latest reaction first.

        Pages on the reaction time, not the thread's creation time.
        """
        reacted = aliased(Vote)
        stmt = (
            annotated_threads(reacted.created_at.label("reacted_at"))
            .join(
                reacted,
                (reacted.thread_id == Thread.id)
                & (reacted.user_id == user_id)
                & (reacted.reaction == reaction),
            )
            .where(reacted.created_at < (cursor.created_at or utcnow()))
            .order_by(reacted.created_at.desc(), Thread.id.desc())
            .limit(limit)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            rows = result.all()
        return [
            ReactedThreadOut(**to_thread_out(row).model_dump(), reacted_at=as_utc(row.reacted_at))
            for row in rows
        ]
