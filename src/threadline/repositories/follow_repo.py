"""Data access helpers for the follow graph."""
from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from threadline.db.time import as_utc, utcnow
from threadline.models import Follow, User
from threadline.repositories.base import BaseRepository
from threadline.schemas.follow import FollowEntry
from threadline.services.cursor import CursorClaims

__all__ = ["FollowGraph", "FollowRepository"]


class FollowGraph(Protocol):
    """Follow edges between users."""

    async def exists(self, follower_id: int, user_id: int) -> bool: ...

    async def insert(self, follower_id: int, user_id: int) -> bool: ...

    async def delete(self, follower_id: int, user_id: int) -> bool: ...

    async def counts(self, user_id: int) -> tuple[int, int]: ...

    async def list_followers(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]: ...

    async def list_following(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]: ...


def _to_entry(row: Any) -> FollowEntry:
    return FollowEntry(
        id=row.id,
        name=row.name,
        handle=row.handle,
        profile_img_url=row.profile_img_url,
        bio=row.bio,
        followed_at=as_utc(row.followed_at),
    )


class FollowRepository(BaseRepository):
    """SQLAlchemy-backed :class:`FollowGraph`."""

    async def exists(self, follower_id: int, user_id: int) -> bool:
        """Return True if ``follower_id`` already follows ``user_id``."""
        async with self.session() as session:
            count = await session.scalar(
                select(func.count())
                .select_from(Follow)
                .where(Follow.user_id == user_id, Follow.follower_id == follower_id)
            )
        return bool(count)

    async def insert(self, follower_id: int, user_id: int) -> bool:
        """Create the edge; returns False if a concurrent insert won the race."""
        async with self.session() as session:
            session.add(Follow(user_id=user_id, follower_id=follower_id))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
        return True

    async def delete(self, follower_id: int, user_id: int) -> bool:
        """Remove the edge; returns False if it was already gone."""
        async with self.session() as session:
            result = await session.execute(
                delete(Follow).where(Follow.user_id == user_id, Follow.follower_id == follower_id)
            )
            await session.commit()
        return bool(result.rowcount)

    async def counts(self, user_id: int) -> tuple[int, int]:
        """Return ``(followers, following)`` for a user."""
        followers = (
            select(func.count()).select_from(Follow).where(Follow.user_id == user_id)
        ).scalar_subquery()
        following = (
            select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        ).scalar_subquery()
        async with self.session() as session:
            row = (await session.execute(select(followers, following))).one()
        return int(row[0]), int(row[1])

    async def list_followers(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]:
        """Return the users following ``user_id``, most recent first."""
        return await self._list(Follow.follower_id, Follow.user_id == user_id, cursor, limit)

    async def list_following(
        self, user_id: int, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]:
        """Return the users ``user_id`` follows, most recent first."""
        return await self._list(Follow.user_id, Follow.follower_id == user_id, cursor, limit)

    async def _list(
        self, joined_on: Any, condition: Any, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]:
        stmt = (
            select(
                User.id,
                User.name,
                User.handle,
                User.profile_img_url,
                User.bio,
                Follow.created_at.label("followed_at"),
            )
            .select_from(Follow)
            .join(User, User.id == joined_on)
            .where(condition, Follow.created_at < (cursor.created_at or utcnow()))
            .order_by(Follow.created_at.desc(), User.id.desc())
            .limit(limit)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            return [_to_entry(row) for row in result.all()]
