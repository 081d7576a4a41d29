"""Follow and unfollow operations, and follow listings."""
from __future__ import annotations

import asyncio
import logging

from threadline.core.errors import (
    AlreadyFollowed,
    NotFollowed,
    NotFound,
    ProfileNotCreated,
    TrySelfFollow,
)
from threadline.models import User
from threadline.repositories.follow_repo import FollowGraph
from threadline.repositories.user_repo import UserDirectory
from threadline.schemas.follow import FollowEntry
from threadline.services.cursor import CursorClaims

logger = logging.getLogger(__name__)


class FollowService:
    """Gatekeeper for edges of the follow graph."""

    def __init__(self, follows: FollowGraph, users: UserDirectory) -> None:
        self._follows = follows
        self._users = users

    async def follow(self, viewer_id: int, handle: str) -> None:
        """Make ``viewer_id`` follow the user behind ``handle``.

        Raises:
            NotFound: If either user does not exist.
            ProfileNotCreated: If either profile is incomplete.
            TrySelfFollow: If the handle belongs to the viewer.
            AlreadyFollowed: If the edge already exists.
        """
        viewer, target = await self._resolve(viewer_id, handle)
        if await self._follows.exists(viewer.id, target.id):
            logger.info("User %s already follows %s", viewer.id, target.id)
            raise AlreadyFollowed()
        if not await self._follows.insert(viewer.id, target.id):
            raise AlreadyFollowed()
        logger.info("User %s followed %s", viewer.id, target.id)

    async def unfollow(self, viewer_id: int, handle: str) -> None:
        """Remove the edge from ``viewer_id`` to the user behind ``handle``."""
        viewer, target = await self._resolve(viewer_id, handle)
        if not await self._follows.exists(viewer.id, target.id):
            logger.info("User %s does not follow %s", viewer.id, target.id)
            raise NotFollowed()
        if not await self._follows.delete(viewer.id, target.id):
            raise NotFollowed()
        logger.info("User %s unfollowed %s", viewer.id, target.id)

    async def list_followers(
        self, handle: str, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]:
        user = await self._profile_by_handle(handle)
        return await self._follows.list_followers(user.id, cursor, limit)

    async def list_following(
        self, handle: str, cursor: CursorClaims, limit: int
    ) -> list[FollowEntry]:
        user = await self._profile_by_handle(handle)
        return await self._follows.list_following(user.id, cursor, limit)

    async def follow_counts(self, user_id: int) -> tuple[int, int]:
        """Return ``(followers, following)`` for a user."""
        return await self._follows.counts(user_id)

    async def _resolve(self, viewer_id: int, handle: str) -> tuple[User, User]:
        viewer, target = await asyncio.gather(
            self._users.get_by_id(viewer_id),
            self._users.get_by_handle(handle),
        )
        if viewer is None or target is None:
            raise NotFound()
        if not viewer.is_profile_complete or not target.is_profile_complete:
            raise ProfileNotCreated()
        if viewer.id == target.id:
            logger.info("User %s tried to follow themselves", viewer.id)
            raise TrySelfFollow()
        return viewer, target

    async def _profile_by_handle(self, handle: str) -> User:
        user = await self._users.get_by_handle(handle)
        if user is None:
            raise NotFound()
        if not user.is_profile_complete:
            raise ProfileNotCreated()
        return user
