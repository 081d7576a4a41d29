"""Up/down reactions on threads."""
from __future__ import annotations

import asyncio
import logging

from threadline.core.errors import AlreadyReacted, NotFound, NotReacted, ProfileNotCreated
from threadline.models import ReactionType
from threadline.repositories.thread_repo import ThreadStore
from threadline.repositories.user_repo import UserDirectory
from threadline.repositories.vote_repo import VoteLedger

logger = logging.getLogger(__name__)


class VotesService:
    """Keep at most one reaction per user per thread."""

    def __init__(self, votes: VoteLedger, users: UserDirectory, threads: ThreadStore) -> None:
        self._votes = votes
        self._users = users
        self._threads = threads

    async def react(self, viewer_id: int, thread_id: int, reaction: ReactionType) -> None:
        """Record ``reaction`` from the viewer.

        Raises:
            AlreadyReacted: If the viewer already reacted, with either polarity.
        """
        await self._validate(viewer_id, thread_id)
        if await self._votes.has_reaction(viewer_id, thread_id):
            logger.info("User %s already reacted to thread %s", viewer_id, thread_id)
            raise AlreadyReacted()
        if not await self._votes.insert(viewer_id, thread_id, reaction):
            raise AlreadyReacted()

    async def react_cancel(self, viewer_id: int, thread_id: int, reaction: ReactionType) -> None:
        """Withdraw the viewer's ``reaction``.

        Raises:
            NotReacted: If the viewer holds no reaction of that polarity.
        """
        await self._validate(viewer_id, thread_id)
        if not await self._votes.has_reaction(viewer_id, thread_id, reaction):
            logger.info("User %s has no %s on thread %s", viewer_id, reaction.value, thread_id)
            raise NotReacted()
        if not await self._votes.delete(viewer_id, thread_id, reaction):
            raise NotReacted()

    async def _validate(self, viewer_id: int, thread_id: int) -> None:
        viewer, thread_exists = await asyncio.gather(
            self._users.get_by_id(viewer_id),
            self._threads.exists(thread_id),
        )
        if viewer is None:
            raise NotFound()
        if not viewer.is_profile_complete:
            raise ProfileNotCreated()
        if not thread_exists:
            raise NotFound()
