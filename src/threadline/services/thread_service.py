"""Business rules around threads: gates, ownership and listings."""
from __future__ import annotations

import logging

from threadline.core.errors import NotFound, PermissionDenied, ProfileNotCreated
from threadline.models import ReactionType
from threadline.repositories.thread_repo import ThreadStore
from threadline.repositories.user_repo import UserDirectory
from threadline.repositories.vote_repo import VoteLedger
from threadline.schemas.thread import ReactedThreadOut, ThreadCreate, ThreadOut, ThreadUpdate
from threadline.services.cursor import CursorClaims
from threadline.services.feed import FeedAssembler, enrich_authors

logger = logging.getLogger(__name__)


class ThreadService:
    """Validate and carry out thread operations on behalf of a viewer."""

    def __init__(
        self,
        threads: ThreadStore,
        users: UserDirectory,
        votes: VoteLedger,
        feed: FeedAssembler,
    ) -> None:
        self._threads = threads
        self._users = users
        self._votes = votes
        self._feed = feed

    async def create(self, author_id: int, data: ThreadCreate) -> ThreadOut:
        """Publish a thread or a reply.

        Raises:
            ProfileNotCreated: If the author has not completed a profile.
            NotFound: If the author or the referenced parent does not exist.
        """
        await self._require_complete_profile(author_id)
        if data.parent_thread is not None and not await self._threads.exists(data.parent_thread):
            logger.info("Rejected reply to missing thread %s", data.parent_thread)
            raise NotFound()

        thread_id = await self._threads.create(author_id, data)
        logger.info("User %s created thread %s", author_id, thread_id)
        return await self.get(thread_id)

    async def get(self, thread_id: int) -> ThreadOut:
        """Return a single thread with its author card."""
        thread = await self._threads.get_by_id(thread_id)
        if thread is None:
            raise NotFound()
        (enriched,) = await enrich_authors(self._users, [thread])
        return enriched

    async def view(self, thread_id: int) -> ThreadOut:
        """Count a view of the thread and return it."""
        thread = await self.get(thread_id)
        await self._threads.record_view(thread_id)
        return thread.model_copy(update={"view_count": thread.view_count + 1})

    async def list_subthreads(
        self, parent_id: int, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        if not await self._threads.exists(parent_id):
            raise NotFound()
        replies = await self._threads.list_by_parent(parent_id, cursor, limit)
        return await enrich_authors(self._users, replies)

    async def list_recommended(
        self, viewer_id: int | None, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return a guest feed, or a personal feed when ``viewer_id`` is set."""
        if viewer_id is not None:
            await self._require_complete_profile(viewer_id)
        return await self._feed.assemble(viewer_id, cursor, limit)

    async def list_by_handle(
        self, handle: str, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return the threads written by the user behind ``handle``."""
        user = await self._users.get_by_handle(handle)
        if user is None:
            raise NotFound()
        if not user.is_profile_complete:
            raise ProfileNotCreated()
        threads = await self._threads.list_by_author(user.id, cursor, limit)
        return await enrich_authors(self._users, threads)

    async def list_upvoted(
        self, viewer_id: int, cursor: CursorClaims, limit: int
    ) -> list[ReactedThreadOut]:
        threads = await self._votes.list_reacted(viewer_id, ReactionType.UP, cursor, limit)
        return await enrich_authors(self._users, threads)

    async def list_downvoted(
        self, viewer_id: int, cursor: CursorClaims, limit: int
    ) -> list[ReactedThreadOut]:
        threads = await self._votes.list_reacted(viewer_id, ReactionType.DOWN, cursor, limit)
        return await enrich_authors(self._users, threads)

    async def update(self, viewer_id: int, thread_id: int, data: ThreadUpdate) -> ThreadOut:
        """Replace a thread's title, content and parent.

        Raises:
            NotFound: If the thread, or the new parent, does not exist.
            PermissionDenied: If the viewer is not the author.
        """
        await self.check_ownership(viewer_id, thread_id)
        if data.parent_thread is not None and (
            data.parent_thread == thread_id or not await self._threads.exists(data.parent_thread)
        ):
            raise NotFound()
        await self._threads.update(thread_id, data)
        return await self.get(thread_id)

    async def delete(self, viewer_id: int, thread_id: int) -> None:
        """Soft-delete a thread owned by the viewer."""
        await self.check_ownership(viewer_id, thread_id)
        if not await self._threads.soft_delete(thread_id):
            raise NotFound()
        logger.info("User %s deleted thread %s", viewer_id, thread_id)

    async def check_ownership(self, viewer_id: int, thread_id: int) -> ThreadOut:
        """Return the thread if ``viewer_id`` wrote it.

        Raises:
            NotFound: If the thread is missing or deleted.
            PermissionDenied: If someone else wrote it.
        """
        thread = await self._threads.get_by_id(thread_id)
        if thread is None:
            raise NotFound()
        if thread.user_id != viewer_id:
            logger.info("User %s may not modify thread %s", viewer_id, thread_id)
            raise PermissionDenied()
        return thread

    async def _require_complete_profile(self, user_id: int) -> None:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFound()
        if not user.is_profile_complete:
            logger.info("User %s has no profile yet", user_id)
            raise ProfileNotCreated()
