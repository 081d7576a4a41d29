"""Assembly of the guest and personal recommendation feeds.

A feed page is built by querying several independently ranked sources in
parallel, concatenating their results, ordering the union by creation time
and cutting it to the requested size. Each item is then decorated with the
public profile of its author.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from threadline.repositories.thread_repo import ThreadStore
from threadline.repositories.user_repo import UserDirectory
from threadline.schemas.thread import ThreadOut
from threadline.services.cursor import CursorClaims

logger = logging.getLogger(__name__)

ThreadT = TypeVar("ThreadT", bound=ThreadOut)


async def enrich_authors(users: UserDirectory, threads: list[ThreadT]) -> list[ThreadT]:
    """Attach the author card to every thread, looking authors up concurrently."""
    profiles = await asyncio.gather(
        *(users.get_public_profile(thread.user_id) for thread in threads)
    )
    return [
        thread.model_copy(update={"author": profile})
        for thread, profile in zip(threads, profiles, strict=True)
    ]


class FeedAssembler:
    """Merge ranked thread sources into one cursor-paginated page."""

    def __init__(
        self,
        threads: ThreadStore,
        users: UserDirectory,
        *,
        source_timeout: float | None = None,
    ) -> None:
        self._threads = threads
        self._users = users
        self._source_timeout = source_timeout

    async def assemble(
        self, viewer_id: int | None, cursor: CursorClaims, limit: int
    ) -> list[ThreadOut]:
        """Return at most ``limit`` threads older than ``cursor``, newest first.

        Guests get the popularity and recency sources; a signed-in viewer also
        gets threads from the authors they follow. A thread surfacing in more
        than one source is kept once, at its first position.
        """
        sources: list[tuple[str, Awaitable[list[ThreadOut]]]] = [
            ("popularity", self._threads.list_by_popularity(cursor, limit)),
            ("recency", self._threads.list_by_recency(cursor, limit)),
        ]
        if viewer_id is not None:
            sources.append(
                ("following", self._threads.list_by_following(viewer_id, cursor, limit))
            )

        tasks = [asyncio.ensure_future(self._bounded(name, call)) for name, call in sources]
        try:
            pages = await asyncio.gather(*tasks)
        except Exception:
            # First error wins; sources still running are cancelled.
            for task in tasks:
                task.cancel()
            raise

        merged: list[ThreadOut] = []
        seen: set[int] = set()
        for thread in (item for page in pages for item in page):
            if thread.id not in seen:
                seen.add(thread.id)
                merged.append(thread)
        merged.sort(key=lambda thread: thread.created_at, reverse=True)
        return await enrich_authors(self._users, merged[:limit])

    async def _bounded(self, name: str, call: Awaitable[list[ThreadOut]]) -> list[ThreadOut]:
        if self._source_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self._source_timeout)
        except TimeoutError:
            logger.warning(
                "Feed source %s exceeded %.2fs and was dropped", name, self._source_timeout
            )
            return []
