"""Session handling shared by the repositories."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from threadline.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class BaseRepository:
    """Thin wrapper around an async session factory.

    Each call opens its own short-lived session, so independent store calls
    can run concurrently without sharing connection state.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the repository with an async SQLAlchemy session factory."""
        self._sessions = sessions

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; engine errors surface as :class:`StoreUnavailable`."""
        try:
            async with self._sessions() as session:
                yield session
        except SQLAlchemyError as err:
            logger.error("Store operation failed: %s", err, exc_info=True)
            raise StoreUnavailable() from err
