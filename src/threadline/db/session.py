"""Database engine and session configuration."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from threadline.core.settings import Settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by ``settings``.

    SQLite connections are not pooled: every session opens its own
    connection, which lets concurrent store calls proceed independently.
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.sql_debug, poolclass=NullPool)
    return create_async_engine(url, echo=settings.sql_debug, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return the session factory handed to every repository."""
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all database tables."""
    # Ensure model modules are imported so that metadata is populated.
    import threadline.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all database tables."""
    import threadline.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
