# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timedelta
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from threadline.core.settings import Settings
from threadline.db.session import build_session_factory, create_tables, drop_tables
from threadline.db.time import utcnow
from threadline.main import create_app
from threadline.models import Thread, User
from threadline.repositories import (
    FollowRepository,
    ThreadRepository,
    UserRepository,
    VoteRepository,
)
from threadline.schemas.user import ProfileUpsertRequest

_HANDLE_COUNTER = count(1)


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file with cheap hashing."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'threadline.db'}",
        jwt_secret="test-secret",
        password_time_cost=1,
        password_memory_cost=8,
        password_parallelism=1,
        feed_source_timeout_seconds=5.0,
    )


@pytest.fixture()
async def app(test_settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(test_settings)
    await create_tables(application.state.engine)
    try:
        yield application
    finally:
        await drop_tables(application.state.engine)
        await application.state.engine.dispose()


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def sessions(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(app.state.engine)


@pytest.fixture()
def user_repo(sessions: async_sessionmaker[AsyncSession]) -> UserRepository:
    return UserRepository(sessions)


@pytest.fixture()
def thread_repo(sessions: async_sessionmaker[AsyncSession]) -> ThreadRepository:
    return ThreadRepository(sessions)


@pytest.fixture()
def follow_repo(sessions: async_sessionmaker[AsyncSession]) -> FollowRepository:
    return FollowRepository(sessions)


@pytest.fixture()
def vote_repo(sessions: async_sessionmaker[AsyncSession]) -> VoteRepository:
    return VoteRepository(sessions)


@pytest.fixture()
def make_user(
    user_repo: UserRepository,
) -> Callable[..., Awaitable[User]]:
    """Create an account, with a completed profile unless told otherwise."""

    async def _make(handle: str | None = None, *, complete: bool = True) -> User:
        handle = handle or f"user{next(_HANDLE_COUNTER)}"
        user = await user_repo.create(f"{handle}@example.com", "not-a-real-digest")
        if not complete:
            return user
        return await user_repo.upsert_profile(
            user.id,
            ProfileUpsertRequest(name=handle.title(), handle=handle),
        )

    return _make


@pytest.fixture()
def make_thread(
    sessions: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Thread]]:
    """Insert a thread with an explicit creation time."""

    async def _make(
        author: User,
        *,
        content: str = "hello",
        created_at: datetime | None = None,
        parent: Thread | None = None,
    ) -> Thread:
        created_at = created_at or utcnow()
        async with sessions() as session:
            thread = Thread(
                user_id=author.id,
                content=content,
                parent_thread=parent.id if parent is not None else None,
                created_at=created_at,
                updated_at=created_at,
            )
            session.add(thread)
            await session.commit()
            return thread

    return _make


@pytest.fixture()
def base_time() -> datetime:
    """A fixed instant comfortably in the past."""
    return utcnow().replace(microsecond=0) - timedelta(days=1)


@pytest.fixture()
def register(client: AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """Sign up and sign in through the API, optionally creating a profile.

    Returns the bearer headers of the new account.
    """

    async def _register(handle: str, *, profile: bool = True) -> dict[str, str]:
        email = f"{handle}@example.com"
        password = "password123"
        await client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "password_confirm": password},
        )
        res = await client.post(
            "/api/v1/auth/signin", json={"email": email, "password": password}
        )
        token = res.json()["data"]["token"]
        headers = {"Authorization": f"Bearer {token}"}
        if profile:
            await client.put(
                "/api/v1/users/me/profile",
                json={"name": handle.title(), "handle": handle},
                headers=headers,
            )
        return headers

    return _register
