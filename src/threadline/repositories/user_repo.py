"""Data access helpers for user accounts and profiles."""
from __future__ import annotations

from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from threadline.core.errors import AlreadyRegistered, NotFound
from threadline.db.time import utcnow
from threadline.models import User
from threadline.repositories.base import BaseRepository
from threadline.schemas.thread import AuthorProfile
from threadline.schemas.user import ProfileUpsertRequest

__all__ = ["UserDirectory", "UserRepository"]


class UserDirectory(Protocol):
    """User identity, handle resolution and profile storage."""

    async def create(self, email: str, hash_password: str) -> User: ...

    async def get_by_id(self, user_id: int) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def get_by_handle(self, handle: str) -> User | None: ...

    async def get_public_profile(self, user_id: int) -> AuthorProfile | None: ...

    async def upsert_profile(self, user_id: int, profile: ProfileUpsertRequest) -> User: ...


class UserRepository(BaseRepository):
    """SQLAlchemy-backed :class:`UserDirectory`."""

    async def create(self, email: str, hash_password: str) -> User:
        """Insert an account with an incomplete profile.

        Raises:
            AlreadyRegistered: If the email is already in use.
        """
        async with self.session() as session:
            user = User(email=email, hash_password=hash_password)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as err:
                await session.rollback()
                raise AlreadyRegistered() from err
            return user

    async def get_by_id(self, user_id: int) -> User | None:
        async with self.session() as session:
            return await session.scalar(
                select(User).where(User.id == user_id, User.is_deleted.is_(False))
            )

    async def get_by_email(self, email: str) -> User | None:
        async with self.session() as session:
            return await session.scalar(
                select(User).where(User.email == email, User.is_deleted.is_(False))
            )

    async def get_by_handle(self, handle: str) -> User | None:
        async with self.session() as session:
            return await session.scalar(
                select(User).where(User.handle == handle, User.is_deleted.is_(False))
            )

    async def get_public_profile(self, user_id: int) -> AuthorProfile | None:
        """Return the author card shown next to a thread.

        Deleted accounts are still resolved so their threads stay attributed.
        """
        async with self.session() as session:
            row = (
                await session.execute(
                    select(User.id, User.handle, User.profile_img_url).where(User.id == user_id)
                )
            ).first()
        if row is None:
            return None
        return AuthorProfile(id=row.id, handle=row.handle, profile_img_url=row.profile_img_url)

    async def upsert_profile(self, user_id: int, profile: ProfileUpsertRequest) -> User:
        """Write the public profile fields and mark the profile complete.

        Raises:
            AlreadyRegistered: If another account holds the requested handle.
            NotFound: If the account does not exist.
        """
        async with self.session() as session:
            try:
                await session.execute(
                    update(User)
                    .where(User.id == user_id)
                    .values(
                        name=profile.name,
                        handle=profile.handle,
                        profile_img_url=profile.profile_img_url,
                        bio=profile.bio,
                        is_profile_complete=True,
                        updated_at=utcnow(),
                    )
                )
                await session.commit()
            except IntegrityError as err:
                await session.rollback()
                raise AlreadyRegistered(f"Handle '{profile.handle}' is already taken") from err
            user = await session.get(User, user_id, populate_existing=True)
        if user is None:
            raise NotFound()
        return user
