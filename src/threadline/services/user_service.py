"""Account registration, sign-in and profile management."""
from __future__ import annotations

import logging

from threadline.core.errors import (
    AlreadyRegistered,
    InvalidCredentials,
    NotFound,
    PasswordMismatch,
    ProfileNotCreated,
)
from threadline.core.security import PasswordHasher, TokenIssuer
from threadline.db.time import as_utc
from threadline.models import User
from threadline.repositories.follow_repo import FollowGraph
from threadline.repositories.user_repo import UserDirectory
from threadline.schemas.user import ProfileResponse, ProfileUpsertRequest

logger = logging.getLogger(__name__)


class UserService:
    """Identity operations backed by a :class:`UserDirectory`."""

    def __init__(
        self,
        users: UserDirectory,
        follows: FollowGraph,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
    ) -> None:
        self._users = users
        self._follows = follows
        self._hasher = hasher
        self._tokens = tokens

    async def signup(self, email: str, password: str, password_confirm: str) -> User:
        """Register an account with an empty profile.

        Raises:
            PasswordMismatch: If the confirmation differs from the password.
            AlreadyRegistered: If the email is taken.
        """
        if password != password_confirm:
            raise PasswordMismatch()
        if await self._users.get_by_email(email) is not None:
            logger.info("Signup rejected for existing email")
            raise AlreadyRegistered()
        user = await self._users.create(email, self._hasher.hash(password))
        logger.info("Registered user %s", user.id)
        return user

    async def signin(self, email: str, password: str) -> str:
        """Return an access token for valid credentials."""
        user = await self._users.get_by_email(email)
        if user is None or not self._hasher.verify(password, user.hash_password):
            logger.info("Signin rejected")
            raise InvalidCredentials()
        return self._tokens.issue(user.id, user.email)

    async def me(self, user_id: int) -> ProfileResponse:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFound()
        return await self._profile(user)

    async def get_profile(self, handle: str) -> ProfileResponse:
        user = await self._users.get_by_handle(handle)
        if user is None:
            raise NotFound()
        return await self._profile(user)

    async def upsert_profile(
        self, user_id: int, profile: ProfileUpsertRequest
    ) -> ProfileResponse:
        """Create or replace the public profile and mark it complete."""
        existing = await self._users.get_by_handle(profile.handle)
        if existing is not None and existing.id != user_id:
            logger.info("Handle %s is taken", profile.handle)
            raise AlreadyRegistered(f"Handle '{profile.handle}' is already taken")
        user = await self._users.upsert_profile(user_id, profile)
        return await self._profile(user)

    async def _profile(self, user: User) -> ProfileResponse:
        if not user.is_profile_complete:
            raise ProfileNotCreated()
        followers, following = await self._follows.counts(user.id)
        return ProfileResponse(
            id=user.id,
            email=user.email,
            name=user.name or "",
            handle=user.handle or "",
            profile_img_url=user.profile_img_url or "",
            bio=user.bio,
            created_at=as_utc(user.created_at),
            updated_at=as_utc(user.updated_at),
            follower_count=followers,
            following_count=following,
        )
