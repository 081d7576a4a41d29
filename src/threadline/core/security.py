"""Password hashing and access-token primitives.

Both concerns sit behind small protocols so services depend on the capability
rather than on Argon2 or JOSE directly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from argon2 import PasswordHasher as _Argon2
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jose import JWTError, jwt

from threadline.core.errors import AuthTokenInvalid
from threadline.core.settings import Settings

logger = logging.getLogger(__name__)


class PasswordHasher(Protocol):
    """Capability for producing and checking password digests."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, digest: str) -> bool: ...


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by an access token."""

    id: int
    email: str
    iat: int
    exp: int


class TokenIssuer(Protocol):
    """Capability for issuing and verifying access tokens."""

    def issue(self, user_id: int, email: str) -> str: ...

    def verify(self, token: str) -> TokenClaims: ...


class Argon2PasswordHasher:
    """Argon2id password hashing with costs taken from settings."""

    def __init__(self, settings: Settings) -> None:
        self._hasher = _Argon2(
            time_cost=settings.password_time_cost,
            memory_cost=settings.password_memory_cost,
            parallelism=settings.password_parallelism,
        )

    def hash(self, password: str) -> str:
        """Return the Argon2 digest of ``password``."""
        return self._hasher.hash(password)

    def verify(self, password: str, digest: str) -> bool:
        """Return True if ``password`` matches ``digest``."""
        if not password:
            return False
        try:
            return self._hasher.verify(digest, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            logger.warning("Stored password digest could not be verified")
            return False


class JwtTokenIssuer:
    """HMAC-signed JWT access tokens."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._ttl = timedelta(seconds=settings.jwt_expiration_in_seconds)

    def issue(self, user_id: int, email: str) -> str:
        """Return a signed token for the given user."""
        issued_at = datetime.now(UTC)
        payload = {
            "id": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode ``token`` and return its claims.

        Raises:
            AuthTokenInvalid: If the signature, expiry or payload shape is invalid.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as err:
            logger.info("Rejected access token: %s", err)
            raise AuthTokenInvalid() from err

        user_id = payload.get("id")
        email = payload.get("email")
        if not isinstance(user_id, int) or not isinstance(email, str):
            raise AuthTokenInvalid()
        return TokenClaims(
            id=user_id,
            email=email,
            iat=int(payload.get("iat", 0)),
            exp=int(payload.get("exp", 0)),
        )
