"""Typed errors raised by the service layer.

Every kind carries the HTTP status and the client-facing message it maps to,
so the API boundary can translate any :class:`ThreadlineError` without a
lookup table of its own.
"""

from __future__ import annotations

from fastapi import status


class ThreadlineError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFound(ThreadlineError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Data not found"


class PermissionDenied(ThreadlineError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You do not have permission to modify this resource"


class AlreadyFollowed(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "You have already followed that user"


class NotFollowed(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "You have not followed this user. Please check your following list."


class TrySelfFollow(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "You tried to follow yourself. You cannot follow yourself."


class AlreadyReacted(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "You have already reacted to this thread"


class NotReacted(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "You have not reacted to this thread"


class ProfileNotCreated(ThreadlineError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User profile not found. Please create your profile to continue."


class AlreadyRegistered(ThreadlineError):
    status_code = status.HTTP_409_CONFLICT
    message = "User is already registered"


class InvalidCredentials(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class PasswordMismatch(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Password and confirmation do not match"


class InvalidQuery(ThreadlineError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid Query"


class StoreUnavailable(ThreadlineError):
    """Wraps persistence failures; the original exception stays in ``__cause__``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database error occurred"


class AuthTokenInvalid(ThreadlineError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


__all__ = [
    "AlreadyFollowed",
    "AlreadyReacted",
    "AlreadyRegistered",
    "AuthTokenInvalid",
    "InvalidCredentials",
    "InvalidQuery",
    "NotFollowed",
    "NotFound",
    "NotReacted",
    "PasswordMismatch",
    "PermissionDenied",
    "ProfileNotCreated",
    "StoreUnavailable",
    "ThreadlineError",
    "TrySelfFollow",
]
