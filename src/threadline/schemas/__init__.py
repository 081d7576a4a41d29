"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ApiResponse, ErrorResponse
from .follow import FollowEntry
from .thread import AuthorProfile, ReactedThreadOut, ThreadCreate, ThreadOut, ThreadUpdate
from .user import (
    ProfileResponse,
    ProfileUpsertRequest,
    SigninRequest,
    SigninResponse,
    SignupRequest,
)

__all__ = [
    "ApiResponse", "ErrorResponse",
    "FollowEntry",
    "AuthorProfile", "ReactedThreadOut", "ThreadCreate", "ThreadOut", "ThreadUpdate",
    "ProfileResponse", "ProfileUpsertRequest",
    "SigninRequest", "SigninResponse", "SignupRequest",
]
