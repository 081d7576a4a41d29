"""User-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_.]{1,30}$")


class SignupRequest(BaseModel):
    """Schema for account registration."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)
    password_confirm: str = Field(..., min_length=8, max_length=128)


class SigninRequest(BaseModel):
    """Schema for login submissions."""

    email: str
    password: str


class SigninResponse(BaseModel):
    """Response returned after successful login."""

    token: str = Field(..., description="JWT access token")


class ProfileUpsertRequest(BaseModel):
    """Schema for creating or replacing the caller's public profile."""

    name: str = Field(..., min_length=1, max_length=100)
    handle: str = Field(..., description="Unique public handle")
    profile_img_url: str = Field("", max_length=2048)
    bio: str = Field("", max_length=500)

    @field_validator("handle")
    @classmethod
    def validate_handle(cls, v: str) -> str:
        """Validate the handle uses 1-30 letters, digits, underscores or dots."""
        if not _HANDLE_PATTERN.match(v):
            raise ValueError("Handle must be 1-30 letters, digits, '_' or '.'")
        return v


class ProfileResponse(BaseModel):
    """Response schema for user profile information."""

    id: int
    email: str
    name: str
    handle: str
    profile_img_url: str
    bio: str | None
    created_at: datetime
    updated_at: datetime
    follower_count: int = 0
    following_count: int = 0

    model_config = ConfigDict(from_attributes=True)
