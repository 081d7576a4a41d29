"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    ok: bool = True
    message: str
    data: T | None = None
    next_cursor: str | None = Field(
        None,
        description="Opaque cursor for the next page; only set on list endpoints.",
    )
    timestamp: str = Field(default_factory=_now_iso)


class ErrorResponse(BaseModel):
    """Error envelope produced by the exception handlers."""

    ok: bool = False
    message: str
    timestamp: str = Field(default_factory=_now_iso)
