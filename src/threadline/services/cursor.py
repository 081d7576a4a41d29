"""Opaque pagination cursors.

A cursor is URL-safe base64 over a compact JSON object holding the sort key of
the last row a client has seen::

    {"id": 42, "user_id": 7, "created_at": "2025-01-01T12:00:00+00:00"}

Every field is optional. Decoding is tolerant: anything that is not a cursor
this server could have produced decodes to ``None`` and the listing restarts
from the top instead of failing the request.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from threadline.db.time import as_utc, utcnow

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Identifiers are stored as signed 64-bit integers.
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


@dataclass(frozen=True)
class CursorClaims:
    """Position of the last row seen; listings resume strictly after it."""

    id: int | None = None
    user_id: int | None = None
    created_at: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        if self.created_at is not None:
            object.__setattr__(self, "created_at", as_utc(self.created_at))


class _CursorSource(Protocol):
    id: int
    user_id: int
    created_at: datetime


def encode(claims: CursorClaims) -> str:
    """Return the opaque token for ``claims``; absent fields are omitted."""
    payload: dict[str, Any] = {}
    if claims.id is not None:
        payload["id"] = claims.id
    if claims.user_id is not None:
        payload["user_id"] = claims.user_id
    if claims.created_at is not None:
        payload["created_at"] = claims.created_at.isoformat()
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("cursor id fields must be integers")
    if not MIN_ID <= value <= MAX_ID:
        raise ValueError("cursor id fields must fit a 64-bit integer")
    return value


def decode(token: str | None) -> CursorClaims | None:
    """Return the claims carried by ``token`` or ``None`` if it is malformed.

    Never raises.
    """
    if not token:
        return None
    try:
        padding = "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(token + padding)
        payload = json.loads(raw.decode("utf-8"))
        if not isinstance(payload, dict):
            return None
        created_at = payload.get("created_at")
        if created_at is not None:
            if not isinstance(created_at, str):
                return None
            created_at = datetime.fromisoformat(created_at)
        return CursorClaims(
            id=_optional_int(payload.get("id")),
            user_id=_optional_int(payload.get("user_id")),
            created_at=created_at,
        )
    except (binascii.Error, UnicodeError, ValueError, TypeError, OverflowError, RecursionError):
        return None


def preprocess(
    cursor: str | None,
    limit: int | None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
    now: datetime | None = None,
) -> tuple[CursorClaims, int]:
    """Resolve request parameters into concrete claims and a page size.

    A missing or undecodable cursor means the first page: ``created_at`` is
    set to ``now`` and ``id`` stays absent. The limit defaults to
    ``default_limit`` and is clamped to ``1..max_limit``.
    """
    claims = decode(cursor) or CursorClaims()
    if claims.created_at is None:
        claims = CursorClaims(
            id=claims.id,
            user_id=claims.user_id,
            created_at=now or utcnow(),
        )

    effective = default_limit if limit is None else limit
    effective = max(1, min(effective, max_limit))
    return claims, effective


def cursor_for(row: _CursorSource) -> str:
    """Return the cursor that resumes a listing after ``row``."""
    return encode(CursorClaims(id=row.id, user_id=row.user_id, created_at=row.created_at))


def next_cursor(rows: list[Any]) -> str | None:
    """Return the cursor after the last row of a page, or ``None`` if empty."""
    if not rows:
        return None
    return cursor_for(rows[-1])
