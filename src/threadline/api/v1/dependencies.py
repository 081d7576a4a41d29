"""Shared API dependencies for authentication and service lookup."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Path, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from threadline.core.errors import AuthTokenInvalid
from threadline.core.security import TokenClaims, TokenIssuer
from threadline.core.settings import Settings
from threadline.services import cursor as cursor_codec
from threadline.services.cursor import CursorClaims
from threadline.services.follow_service import FollowService
from threadline.services.thread_service import ThreadService
from threadline.services.user_service import UserService
from threadline.services.votes_service import VotesService

# HTTP Bearer scheme for JWT authentication; missing headers are reported
# through the error envelope rather than FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_thread_service(request: Request) -> ThreadService:
    return request.app.state.thread_service


def get_follow_service(request: Request) -> FollowService:
    return request.app.state.follow_service


def get_votes_service(request: Request) -> VotesService:
    return request.app.state.votes_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
ThreadServiceDep = Annotated[ThreadService, Depends(get_thread_service)]
FollowServiceDep = Annotated[FollowService, Depends(get_follow_service)]
VotesServiceDep = Annotated[VotesService, Depends(get_votes_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> TokenClaims:
    """Return the claims of the bearer token.

    Raises:
        AuthTokenInvalid: If the header is missing or the token does not verify.
    """
    if credentials is None:
        raise AuthTokenInvalid("Missing bearer token")
    return tokens.verify(credentials.credentials)


CurrentClaimsDep = Annotated[TokenClaims, Depends(get_current_claims)]

# Path identifiers outside the stored integer range are rejected as malformed input.
ThreadIdPath = Annotated[int, Path(ge=1, le=cursor_codec.MAX_ID)]


@dataclass(frozen=True)
class Page:
    """Resolved ``cursor`` and ``limit`` query parameters of a listing."""

    claims: CursorClaims
    limit: int


def get_page(
    settings: SettingsDep,
    cursor: str | None = Query(None, description="Opaque cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum number of items to return"),
) -> Page:
    claims, effective = cursor_codec.preprocess(
        cursor,
        limit,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    return Page(claims, effective)


PageDep = Annotated[Page, Depends(get_page)]
