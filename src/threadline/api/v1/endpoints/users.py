"""User, profile and follow endpoints for the Threadline API."""

from fastapi import APIRouter

from threadline.schemas.common import ApiResponse
from threadline.schemas.follow import FollowEntry
from threadline.schemas.thread import ReactedThreadOut, ThreadOut
from threadline.schemas.user import ProfileResponse, ProfileUpsertRequest
from threadline.services.cursor import CursorClaims, encode, next_cursor

from ..dependencies import (
    CurrentClaimsDep,
    FollowServiceDep,
    PageDep,
    ThreadServiceDep,
    UserServiceDep,
)

router = APIRouter(prefix="/users", tags=["users"])


def _follow_cursor(entries: list[FollowEntry]) -> str | None:
    if not entries:
        return None
    last = entries[-1]
    return encode(CursorClaims(id=last.id, created_at=last.followed_at))


def _reaction_cursor(threads: list[ReactedThreadOut]) -> str | None:
    if not threads:
        return None
    last = threads[-1]
    return encode(CursorClaims(id=last.id, created_at=last.reacted_at))


@router.get("/me", response_model=ApiResponse[ProfileResponse])
async def me(claims: CurrentClaimsDep, users: UserServiceDep) -> ApiResponse[ProfileResponse]:
    """Return the caller's own profile."""
    profile = await users.me(claims.id)
    return ApiResponse(message="Profile retrieved", data=profile)


@router.put("/me/profile", response_model=ApiResponse[ProfileResponse])
async def upsert_profile(
    body: ProfileUpsertRequest, claims: CurrentClaimsDep, users: UserServiceDep
) -> ApiResponse[ProfileResponse]:
    """Create or replace the caller's public profile."""
    profile = await users.upsert_profile(claims.id, body)
    return ApiResponse(message="Profile saved", data=profile)


@router.get("/me/thread/upvoted", response_model=ApiResponse[list[ReactedThreadOut]])
async def upvoted(
    page: PageDep, claims: CurrentClaimsDep, threads: ThreadServiceDep
) -> ApiResponse[list[ReactedThreadOut]]:
    items = await threads.list_upvoted(claims.id, page.claims, page.limit)
    return ApiResponse(
        message="Threads retrieved", data=items, next_cursor=_reaction_cursor(items)
    )


@router.get("/me/thread/downvoted", response_model=ApiResponse[list[ReactedThreadOut]])
async def downvoted(
    page: PageDep, claims: CurrentClaimsDep, threads: ThreadServiceDep
) -> ApiResponse[list[ReactedThreadOut]]:
    items = await threads.list_downvoted(claims.id, page.claims, page.limit)
    return ApiResponse(
        message="Threads retrieved", data=items, next_cursor=_reaction_cursor(items)
    )


@router.get("/{handle}", response_model=ApiResponse[ProfileResponse])
async def get_profile(handle: str, users: UserServiceDep) -> ApiResponse[ProfileResponse]:
    profile = await users.get_profile(handle)
    return ApiResponse(message="Profile retrieved", data=profile)


@router.get("/{handle}/thread", response_model=ApiResponse[list[ThreadOut]])
async def threads_by_handle(
    handle: str, page: PageDep, threads: ThreadServiceDep
) -> ApiResponse[list[ThreadOut]]:
    items = await threads.list_by_handle(handle, page.claims, page.limit)
    return ApiResponse(message="Threads retrieved", data=items, next_cursor=next_cursor(items))


@router.get("/{handle}/followers", response_model=ApiResponse[list[FollowEntry]])
async def followers(
    handle: str, page: PageDep, follows: FollowServiceDep
) -> ApiResponse[list[FollowEntry]]:
    entries = await follows.list_followers(handle, page.claims, page.limit)
    return ApiResponse(
        message="Followers retrieved", data=entries, next_cursor=_follow_cursor(entries)
    )


@router.get("/{handle}/following", response_model=ApiResponse[list[FollowEntry]])
async def following(
    handle: str, page: PageDep, follows: FollowServiceDep
) -> ApiResponse[list[FollowEntry]]:
    entries = await follows.list_following(handle, page.claims, page.limit)
    return ApiResponse(
        message="Following retrieved", data=entries, next_cursor=_follow_cursor(entries)
    )


@router.post("/{handle}/follow", response_model=ApiResponse[None])
async def follow(
    handle: str, claims: CurrentClaimsDep, follows: FollowServiceDep
) -> ApiResponse[None]:
    await follows.follow(claims.id, handle)
    return ApiResponse(message="Followed")


@router.delete("/{handle}/follow", response_model=ApiResponse[None])
async def unfollow(
    handle: str, claims: CurrentClaimsDep, follows: FollowServiceDep
) -> ApiResponse[None]:
    await follows.unfollow(claims.id, handle)
    return ApiResponse(message="Unfollowed")
