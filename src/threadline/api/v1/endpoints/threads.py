"""Thread, feed and reaction endpoints for the Threadline API."""

from fastapi import APIRouter, status

from threadline.models import ReactionType
from threadline.schemas.common import ApiResponse
from threadline.schemas.thread import ThreadCreate, ThreadOut, ThreadUpdate
from threadline.services.cursor import next_cursor

from ..dependencies import (
    CurrentClaimsDep,
    PageDep,
    ThreadIdPath,
    ThreadServiceDep,
    VotesServiceDep,
)

router = APIRouter(prefix="/thread", tags=["threads"])


@router.post(
    "",
    response_model=ApiResponse[ThreadOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_thread(
    body: ThreadCreate, claims: CurrentClaimsDep, threads: ThreadServiceDep
) -> ApiResponse[ThreadOut]:
    """Publish a thread, or a reply when ``parent_thread`` is set."""
    thread = await threads.create(claims.id, body)
    return ApiResponse(message="Thread created", data=thread)


@router.get("/feed/guest", response_model=ApiResponse[list[ThreadOut]])
async def guest_feed(page: PageDep, threads: ThreadServiceDep) -> ApiResponse[list[ThreadOut]]:
    """Recommended threads for anonymous visitors."""
    items = await threads.list_recommended(None, page.claims, page.limit)
    return ApiResponse(message="Threads retrieved", data=items, next_cursor=next_cursor(items))


@router.get("/feed/personal", response_model=ApiResponse[list[ThreadOut]])
async def personal_feed(
    page: PageDep, claims: CurrentClaimsDep, threads: ThreadServiceDep
) -> ApiResponse[list[ThreadOut]]:
    """Recommended threads including those of followed authors."""
    items = await threads.list_recommended(claims.id, page.claims, page.limit)
    return ApiResponse(message="Threads retrieved", data=items, next_cursor=next_cursor(items))


@router.get("/{thread_id}", response_model=ApiResponse[ThreadOut])
async def get_thread(
    thread_id: ThreadIdPath, threads: ThreadServiceDep
) -> ApiResponse[ThreadOut]:
    thread = await threads.view(thread_id)
    return ApiResponse(message="Thread retrieved", data=thread)


@router.get("/{thread_id}/subthread", response_model=ApiResponse[list[ThreadOut]])
async def list_subthreads(
    thread_id: ThreadIdPath, page: PageDep, threads: ThreadServiceDep
) -> ApiResponse[list[ThreadOut]]:
    items = await threads.list_subthreads(thread_id, page.claims, page.limit)
    return ApiResponse(message="Threads retrieved", data=items, next_cursor=next_cursor(items))


@router.put("/{thread_id}", response_model=ApiResponse[ThreadOut])
async def update_thread(
    thread_id: ThreadIdPath,
    body: ThreadUpdate,
    claims: CurrentClaimsDep,
    threads: ThreadServiceDep,
) -> ApiResponse[ThreadOut]:
    thread = await threads.update(claims.id, thread_id, body)
    return ApiResponse(message="Thread updated", data=thread)


@router.delete("/{thread_id}", response_model=ApiResponse[None])
async def delete_thread(
    thread_id: ThreadIdPath, claims: CurrentClaimsDep, threads: ThreadServiceDep
) -> ApiResponse[None]:
    await threads.delete(claims.id, thread_id)
    return ApiResponse(message="Thread deleted")


@router.post("/{thread_id}/up", response_model=ApiResponse[None])
async def upvote(
    thread_id: ThreadIdPath, claims: CurrentClaimsDep, votes: VotesServiceDep
) -> ApiResponse[None]:
    await votes.react(claims.id, thread_id, ReactionType.UP)
    return ApiResponse(message="Upvoted")


@router.delete("/{thread_id}/up", response_model=ApiResponse[None])
async def cancel_upvote(
    thread_id: ThreadIdPath, claims: CurrentClaimsDep, votes: VotesServiceDep
) -> ApiResponse[None]:
    await votes.react_cancel(claims.id, thread_id, ReactionType.UP)
    return ApiResponse(message="Upvote cancelled")


@router.post("/{thread_id}/down", response_model=ApiResponse[None])
async def downvote(
    thread_id: ThreadIdPath, claims: CurrentClaimsDep, votes: VotesServiceDep
) -> ApiResponse[None]:
    await votes.react(claims.id, thread_id, ReactionType.DOWN)
    return ApiResponse(message="Downvoted")


@router.delete("/{thread_id}/down", response_model=ApiResponse[None])
async def cancel_downvote(
    thread_id: ThreadIdPath, claims: CurrentClaimsDep, votes: VotesServiceDep
) -> ApiResponse[None]:
    await votes.react_cancel(claims.id, thread_id, ReactionType.DOWN)
    return ApiResponse(message="Downvote cancelled")
