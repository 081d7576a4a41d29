"""Tests for the permission and state gates of the services."""

from datetime import timedelta

import pytest

from threadline.core.errors import (
    AlreadyFollowed,
    AlreadyReacted,
    AlreadyRegistered,
    InvalidCredentials,
    NotFollowed,
    NotFound,
    NotReacted,
    PasswordMismatch,
    PermissionDenied,
    ProfileNotCreated,
    TrySelfFollow,
)
from threadline.models import ReactionType
from threadline.schemas.thread import ThreadCreate, ThreadUpdate
from threadline.schemas.user import ProfileUpsertRequest
from threadline.services.cursor import CursorClaims


@pytest.fixture()
def services(app):
    return app.state


# Follow gates


async def test_self_follow_is_rejected(services, make_user) -> None:
    me = await make_user("solo")
    with pytest.raises(TrySelfFollow):
        await services.follow_service.follow(me.id, "solo")
    with pytest.raises(TrySelfFollow):
        await services.follow_service.unfollow(me.id, "solo")


async def test_follow_twice_then_unfollow_twice(services, make_user) -> None:
    me = await make_user()
    await make_user("target")
    follows = services.follow_service

    await follows.follow(me.id, "target")
    with pytest.raises(AlreadyFollowed):
        await follows.follow(me.id, "target")

    await follows.unfollow(me.id, "target")
    with pytest.raises(NotFollowed):
        await follows.unfollow(me.id, "target")


async def test_follow_requires_profiles(services, make_user) -> None:
    me = await make_user()
    incomplete = await make_user(complete=False)
    with pytest.raises(NotFound):
        await services.follow_service.follow(me.id, "nobody")
    with pytest.raises(ProfileNotCreated):
        await services.follow_service.follow(incomplete.id, me.handle)


async def test_follow_listings(services, make_user) -> None:
    star = await make_user("star")
    fans = [await make_user() for _ in range(3)]
    for fan in fans:
        await services.follow_service.follow(fan.id, "star")

    followers = await services.follow_service.list_followers("star", CursorClaims(), 2)
    assert [f.id for f in followers] == [fans[2].id, fans[1].id]

    following = await services.follow_service.list_following(fans[0].handle, CursorClaims(), 10)
    assert [f.handle for f in following] == ["star"]
    assert await services.follow_service.follow_counts(star.id) == (3, 0)


# Votes


async def test_one_reaction_per_thread(services, make_user, make_thread) -> None:
    voter = await make_user()
    thread = await make_thread(await make_user())
    votes = services.votes_service

    await votes.react(voter.id, thread.id, ReactionType.UP)
    with pytest.raises(AlreadyReacted):
        await votes.react(voter.id, thread.id, ReactionType.UP)
    with pytest.raises(AlreadyReacted):
        await votes.react(voter.id, thread.id, ReactionType.DOWN)

    with pytest.raises(NotReacted):
        await votes.react_cancel(voter.id, thread.id, ReactionType.DOWN)
    await votes.react_cancel(voter.id, thread.id, ReactionType.UP)
    await votes.react(voter.id, thread.id, ReactionType.DOWN)


async def test_react_on_missing_thread(services, make_user) -> None:
    voter = await make_user()
    with pytest.raises(NotFound):
        await services.votes_service.react(voter.id, 404, ReactionType.UP)


async def test_upvoted_and_downvoted_listings(services, make_user, make_thread) -> None:
    voter = await make_user()
    author = await make_user()
    liked = await make_thread(author)
    disliked = await make_thread(author)
    await services.votes_service.react(voter.id, liked.id, ReactionType.UP)
    await services.votes_service.react(voter.id, disliked.id, ReactionType.DOWN)

    up = await services.thread_service.list_upvoted(voter.id, CursorClaims(), 10)
    down = await services.thread_service.list_downvoted(voter.id, CursorClaims(), 10)
    assert [t.id for t in up] == [liked.id]
    assert [t.id for t in down] == [disliked.id]
    assert up[0].vote_score == 1


# Threads


async def test_ownership_gate(services, make_user, make_thread) -> None:
    owner, intruder = await make_user(), await make_user()
    thread = await make_thread(owner)
    threads = services.thread_service

    with pytest.raises(PermissionDenied):
        await threads.update(intruder.id, thread.id, ThreadUpdate(content="mine now"))
    with pytest.raises(PermissionDenied):
        await threads.delete(intruder.id, thread.id)

    await threads.delete(owner.id, thread.id)
    with pytest.raises(NotFound):
        await threads.delete(owner.id, thread.id)
    with pytest.raises(NotFound):
        await threads.update(intruder.id, thread.id, ThreadUpdate(content="late"))


async def test_create_reply_and_update(services, make_user) -> None:
    author = await make_user("writer")
    threads = services.thread_service

    root = await threads.create(author.id, ThreadCreate(title="Hi", content="root"))
    assert root.author.handle == "writer"
    reply = await threads.create(author.id, ThreadCreate(content="reply", parent_thread=root.id))
    assert reply.parent_thread == root.id

    with pytest.raises(NotFound):
        await threads.create(author.id, ThreadCreate(content="orphan", parent_thread=9999))
    with pytest.raises(NotFound):
        await threads.update(author.id, root.id, ThreadUpdate(content="x", parent_thread=root.id))

    updated = await threads.update(author.id, reply.id, ThreadUpdate(content="edited"))
    assert updated.content == "edited"
    assert updated.parent_thread is None

    subthreads = await threads.list_subthreads(root.id, CursorClaims(), 10)
    assert subthreads == []


async def test_create_requires_profile(services, make_user) -> None:
    user = await make_user(complete=False)
    with pytest.raises(ProfileNotCreated):
        await services.thread_service.create(user.id, ThreadCreate(content="x"))


async def test_list_by_handle_gates(services, make_user, make_thread) -> None:
    author = await make_user("poster")
    await make_thread(author)
    assert len(await services.thread_service.list_by_handle("poster", CursorClaims(), 5)) == 1
    with pytest.raises(NotFound):
        await services.thread_service.list_by_handle("ghost", CursorClaims(), 5)


async def test_view_counts(services, make_user, make_thread) -> None:
    thread = await make_thread(await make_user())
    await services.thread_service.view(thread.id)
    seen = await services.thread_service.view(thread.id)
    assert seen.view_count == 2


# Accounts


async def test_signup_signin_and_profile(services) -> None:
    users = services.user_service
    with pytest.raises(PasswordMismatch):
        await users.signup("a@example.com", "password123", "password124")

    user = await users.signup("a@example.com", "password123", "password123")
    with pytest.raises(AlreadyRegistered):
        await users.signup("a@example.com", "password123", "password123")

    with pytest.raises(InvalidCredentials):
        await users.signin("a@example.com", "wrong-password")
    with pytest.raises(InvalidCredentials):
        await users.signin("b@example.com", "password123")

    token = await users.signin("a@example.com", "password123")
    assert services.token_issuer.verify(token).id == user.id

    with pytest.raises(ProfileNotCreated):
        await users.me(user.id)
    profile = await users.upsert_profile(user.id, ProfileUpsertRequest(name="A", handle="aa"))
    assert profile.handle == "aa"
    assert (await users.get_profile("aa")).id == user.id


async def test_reacted_listing_resumes_after_reaction_time(
    services, make_user, make_thread, base_time
) -> None:
    voter = await make_user()
    author = await make_user()
    older = await make_thread(author, created_at=base_time)
    newer = await make_thread(author, created_at=base_time + timedelta(hours=1))
    await services.votes_service.react(voter.id, newer.id, ReactionType.UP)
    await services.votes_service.react(voter.id, older.id, ReactionType.UP)

    first = await services.thread_service.list_upvoted(voter.id, CursorClaims(), 1)
    assert [t.id for t in first] == [older.id]

    resume = CursorClaims(id=first[0].id, created_at=first[0].reacted_at)
    second = await services.thread_service.list_upvoted(voter.id, resume, 1)
    assert [t.id for t in second] == [newer.id]
