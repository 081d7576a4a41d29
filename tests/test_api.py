"""End-to-end tests for the HTTP surface."""

import base64
import json

from fastapi import status


async def test_health(client) -> None:
    res = await client.get("/health")
    assert res.status_code == status.HTTP_200_OK
    assert res.json() == {"status": "ok"}


async def test_signup_rejects_duplicates_with_error_envelope(client) -> None:
    body = {"email": "dup@example.com", "password": "password123", "password_confirm": "password123"}
    assert (await client.post("/api/v1/auth/signup", json=body)).status_code == status.HTTP_201_CREATED

    res = await client.post("/api/v1/auth/signup", json=body)
    assert res.status_code == status.HTTP_409_CONFLICT
    payload = res.json()
    assert payload["ok"] is False
    assert payload["message"] == "User is already registered"
    assert "timestamp" in payload


async def test_protected_route_requires_token(client) -> None:
    res = await client.get("/api/v1/users/me")
    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json()["ok"] is False

    res = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == status.HTTP_401_UNAUTHORIZED


async def test_profile_flow(client, register) -> None:
    headers = await register("dana", profile=False)
    res = await client.get("/api/v1/users/me", headers=headers)
    assert res.status_code == status.HTTP_404_NOT_FOUND

    res = await client.put(
        "/api/v1/users/me/profile",
        json={"name": "Dana", "handle": "dana", "bio": "hi"},
        headers=headers,
    )
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["data"]["handle"] == "dana"

    res = await client.get("/api/v1/users/dana")
    assert res.json()["data"]["bio"] == "hi"

    res = await client.put(
        "/api/v1/users/me/profile",
        json={"name": "Dana", "handle": "not a handle!"},
        headers=headers,
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()["ok"] is False
    assert res.json()["message"] == "Invalid Query"
    assert "detail" not in res.json()


async def test_thread_lifecycle(client, register) -> None:
    owner = await register("owner")
    other = await register("other")

    res = await client.post("/api/v1/thread", json={"title": "T", "content": "body"}, headers=owner)
    assert res.status_code == status.HTTP_201_CREATED
    thread = res.json()["data"]
    assert thread["author"]["handle"] == "owner"

    res = await client.get(f"/api/v1/thread/{thread['id']}")
    assert res.json()["data"]["view_count"] == 1

    res = await client.put(
        f"/api/v1/thread/{thread['id']}", json={"content": "hijack"}, headers=other
    )
    assert res.status_code == status.HTTP_403_FORBIDDEN

    res = await client.post(f"/api/v1/thread/{thread['id']}/up", headers=other)
    assert res.status_code == status.HTTP_200_OK
    res = await client.post(f"/api/v1/thread/{thread['id']}/down", headers=other)
    assert res.status_code == status.HTTP_400_BAD_REQUEST

    res = await client.get("/api/v1/users/me/thread/upvoted", headers=other)
    assert [t["id"] for t in res.json()["data"]] == [thread["id"]]

    res = await client.delete(f"/api/v1/thread/{thread['id']}", headers=owner)
    assert res.status_code == status.HTTP_200_OK
    res = await client.get(f"/api/v1/thread/{thread['id']}")
    assert res.status_code == status.HTTP_404_NOT_FOUND


async def test_guest_feed_cursor_walk(client, register) -> None:
    headers = await register("author")
    for n in range(3):
        await client.post("/api/v1/thread", json={"content": f"post {n}"}, headers=headers)

    seen: list[int] = []
    cursor = None
    for _ in range(4):
        params = {"limit": 2}
        if cursor:
            params["cursor"] = cursor
        res = await client.get("/api/v1/thread/feed/guest", params=params)
        body = res.json()
        assert body["ok"] is True
        assert len(body["data"]) <= 2
        seen.extend(t["id"] for t in body["data"])
        cursor = body["next_cursor"]
        if cursor is None:
            break

    assert len(seen) == 3
    assert len(set(seen)) == 3


async def test_personal_feed_and_follow_routes(client, register) -> None:
    reader = await register("reader")
    writer = await register("writer")
    await client.post("/api/v1/thread", json={"content": "from writer"}, headers=writer)

    res = await client.post("/api/v1/users/reader/follow", headers=reader)
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()["message"].startswith("You tried to follow yourself")

    assert (await client.post("/api/v1/users/writer/follow", headers=reader)).status_code == 200
    res = await client.get("/api/v1/users/writer/followers")
    assert [f["handle"] for f in res.json()["data"]] == ["reader"]

    res = await client.get("/api/v1/thread/feed/personal", headers=reader)
    assert [t["author"]["handle"] for t in res.json()["data"]] == ["writer"]

    assert (await client.delete("/api/v1/users/writer/follow", headers=reader)).status_code == 200
    res = await client.delete("/api/v1/users/writer/follow", headers=reader)
    assert res.status_code == status.HTTP_400_BAD_REQUEST


async def test_garbage_cursor_restarts_listing(client, register) -> None:
    headers = await register("someone")
    await client.post("/api/v1/thread", json={"content": "only"}, headers=headers)
    res = await client.get("/api/v1/thread/feed/guest", params={"cursor": "%%%garbage"})
    assert res.status_code == status.HTTP_200_OK
    assert len(res.json()["data"]) == 1


async def test_malformed_query_uses_error_envelope(client) -> None:
    res = await client.get("/api/v1/thread/feed/guest", params={"limit": "abc"})
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    body = res.json()
    assert body == {"ok": False, "message": "Invalid Query", "timestamp": body["timestamp"]}


async def test_out_of_range_thread_id_is_rejected(client, register) -> None:
    headers = await register("bounded")
    res = await client.get("/api/v1/thread/100000000000000000000")
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()["message"] == "Invalid Query"

    res = await client.post("/api/v1/thread/100000000000000000000/up", headers=headers)
    assert res.status_code == status.HTTP_400_BAD_REQUEST

    res = await client.post(
        "/api/v1/thread",
        json={"content": "reply", "parent_thread": 10**20},
        headers=headers,
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST


async def test_foreign_cursor_with_huge_id_restarts_listing(client, register) -> None:
    headers = await register("huge")
    await client.post("/api/v1/thread", json={"content": "first"}, headers=headers)
    raw = json.dumps({"id": 10**20, "created_at": "2999-01-01T00:00:00+00:00"}).encode()
    cursor = base64.urlsafe_b64encode(raw).decode().rstrip("=")

    res = await client.get("/api/v1/users/huge/thread", params={"cursor": cursor})
    assert res.status_code == status.HTTP_200_OK
    assert [t["content"] for t in res.json()["data"]] == ["first"]


async def test_reacted_listing_pages_by_reaction_time(client, register) -> None:
    author = await register("poet")
    reader = await register("critic")
    older = await client.post("/api/v1/thread", json={"content": "older"}, headers=author)
    newer = await client.post("/api/v1/thread", json={"content": "newer"}, headers=author)
    older_id = older.json()["data"]["id"]
    newer_id = newer.json()["data"]["id"]

    # React to the newer thread first, so reaction order differs from creation order.
    await client.post(f"/api/v1/thread/{newer_id}/up", headers=reader)
    await client.post(f"/api/v1/thread/{older_id}/up", headers=reader)

    seen: list[int] = []
    cursor = None
    for _ in range(3):
        params = {"limit": 1}
        if cursor:
            params["cursor"] = cursor
        res = await client.get("/api/v1/users/me/thread/upvoted", params=params, headers=reader)
        seen.extend(t["id"] for t in res.json()["data"])
        cursor = res.json()["next_cursor"]
        if cursor is None:
            break

    assert seen == [older_id, newer_id]
