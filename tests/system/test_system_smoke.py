"""
System smoke test: full forum API flow in-process with SQLite.
Covers health, topic and reply lifecycle, moderation, search, index and
member pages through the public HTTP surface.
"""

import uuid

import pytest
from httpx import AsyncClient

from parley.kernel.models import Forum

API = "/api/public"


async def _start_topic(client: AsyncClient, forum: Forum, headers: dict, title="Hello world"):
    response = await client.post(
        f"{API}/topics/create-topic",
        json={"forum_id": str(forum.id), "title": title, "content": "Hello **world**"},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


async def _topic_page(client: AsyncClient, slug: str, headers: dict = None):
    return await client.get(f"{API}/topics/welcome/{slug}", headers=headers or {})


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Health endpoint responds."""
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert r.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    r = await client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_topic_lifecycle(
    client: AsyncClient,
    forum: Forum,
    auth_headers: dict,
    other_headers: dict,
    moderator_headers: dict,
):
    """Create -> read -> lock -> reply rules -> delete."""
    slug = await _start_topic(client, forum, auth_headers)
    assert slug == "hello-world"

    # Anonymous readers see rendered markdown but hold no write flags
    r = await _topic_page(client, slug)
    assert r.status_code == 200, r.text
    page = r.json()
    assert "<strong>world</strong>" in page["topic"]["content"]
    assert page["can_edit"] is False
    assert page["can_reply"] is False
    topic_id = page["topic"]["id"]

    r = await _topic_page(client, slug, auth_headers)
    assert r.json()["can_edit"] is True
    assert r.json()["can_moderate"] is False

    # Locking twice is fine
    for _ in range(2):
        r = await client.post(
            f"{API}/topics/lock-topic/{forum.id}/{topic_id}",
            json=True,
            headers=moderator_headers,
        )
        assert r.status_code == 200, r.text

    # Members cannot reply to a locked topic, moderators can
    reply = {"forum_id": str(forum.id), "topic_id": topic_id, "content": "me too"}
    r = await client.post(f"{API}/replies/create-reply", json=reply, headers=other_headers)
    assert r.status_code == 401
    r = await client.post(f"{API}/replies/create-reply", json=reply, headers=moderator_headers)
    assert r.status_code == 200, r.text
    uuid.UUID(r.json())

    # The author can no longer edit a locked topic
    r = await client.post(
        f"{API}/topics/update-topic",
        json={
            "forum_id": str(forum.id),
            "topic_id": topic_id,
            "title": "Edited",
            "content": "edited",
        },
        headers=auth_headers,
    )
    assert r.status_code == 401

    # Delete: not by another member, but by a moderator
    r = await client.delete(
        f"{API}/topics/delete-topic/{forum.id}/{topic_id}", headers=other_headers
    )
    assert r.status_code == 401
    r = await client.delete(
        f"{API}/topics/delete-topic/{forum.id}/{topic_id}", headers=moderator_headers
    )
    assert r.status_code == 200

    r = await _topic_page(client, slug)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_replies_and_answer(
    client: AsyncClient,
    forum: Forum,
    auth_headers: dict,
    other_headers: dict,
):
    slug = await _start_topic(client, forum, auth_headers, title="Which editor?")
    topic_id = (await _topic_page(client, slug)).json()["topic"]["id"]

    reply = {"forum_id": str(forum.id), "topic_id": topic_id, "content": "*vim*"}
    r = await client.post(f"{API}/replies/create-reply", json=reply, headers=other_headers)
    assert r.status_code == 200, r.text
    reply_id = r.json()

    # The reply author cannot pick the answer; the topic author can
    answer_url = f"{API}/replies/set-reply-as-answer/{forum.id}/{topic_id}/{reply_id}"
    r = await client.post(answer_url, json=True, headers=other_headers)
    assert r.status_code == 401
    r = await client.post(answer_url, json=True, headers=auth_headers)
    assert r.status_code == 200, r.text

    page = (await _topic_page(client, slug)).json()
    assert page["topic"]["has_answer"] is True
    assert page["answer"]["id"] == reply_id
    assert page["answer"]["content"] == "<p><em>vim</em></p>"
    assert page["replies"]["total_records"] == 0

    r = await client.get(f"{API}/topics/{forum.id}/{topic_id}/replies?page=1")
    assert r.status_code == 200
    assert r.json()["items"] == []

    # Reply author edits and deletes their own reply
    r = await client.post(
        f"{API}/replies/update-reply",
        json={
            "forum_id": str(forum.id),
            "topic_id": topic_id,
            "reply_id": reply_id,
            "content": "emacs",
        },
        headers=other_headers,
    )
    assert r.status_code == 200, r.text
    r = await client.delete(
        f"{API}/replies/delete-reply/{forum.id}/{topic_id}/{reply_id}", headers=other_headers
    )
    assert r.status_code == 200

    page = (await _topic_page(client, slug)).json()
    assert page["topic"]["has_answer"] is False
    assert page["answer"] is None


@pytest.mark.asyncio
async def test_topic_slug_matching_an_editor_path(
    client: AsyncClient, forum: Forum, auth_headers: dict
):
    """A topic titled "New topic" is read through the topic page, not the editor."""
    slug = await _start_topic(client, forum, auth_headers, title="New topic")
    assert slug == "new-topic"

    r = await _topic_page(client, slug)
    assert r.status_code == 200, r.text
    assert r.json()["topic"]["title"] == "New topic"

    r = await _topic_page(client, slug, auth_headers)
    assert r.status_code == 200, r.text


@pytest.mark.asyncio
async def test_read_denied_is_401_only_for_existing_targets(
    client: AsyncClient, members_only_forum: Forum, auth_headers: dict
):
    forum_id = members_only_forum.id
    slug = await _start_topic(client, members_only_forum, auth_headers, title="Private")

    r = await client.get(f"{API}/topics/members-only/{slug}", headers=auth_headers)
    assert r.status_code == 200, r.text
    topic_id = r.json()["topic"]["id"]

    # Anonymous callers lack Read here
    r = await client.get(f"{API}/topics/members-only/{slug}")
    assert r.status_code == 401
    r = await client.get(f"{API}/topics/{forum_id}/{topic_id}/replies")
    assert r.status_code == 401
    r = await client.get(f"{API}/forums/members-only")
    assert r.status_code == 401

    # Missing targets are 404 before any permission check
    r = await client.get(f"{API}/topics/members-only/missing")
    assert r.status_code == 404
    r = await client.get(f"{API}/forums/missing")
    assert r.status_code == 404

    # Replies of a missing topic are an empty page once Read is granted
    r = await client.get(f"{API}/topics/{forum_id}/{uuid.uuid4()}/replies", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["items"] == []


@pytest.mark.asyncio
async def test_editor_pages(client: AsyncClient, forum: Forum, auth_headers: dict, other_headers: dict):
    r = await client.get(f"{API}/topics/{forum.id}/new-topic", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["forum"]["id"] == str(forum.id)
    assert r.json()["topic"] is None

    r = await client.get(f"{API}/topics/{uuid.uuid4()}/new-topic", headers=auth_headers)
    assert r.status_code == 404

    slug = await _start_topic(client, forum, auth_headers)
    topic_id = (await _topic_page(client, slug)).json()["topic"]["id"]

    r = await client.get(f"{API}/topics/{forum.id}/edit-topic/{topic_id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["topic"]["content"] == "Hello **world**"

    r = await client.get(f"{API}/topics/{forum.id}/edit-topic/{topic_id}", headers=other_headers)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_anonymous_and_invalid_writes(client: AsyncClient, forum: Forum, auth_headers: dict):
    body = {"forum_id": str(forum.id), "title": "Hi", "content": "there"}
    r = await client.post(f"{API}/topics/create-topic", json=body)
    assert r.status_code == 401

    r = await client.post(
        f"{API}/topics/create-topic",
        json={**body, "title": "   "},
        headers=auth_headers,
    )
    assert r.status_code == 422

    r = await client.post(
        f"{API}/topics/create-topic",
        json={**body, "forum_id": str(uuid.uuid4())},
        headers=auth_headers,
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_forum_search_index_and_members(
    client: AsyncClient,
    forum: Forum,
    auth_headers: dict,
):
    await _start_topic(client, forum, auth_headers, title="Gardening")
    await _start_topic(client, forum, auth_headers, title="Cooking")

    r = await client.get(f"{API}/forums/welcome")
    assert r.status_code == 200
    assert r.json()["topics"]["total_records"] == 2
    assert r.json()["can_start"] is False

    r = await client.get(f"{API}/forums/welcome", headers=auth_headers)
    assert r.json()["can_start"] is True

    r = await client.get(f"{API}/forums/{forum.id}/topics?order_by=title&is_ascending=true")
    assert [t["title"] for t in r.json()["items"]] == ["Cooking", "Gardening"]

    r = await client.get(f"{API}/forums/missing")
    assert r.status_code == 404

    r = await client.get(f"{API}/search?search=garden")
    assert r.status_code == 200
    assert [p["title"] for p in r.json()["posts"]["items"]] == ["Gardening"]

    r = await client.get(f"{API}/index-model")
    assert r.status_code == 200
    assert r.json()["categories"][0]["forums"][0]["topics_count"] == 2

    r = await client.get(f"{API}/members", headers=auth_headers)
    assert r.status_code == 200
    me = r.json()
    assert me["member"]["topics_count"] == 2
    assert me["posts"]["total_records"] == 2

    r = await client.get(f"{API}/members/{me['member']['id']}")
    assert r.status_code == 200
    r = await client.get(f"{API}/members/{uuid.uuid4()}")
    assert r.status_code == 404
    r = await client.get(f"{API}/members")
    assert r.status_code == 401
