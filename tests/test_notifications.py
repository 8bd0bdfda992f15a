import pytest
from uuid import uuid4

from helpers import auth, fetch_interests, fetch_threads


async def _chat(client, user_id, property_id, message):
    return await client.post(
        "/api/v1/notification/chat",
        json={"message": message, "property": str(property_id)},
        headers=auth(user_id),
    )


async def _list(client, user_id):
    r = await client.get("/api/v1/notification/list", headers=auth(user_id))
    assert r.status_code == 200
    return r.json()


async def _update(client, user_id, type, notification_id=None):
    body = {"type": type}
    if notification_id is not None:
        body["notificationId"] = str(notification_id)
    return await client.post("/api/v1/notification/update", json=body, headers=auth(user_id))


async def _thread_for(client, user_id):
    (thread,) = await _list(client, user_id)
    return thread


@pytest.mark.asyncio
async def test_repeated_chat_reuses_one_thread(client, session_factory, world):
    assert (await _chat(client, world.buyer, world.property, "Is it still available?")).status_code == 200
    assert (await _chat(client, world.buyer, world.property, "Can I visit on Friday?")).status_code == 200

    threads = await fetch_threads(session_factory, user_id=world.buyer, agent_id=world.agent, property_id=world.property)
    assert len(threads) == 1

    thread = await _thread_for(client, world.buyer)
    assert thread["type"] == "message"
    assert [m["content"] for m in thread["messages"]] == ["Is it still available?", "Can I visit on Friday?"]
    assert thread["notificationFor"] == "user"


@pytest.mark.asyncio
async def test_agent_cannot_open_chat_on_own_property(client, world):
    r = await _chat(client, world.agent, world.property, "hello me")
    assert r.status_code == 400
    assert r.json()["detail"] == "Agents cannot initiate a conversation."


@pytest.mark.asyncio
async def test_chat_unknown_property(client, world):
    r = await _chat(client, world.buyer, uuid4(), "hello?")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_chat_rejects_blank_message(client, world):
    r = await _chat(client, world.buyer, world.property, "   ")
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_agent_reply_and_annotation(client, world):
    await _chat(client, world.buyer, world.property, "Hi")
    thread = await _thread_for(client, world.agent)
    assert thread["notificationFor"] == "agent"

    r = await client.post(
        "/api/v1/notification/message",
        json={"notificationId": thread["id"], "message": "Hello, yes it is"},
        headers=auth(world.agent),
    )
    assert r.status_code == 200

    thread = await _thread_for(client, world.buyer)
    assert [m["sender"]["id"] for m in thread["messages"]] == [str(world.buyer), str(world.agent)]


@pytest.mark.asyncio
async def test_reply_unknown_thread(client, world):
    r = await client.post(
        "/api/v1/notification/message",
        json={"notificationId": str(uuid4()), "message": "anyone?"},
        headers=auth(world.buyer),
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_reply_by_outsider_is_forbidden(client, world):
    await _chat(client, world.buyer, world.property, "Hi")
    thread = await _thread_for(client, world.buyer)

    r = await client.post(
        "/api/v1/notification/message",
        json={"notificationId": thread["id"], "message": "let me in"},
        headers=auth(world.other),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_mark_as_read_toggles(client, world):
    await _chat(client, world.buyer, world.property, "Hi")
    thread = await _thread_for(client, world.agent)
    assert thread["isRead"] is False

    r = await _update(client, world.agent, "mark_as_read", thread["id"])
    assert r.json()["message"] == "Notification marked as read"
    assert (await _thread_for(client, world.agent))["isRead"] is True
    # the other party's view is untouched
    assert (await _thread_for(client, world.buyer))["isRead"] is False

    r = await _update(client, world.agent, "mark_as_read", thread["id"])
    assert r.json()["message"] == "Notification marked as unread"
    assert (await _thread_for(client, world.agent))["isRead"] is False


@pytest.mark.asyncio
async def test_mark_as_read_needs_existing_thread(client, world):
    assert (await _update(client, world.buyer, "mark_as_read", uuid4())).status_code == 404
    assert (await _update(client, world.buyer, "mark_as_read")).status_code == 404


@pytest.mark.asyncio
async def test_mark_all_as_read_is_scoped_and_idempotent(client, world):
    await _chat(client, world.buyer, world.property, "About the apartment")
    await _chat(client, world.buyer, world.second_property, "About the villa")
    await _chat(client, world.other, world.property, "Me too")

    for _ in range(2):
        r = await _update(client, world.buyer, "mark_all_as_read")
        assert r.status_code == 200

    buyer_threads = await _list(client, world.buyer)
    assert len(buyer_threads) == 2
    assert all(t["isRead"] for t in buyer_threads)
    assert all(t["readBy"] == [str(world.buyer)] for t in buyer_threads)

    # threads the buyer is not part of are not touched
    (other_thread,) = await _list(client, world.other)
    assert other_thread["readBy"] == []


@pytest.mark.asyncio
async def test_remove_hides_only_for_caller(client, world):
    await _chat(client, world.buyer, world.property, "Hi")
    thread = await _thread_for(client, world.buyer)

    r = await _update(client, world.buyer, "remove", thread["id"])
    assert r.status_code == 200

    assert await _list(client, world.buyer) == []
    (agent_view,) = await _list(client, world.agent)
    assert agent_view["id"] == thread["id"]


@pytest.mark.asyncio
async def test_delete_hides_every_thread_of_caller(client, world):
    await _chat(client, world.buyer, world.property, "Apartment?")
    await _chat(client, world.other, world.property, "Apartment for me?")

    r = await _update(client, world.agent, "delete")
    assert r.status_code == 200

    assert await _list(client, world.agent) == []
    assert len(await _list(client, world.buyer)) == 1
    assert len(await _list(client, world.other)) == 1


@pytest.mark.asyncio
async def test_invalid_update_type(client, world):
    r = await _update(client, world.buyer, "archive")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid type provided"


@pytest.mark.asyncio
async def test_new_event_resets_read_and_hidden_for_both_parties(client, session_factory, world):
    await client.post("/api/v1/property/buy-now", json={"property": str(world.property)}, headers=auth(world.buyer))
    thread = await _thread_for(client, world.agent)
    assert thread["type"] == "interest"

    await _update(client, world.agent, "mark_as_read", thread["id"])
    await _update(client, world.buyer, "mark_as_read", thread["id"])
    await _update(client, world.buyer, "remove", thread["id"])
    assert await _list(client, world.buyer) == []

    (interest,) = await fetch_interests(session_factory, user_id=world.buyer)
    r = await client.post(
        "/api/v1/property/my/property/manage/status",
        json={
            "status": "under_review",
            "property": str(world.property),
            "user": str(world.buyer),
            "interestId": str(interest.id),
        },
        headers=auth(world.agent),
    )
    assert r.status_code == 200

    buyer_view = await _thread_for(client, world.buyer)
    agent_view = await _thread_for(client, world.agent)
    assert buyer_view["type"] == "status"
    for view in (buyer_view, agent_view):
        assert view["isRead"] is False
        assert view["readBy"] == []
        assert view["deletedBy"] == []

    # interest, status and chat events all land on the same thread
    await _chat(client, world.buyer, world.property, "Any news?")
    (thread,) = await fetch_threads(session_factory, user_id=world.buyer, property_id=world.property)
    assert thread.type == "message"


@pytest.mark.asyncio
async def test_requires_bearer_token(client, world):
    r = await client.get("/api/v1/notification/list")
    assert r.status_code == 401

    r = await client.get("/api/v1/notification/list", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403
