import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest.fixture
def trio(make_user):
    async def _make():
        ana = await make_user()
        bob = await make_user(name="Bob", personal_email="b@x.com", uni_email="b@uni.edu")
        cam = await make_user(name="Cam", personal_email="c@x.com", uni_email="c@uni.edu")
        return ana, bob, cam

    return _make


async def _send(client: AsyncClient, sender, receiver, text, **extra):
    response = await client.post(
        "/api/messages/send",
        json={"receiver_id": receiver["user_id"], "message": text, **extra},
        headers=sender["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["message_id"]


async def test_conversation_is_ordered_and_scoped(client: AsyncClient, trio):
    ana, bob, cam = await trio()
    m1 = await _send(client, ana, bob, "Is the fridge available?")
    m2 = await _send(client, bob, ana, "Yes!")
    await _send(client, cam, ana, "Unrelated")
    m3 = await _send(client, ana, bob, "Great, see you at Dorm I")

    response = await client.get(
        "/api/messages/get", params={"other_user_id": bob["user_id"]}, headers=ana["headers"]
    )
    assert response.status_code == 200
    messages = response.json()["messages"]
    assert [message["message_id"] for message in messages] == [m1, m2, m3]
    assert {message["sender_id"] for message in messages} == {ana["user_id"], bob["user_id"]}


async def test_fetching_conversation_marks_incoming_read(client: AsyncClient, trio):
    ana, bob, _ = await trio()
    await _send(client, bob, ana, "Hello")
    await _send(client, bob, ana, "Still there?")
    await _send(client, ana, bob, "Hi")

    unread = await client.get("/api/messages/unread", headers=ana["headers"])
    assert unread.json()["count"] == 2

    response = await client.get(
        "/api/messages/get", params={"other_user_id": bob["user_id"]}, headers=ana["headers"]
    )
    messages = response.json()["messages"]
    incoming = [message for message in messages if message["sender_id"] == bob["user_id"]]
    outgoing = [message for message in messages if message["sender_id"] == ana["user_id"]]
    assert all(message["is_read"] and message["read_at"] for message in incoming)
    assert outgoing[0]["is_read"] is False
    assert outgoing[0]["read_at"] is None

    unread = await client.get("/api/messages/unread", headers=ana["headers"])
    assert unread.json()["count"] == 0

    # Ana's own message to Bob stays unread until Bob opens the thread
    unread = await client.get("/api/messages/unread", headers=bob["headers"])
    assert unread.json()["count"] == 1
    await client.get(
        "/api/messages/get", params={"other_user_id": ana["user_id"]}, headers=bob["headers"]
    )

    unread = await client.get("/api/messages/unread", headers=bob["headers"])
    assert unread.json()["count"] == 0


async def test_send_with_item_reference(client: AsyncClient, trio, make_item):
    ana, bob, _ = await trio()
    item_id = await make_item(bob)
    await _send(client, ana, bob, "Interested", item_id=item_id)

    response = await client.get(
        "/api/messages/get", params={"other_user_id": bob["user_id"]}, headers=ana["headers"]
    )
    assert response.json()["messages"][0]["item_id"] == item_id


@pytest.mark.parametrize(
    "payload",
    [
        {"receiver_id": 0, "message": "hi"},
        {"receiver_id": -1, "message": "hi"},
        {"receiver_id": 2, "message": "   "},
        {"receiver_id": 9999, "message": "hi"},
    ],
)
async def test_send_validation(client: AsyncClient, trio, payload):
    ana, _, _ = await trio()
    response = await client.post("/api/messages/send", json=payload, headers=ana["headers"])
    assert response.status_code == 400


async def test_send_to_self_rejected(client: AsyncClient, trio):
    ana, _, _ = await trio()
    response = await client.post(
        "/api/messages/send",
        json={"receiver_id": ana["user_id"], "message": "note to self"},
        headers=ana["headers"],
    )
    assert response.status_code == 400


async def test_sender_id_must_match_token(client: AsyncClient, trio):
    ana, bob, cam = await trio()
    response = await client.post(
        "/api/messages/send",
        json={"sender_id": cam["user_id"], "receiver_id": bob["user_id"], "message": "spoof"},
        headers=ana["headers"],
    )
    assert response.status_code == 403

    response = await client.get(
        "/api/messages/get",
        params={"user_id": bob["user_id"], "other_user_id": cam["user_id"]},
        headers=ana["headers"],
    )
    assert response.status_code == 403


async def test_messages_require_authentication(client: AsyncClient):
    response = await client.get("/api/messages/get", params={"other_user_id": 1})
    assert response.status_code == 401


async def test_conversation_rejects_invalid_ids(client: AsyncClient, trio):
    ana, _, _ = await trio()
    response = await client.get(
        "/api/messages/get", params={"other_user_id": 0}, headers=ana["headers"]
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid user IDs"}


async def test_mark_single_message_read(client: AsyncClient, trio):
    ana, bob, _ = await trio()
    first = await _send(client, bob, ana, "Is the lamp still there?")
    await _send(client, bob, ana, "I can pick it up tonight")

    response = await client.post(
        "/api/messages/read", json={"message_id": first}, headers=ana["headers"]
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message_id"] == first
    assert body["is_read"] is True
    assert body["read_at"] is not None

    unread = await client.get("/api/messages/unread", headers=ana["headers"])
    assert first not in [message["message_id"] for message in unread.json()["messages"]]
    assert unread.json()["count"] == 1

    again = await client.post(
        "/api/messages/read", json={"message_id": first}, headers=ana["headers"]
    )
    assert again.status_code == 200
    assert again.json()["read_at"] == body["read_at"]


async def test_only_receiver_marks_message_read(client: AsyncClient, trio):
    ana, bob, cam = await trio()
    message_id = await _send(client, bob, ana, "Hello")

    for user in (bob, cam):
        response = await client.post(
            "/api/messages/read", json={"message_id": message_id}, headers=user["headers"]
        )
        assert response.status_code == 403

    response = await client.post(
        "/api/messages/read", json={"message_id": 9999}, headers=ana["headers"]
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Message not found"}

    response = await client.post("/api/messages/read", json={"message_id": message_id})
    assert response.status_code == 401

    unread = await client.get("/api/messages/unread", headers=ana["headers"])
    assert unread.json()["count"] == 1
