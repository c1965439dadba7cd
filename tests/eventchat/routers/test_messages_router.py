import pytest

from eventchat.schemas.chat import ChatMessage


@pytest.fixture(autouse=True)
def seeded(chat_backend):
    chat_backend.add_channel(
        "messaging",
        "event-1",
        custom={"is_event_channel": True, "event_admin": "admin1"},
        members=["admin1", "u2", "u3"],
    )
    chat_backend.messages["m1"] = ChatMessage(
        id="m1", user_id="u2", channel_type="messaging", channel_id="event-1"
    )


def test_author_deletes(client, chat_backend):
    response = client.post("/messages/delete", json={"messageId": "m1", "userId": "u2"})
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert chat_backend.deleted_messages == ["m1"]


def test_organizer_deletes(client, chat_backend):
    response = client.post(
        "/messages/delete", json={"messageId": "m1", "userId": "admin1"}
    )
    assert response.status_code == 200


def test_member_forbidden(client, chat_backend):
    response = client.post("/messages/delete", json={"messageId": "m1", "userId": "u3"})
    assert response.status_code == 403
    assert chat_backend.deleted_messages == []


def test_unknown_message(client):
    response = client.post("/messages/delete", json={"messageId": "zz", "userId": "u2"})
    assert response.status_code == 404


def test_backend_failure(client, chat_backend):
    chat_backend.fail_on.add("delete_message")
    response = client.post("/messages/delete", json={"messageId": "m1", "userId": "u2"})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to delete message"
