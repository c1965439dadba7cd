def _body(**overrides):
    body = {"message": "What time is it?", "channelId": "c1", "userId": "u1"}
    body.update(overrides)
    return body


def test_bot_reply_is_returned_and_posted(client, chat_backend, llm):
    llm.reply = "Noon."
    response = client.post("/chat/bot", json=_body())
    assert response.status_code == 200
    assert response.json() == {"success": True, "reply": "Noon."}
    assert chat_backend.sent_messages[0]["text"] == "Noon."
    assert chat_backend.sent_messages[0]["user_id"] == "ai-assistant"


def test_bot_missing_fields(client, llm):
    response = client.post("/chat/bot", json=_body(channelId=None))
    assert response.status_code == 400
    assert llm.calls == []


def test_bot_generation_failure(client, llm):
    llm.error = RuntimeError("boom")
    response = client.post("/chat/bot", json=_body())
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to generate bot reply"


def test_bot_not_configured(client, app_state, chat_backend):
    app_state.llm = None
    response = client.post("/chat/bot", json=_body())
    assert response.status_code == 503
    assert chat_backend.upsert_calls == 0


def test_bot_uses_verified_identity(verified_client, history_store, llm):
    response = verified_client.post(
        "/chat/bot",
        json=_body(userId="spoofed"),
        headers={"Authorization": "Bearer valid:uid-9"},
    )
    assert response.status_code == 200
    assert len(history_store._conversations["uid-9"]) == 2
    assert "spoofed" not in history_store._conversations
