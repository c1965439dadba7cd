"""Shared fixtures: in-process fakes for the chat backend, identity provider and LLM."""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from eventchat.adapters.base import ChatBackendClient
from eventchat.adapters.identity import IdentityVerifier, NoopIdentityVerifier
from eventchat.config import Settings
from eventchat.core.app_state import AppState
from eventchat.core.errors import ChannelNotFound, MessageNotFound, Unauthenticated
from eventchat.main import create_app
from eventchat.schemas.bot import ContextTurn
from eventchat.schemas.chat import ChannelRef, ChannelState, ChatMessage, ChatUser
from eventchat.schemas.identity import Identity
from eventchat.services.history_store import InMemoryHistoryStore
from eventchat.workers.llm import LanguageBackend


class FakeChatBackend(ChatBackendClient):
    """
    Dict-backed chat backend. Put a method name in `fail_on` to make it raise.
    Set `report_member_count=False` on a channel to drop its member_count field.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.channels: dict[tuple[str, str], dict[str, Any]] = {}
        self.messages: dict[str, ChatMessage] = {}
        self.sent_messages: list[dict[str, Any]] = []
        self.deleted_messages: list[str] = []
        self.fail_on: set[str] = set()
        self.upsert_calls = 0
        self._token_counter = 0

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def add_channel(
        self,
        channel_type: str,
        channel_id: str,
        custom: Optional[dict[str, Any]] = None,
        members: Optional[list[str]] = None,
        report_member_count: bool = True,
    ) -> None:
        self.channels[(channel_type, channel_id)] = {
            "custom": dict(custom or {}),
            "members": list(members or []),
            "moderators": [],
            "created_at": datetime.now(timezone.utc),
            "report_member_count": report_member_count,
        }

    async def upsert_user(self, user: ChatUser) -> None:
        self.upsert_calls += 1
        self._maybe_fail("upsert_user")
        record = self.users.setdefault(user.id, {"id": user.id})
        record.update(user.to_upsert_payload())

    def create_token(self, user_id: str) -> str:
        self._maybe_fail("create_token")
        self._token_counter += 1
        return f"token-{user_id}-{self._token_counter}"

    async def create_channel(
        self,
        channel_type: str,
        channel_id: str,
        data: dict[str, Any],
        created_by_id: str,
    ) -> ChannelRef:
        self._maybe_fail("create_channel")
        custom = dict(data)
        custom["created_by_id"] = created_by_id
        self.add_channel(channel_type, channel_id, custom=custom)
        return ChannelRef(type=channel_type, id=channel_id)

    async def add_members(
        self,
        channel_type: str,
        channel_id: str,
        user_ids: Iterable[str],
        hide_history: bool = False,
    ) -> None:
        self._maybe_fail("add_members")
        channel = self.channels[(channel_type, channel_id)]
        for user_id in user_ids:
            if user_id not in channel["members"]:
                channel["members"].append(user_id)

    async def add_moderators(
        self, channel_type: str, channel_id: str, user_ids: Iterable[str]
    ) -> None:
        self._maybe_fail("add_moderators")
        self.channels[(channel_type, channel_id)]["moderators"].extend(user_ids)

    def _state(self, key: tuple[str, str]) -> ChannelState:
        channel = self.channels[key]
        return ChannelState(
            type=key[0],
            id=key[1],
            custom=dict(channel["custom"]),
            member_count=(
                len(channel["members"]) if channel["report_member_count"] else None
            ),
            members=list(channel["members"]),
            created_at=channel["created_at"],
        )

    async def get_channel(self, channel_type: str, channel_id: str) -> ChannelState:
        self._maybe_fail("get_channel")
        key = (channel_type, channel_id)
        if key not in self.channels:
            raise ChannelNotFound(f"{channel_type}:{channel_id}")
        return self._state(key)

    async def query_channels(
        self,
        filter_conditions: dict[str, Any],
        limit: int = 30,
    ) -> list[ChannelState]:
        self._maybe_fail("query_channels")
        results = []
        for key, channel in self.channels.items():
            if "type" in filter_conditions and key[0] != filter_conditions["type"]:
                continue
            if (
                "is_event_channel" in filter_conditions
                and channel["custom"].get("is_event_channel")
                != filter_conditions["is_event_channel"]
            ):
                continue
            members_filter = filter_conditions.get("members")
            if members_filter and not set(members_filter["$in"]) & set(
                channel["members"]
            ):
                continue
            results.append(self._state(key))
        results.sort(key=lambda c: c.created_at, reverse=True)
        return results[:limit]

    async def send_message(
        self, channel_type: str, channel_id: str, text: str, user_id: str
    ) -> Optional[str]:
        self._maybe_fail("send_message")
        message_id = f"msg-{len(self.sent_messages) + 1}"
        self.sent_messages.append(
            {
                "id": message_id,
                "channel_type": channel_type,
                "channel_id": channel_id,
                "text": text,
                "user_id": user_id,
            }
        )
        return message_id

    async def get_message(self, message_id: str) -> ChatMessage:
        self._maybe_fail("get_message")
        if message_id not in self.messages:
            raise MessageNotFound(message_id)
        return self.messages[message_id]

    async def delete_message(self, message_id: str, hard: bool = False) -> None:
        self._maybe_fail("delete_message")
        self.deleted_messages.append(message_id)


class FakeLanguageBackend(LanguageBackend):
    """Records every call; returns `reply` or raises `error` when set."""

    def __init__(self, reply: str = "Hello from the bot") -> None:
        self.reply = reply
        self.error: Optional[Exception] = None
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        system_instruction: str,
        context: List[ContextTurn],
        message: str,
    ) -> str:
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "context": list(context),
                "message": message,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


class FakeIdentityVerifier(IdentityVerifier):
    """Accepts bearer tokens of the form 'valid:<uid>'."""

    enabled = True

    async def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        if not bearer_token:
            raise Unauthenticated("Missing Authorization Bearer token")
        prefix, _, uid = bearer_token.partition(":")
        if prefix != "valid" or not uid:
            raise Unauthenticated("Invalid token", detail="signature check failed")
        return Identity(subject_id=uid, display_name=f"User {uid}")


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        stream_key="test-key",
        stream_secret="test-secret",
        litellm_api_key="test-llm-key",
        history_store="memory",
        token_server_secret=None,
        rate_limit_per_minute=None,
    )


@pytest.fixture
def chat_backend():
    return FakeChatBackend()


@pytest.fixture
def llm():
    return FakeLanguageBackend()


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()


@pytest.fixture
def app_state(settings, chat_backend, llm, history_store):
    return AppState(
        settings=settings,
        chat=chat_backend,
        identity_verifier=NoopIdentityVerifier(),
        history_store=history_store,
        llm=llm,
    )


@pytest.fixture
def client(app_state):
    """Client with fakes injected and identity verification disabled."""
    app = create_app(testing=True, state=app_state)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def verified_client(app_state):
    """Client with identity verification enabled (bearer 'valid:<uid>')."""
    app_state.identity_verifier = FakeIdentityVerifier()
    app = create_app(testing=True, state=app_state)
    with TestClient(app) as c:
        yield c
