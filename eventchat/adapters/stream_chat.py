"""
Stream Chat adapter.

Uses the async server-side client from the stream-chat SDK. Channel lookups
go through query_channels with an exact id filter: querying a single channel
by id would create it on the fly.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from stream_chat import StreamChatAsync
from stream_chat.base.exceptions import StreamAPIException

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.errors import ChannelNotFound, MessageNotFound
from eventchat.schemas.chat import ChannelRef, ChannelState, ChatMessage, ChatUser


def _channel_state(entry: dict[str, Any]) -> ChannelState:
    """Convert one query_channels entry into a ChannelState."""
    channel = dict(entry.get("channel") or {})
    members = [
        str(m.get("user_id") or (m.get("user") or {}).get("id"))
        for m in entry.get("members") or []
        if m.get("user_id") or m.get("user")
    ]
    return ChannelState(
        type=channel.get("type", ""),
        id=channel.get("id", ""),
        custom=channel,
        member_count=channel.get("member_count"),
        members=members if "members" in entry else None,
        created_at=channel.get("created_at"),
    )


class StreamChatBackend(ChatBackendClient):
    """ChatBackendClient backed by StreamChatAsync."""

    def __init__(self, api_key: str, api_secret: str) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._client: Optional[StreamChatAsync] = None

    def _get_client(self) -> StreamChatAsync:
        if self._client is None:
            self._client = StreamChatAsync(
                api_key=self._api_key, api_secret=self._api_secret
            )
        return self._client

    async def upsert_user(self, user: ChatUser) -> None:
        await self._get_client().upsert_user(user.to_upsert_payload())

    def create_token(self, user_id: str) -> str:
        return self._get_client().create_token(user_id)

    async def create_channel(
        self,
        channel_type: str,
        channel_id: str,
        data: dict[str, Any],
        created_by_id: str,
    ) -> ChannelRef:
        channel = self._get_client().channel(channel_type, channel_id, dict(data))
        await channel.create(created_by_id)
        return ChannelRef(type=channel_type, id=channel_id)

    async def add_members(
        self,
        channel_type: str,
        channel_id: str,
        user_ids: Iterable[str],
        hide_history: bool = False,
    ) -> None:
        channel = self._get_client().channel(channel_type, channel_id)
        await channel.add_members(list(user_ids), hide_history=hide_history)

    async def add_moderators(
        self, channel_type: str, channel_id: str, user_ids: Iterable[str]
    ) -> None:
        channel = self._get_client().channel(channel_type, channel_id)
        await channel.add_moderators(list(user_ids))

    async def get_channel(self, channel_type: str, channel_id: str) -> ChannelState:
        channels = await self.query_channels(
            {"type": channel_type, "id": {"$eq": channel_id}}, limit=1
        )
        if not channels:
            raise ChannelNotFound(f"{channel_type}:{channel_id}")
        return channels[0]

    async def query_channels(
        self,
        filter_conditions: dict[str, Any],
        limit: int = 30,
    ) -> list[ChannelState]:
        response = await self._get_client().query_channels(
            filter_conditions, [{"field": "created_at", "direction": -1}], limit=limit
        )
        return [_channel_state(entry) for entry in response.get("channels", [])]

    async def send_message(
        self, channel_type: str, channel_id: str, text: str, user_id: str
    ) -> Optional[str]:
        channel = self._get_client().channel(channel_type, channel_id)
        response = await channel.send_message({"text": text}, user_id)
        message = response.get("message") or {}
        return message.get("id")

    async def get_message(self, message_id: str) -> ChatMessage:
        try:
            response = await self._get_client().get_message(message_id)
        except StreamAPIException as e:
            if e.status_code == 404:
                raise MessageNotFound(message_id) from e
            raise
        message = response.get("message")
        if not message:
            raise MessageNotFound(message_id)
        channel_type, _, channel_id = (message.get("cid") or "").partition(":")
        return ChatMessage(
            id=message["id"],
            text=message.get("text") or "",
            user_id=(message.get("user") or {}).get("id"),
            channel_type=channel_type or None,
            channel_id=channel_id or None,
        )

    async def delete_message(self, message_id: str, hard: bool = False) -> None:
        # Options become query params; aiohttp rejects bool values there.
        if hard:
            await self._get_client().delete_message(message_id, hard=1)
        else:
            await self._get_client().delete_message(message_id)

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> bool:
        """Check the X-Signature header (HMAC-SHA256 of the raw body)."""
        if not signature:
            return False
        return self._get_client().verify_webhook(body, signature)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
