"""
Chat backend adapter interface.

Adapters wrap a vendor chat SDK and expose the few operations the gateway
needs, using the normalized shapes from eventchat.schemas.chat.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from eventchat.schemas.chat import ChannelRef, ChannelState, ChatMessage, ChatUser


class ChatBackendClient(ABC):
    """Contract for chat backends. New vendors implement this interface."""

    @abstractmethod
    async def upsert_user(self, user: ChatUser) -> None:
        """Create or update a user. Fields left as None must not be overwritten."""
        ...

    @abstractmethod
    def create_token(self, user_id: str) -> str:
        """Sign a session credential scoped to user_id."""
        ...

    @abstractmethod
    async def create_channel(
        self,
        channel_type: str,
        channel_id: str,
        data: dict[str, Any],
        created_by_id: str,
    ) -> ChannelRef:
        ...

    @abstractmethod
    async def add_members(
        self,
        channel_type: str,
        channel_id: str,
        user_ids: Iterable[str],
        hide_history: bool = False,
    ) -> None:
        """Add members. Adding an existing member is a no-op."""
        ...

    @abstractmethod
    async def add_moderators(
        self, channel_type: str, channel_id: str, user_ids: Iterable[str]
    ) -> None:
        ...

    @abstractmethod
    async def get_channel(self, channel_type: str, channel_id: str) -> ChannelState:
        """Look up one channel. Raise ChannelNotFound if it does not exist."""
        ...

    @abstractmethod
    async def query_channels(
        self,
        filter_conditions: dict[str, Any],
        limit: int = 30,
    ) -> list[ChannelState]:
        """Return channels matching filter_conditions, newest first."""
        ...

    @abstractmethod
    async def send_message(
        self, channel_type: str, channel_id: str, text: str, user_id: str
    ) -> Optional[str]:
        """Post a message authored by user_id. Return the message id if known."""
        ...

    @abstractmethod
    async def get_message(self, message_id: str) -> ChatMessage:
        """Look up one message. Raise MessageNotFound if it does not exist."""
        ...

    @abstractmethod
    async def delete_message(self, message_id: str, hard: bool = False) -> None:
        ...

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> bool:
        """
        Verify a webhook request signature. Override if the backend signs hooks.
        Return True if valid or verification not supported; False to reject.
        """
        return True

    async def close(self) -> None:
        """Release network resources. Override if the client holds a session."""
        return None
