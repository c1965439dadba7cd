"""
Normalized chat backend shapes.

Chat backend clients convert vendor responses into these models so services
never touch raw SDK payloads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ChatUser(BaseModel):
    """User record pushed to the chat backend's user directory."""

    id: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None

    def to_upsert_payload(self) -> dict[str, Any]:
        """Only set fields are sent so an upsert never blanks existing values."""
        return self.model_dump(exclude_none=True)


class ChannelRef(BaseModel):
    """Identifies a channel (type + id)."""

    type: str
    id: str

    @property
    def cid(self) -> str:
        return f"{self.type}:{self.id}"


class ChannelState(ChannelRef):
    """Channel as returned by a lookup: custom data plus membership info."""

    custom: dict[str, Any] = Field(default_factory=dict)
    member_count: Optional[int] = None
    members: Optional[list[str]] = None
    created_at: Optional[datetime] = None


class ChatMessage(BaseModel):
    """Message looked up from the chat backend."""

    id: str
    text: str = ""
    user_id: Optional[str] = None
    channel_type: Optional[str] = None
    channel_id: Optional[str] = None
