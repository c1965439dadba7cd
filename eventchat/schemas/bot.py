"""Chat bot relay schemas: HTTP bodies plus stored history entries."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BotMessageRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: Optional[str] = None
    channel_id: Optional[str] = None
    channel_type: str = "messaging"
    user_id: Optional[str] = None


class BotMessageResponse(BaseModel):
    success: bool = True
    reply: str


class HistoryEntry(BaseModel):
    """One stored conversation turn half."""

    role: Literal["user", "assistant"]
    content: str


class ContextTurn(BaseModel):
    """History entry re-tagged into the language backend's role names."""

    role: Literal["user", "model"]
    content: str
