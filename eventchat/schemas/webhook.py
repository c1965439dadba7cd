"""Pre-send message hook payload and decision."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class MessageHookPayload(BaseModel):
    """Subset of the chat backend's before-message-send hook body."""

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    message: Optional[dict[str, Any]] = None
    channel_type: Optional[str] = None
    channel_id: Optional[str] = None

    @property
    def sender_id(self) -> Optional[str]:
        user = (self.message or {}).get("user") or {}
        sender = user.get("id") if isinstance(user, dict) else None
        return str(sender) if sender else None


class GateDecision(BaseModel):
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str) -> "GateDecision":
        return cls(allowed=False, reason=reason)
