"""BotConversation model: one row per (namespace, user) holding the bot memory."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String, UniqueConstraint, Uuid

from eventchat.db import Base


class BotConversation(Base):
    """Stored as a single ordered JSON list of {role, content}, oldest first."""

    __tablename__ = "bot_conversations"
    __table_args__ = (
        UniqueConstraint("namespace", "user_id", name="uq_bot_conversations_user"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    namespace = Column(String(128), nullable=False)
    user_id = Column(String(256), nullable=False, index=True)
    messages = Column(JSON, nullable=False, default=list)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
