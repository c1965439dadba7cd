"""
Chat bot relay: user message -> language backend -> reply in the channel.

Only the language backend call is fatal. Bot user upsert, history load,
history save and posting the reply all degrade on failure; the reply text
is returned whenever generation succeeded.

History read-modify-write is not transactional. Two concurrent turns for the
same user can race and one of the appended pairs may be lost.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from eventchat.adapters.base import ChatBackendClient
from eventchat.constants.default_system_prompt import DefaultSystemPrompt
from eventchat.core.errors import (
    InvalidRequest,
    LanguageBackendUnavailable,
    NotConfigured,
)
from eventchat.schemas.bot import ContextTurn, HistoryEntry
from eventchat.schemas.chat import ChatUser
from eventchat.services.history_store import HistoryStore
from eventchat.workers.llm import LanguageBackend

logger = logging.getLogger(__name__)

MAX_STORED_MESSAGES = 20
MAX_CONTEXT_MESSAGES = 10

BOT_ROLE = "user"


def build_context(history: List[HistoryEntry]) -> List[ContextTurn]:
    """Last MAX_CONTEXT_MESSAGES entries, assistant turns re-tagged as model."""
    recent = history[-MAX_CONTEXT_MESSAGES:]
    return [
        ContextTurn(
            role="model" if entry.role == "assistant" else "user",
            content=entry.content,
        )
        for entry in recent
    ]


def append_turn(
    history: List[HistoryEntry], message: str, reply: str
) -> List[HistoryEntry]:
    """Append user message and reply, keep the most recent MAX_STORED_MESSAGES."""
    updated = list(history) + [
        HistoryEntry(role="user", content=message),
        HistoryEntry(role="assistant", content=reply),
    ]
    return updated[-MAX_STORED_MESSAGES:]


class BotRelay:
    def __init__(
        self,
        chat: ChatBackendClient,
        history_store: HistoryStore,
        llm: Optional[LanguageBackend],
        bot_user_id: str = "ai-assistant",
        bot_user_name: str = "AI Assistant",
        system_instruction: Optional[str] = None,
    ) -> None:
        self.chat = chat
        self.history_store = history_store
        self.llm = llm
        self.bot_user = ChatUser(id=bot_user_id, name=bot_user_name, role=BOT_ROLE)
        self.system_instruction = (
            system_instruction or DefaultSystemPrompt.CONTENT
        ).strip()

    async def handle_message(
        self,
        user_id: Optional[str],
        message: Optional[str],
        channel_id: Optional[str],
        channel_type: str = "messaging",
    ) -> str:
        """
        Run one bot turn and return the reply text.

        Raises:
            NotConfigured: no language backend; raised before any side effect.
            InvalidRequest: message, channel id or user id missing.
            LanguageBackendUnavailable: generation failed.
        """
        if self.llm is None:
            raise NotConfigured("Chat bot is not configured")
        user_id = (user_id or "").strip()
        message = (message or "").strip()
        channel_id = (channel_id or "").strip()
        if not message or not channel_id or not user_id:
            raise InvalidRequest("Missing required fields: message, channelId, userId")

        await self._ensure_bot_user()
        history = await self._load_history(user_id)

        try:
            reply = await self.llm.generate(
                self.system_instruction, build_context(history), message
            )
        except Exception as e:
            logger.exception("Language backend call failed for user %s", user_id)
            raise LanguageBackendUnavailable(detail=str(e)) from e

        await self._save_history(user_id, append_turn(history, message, reply))
        await self._post_reply(channel_type, channel_id, reply)
        return reply

    async def _ensure_bot_user(self) -> None:
        try:
            await self.chat.upsert_user(self.bot_user)
        except Exception as e:
            logger.warning("Failed to upsert bot user %s: %s", self.bot_user.id, e)

    async def _load_history(self, user_id: str) -> List[HistoryEntry]:
        try:
            return await self.history_store.load(user_id)
        except Exception as e:
            logger.warning("Failed to load bot history for %s, continuing without: %s", user_id, e)
            return []

    async def _save_history(self, user_id: str, history: List[HistoryEntry]) -> None:
        try:
            await self.history_store.save(user_id, history)
        except Exception:
            logger.exception("Failed to persist bot history for %s", user_id)

    async def _post_reply(self, channel_type: str, channel_id: str, reply: str) -> None:
        try:
            await self.chat.send_message(
                channel_type, channel_id, reply, user_id=self.bot_user.id
            )
        except Exception:
            logger.exception(
                "Failed to post bot reply to %s:%s", channel_type, channel_id
            )
