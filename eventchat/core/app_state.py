"""Long-lived collaborators shared by all requests (stored on app.state.gateway)."""

from __future__ import annotations

import logging
from typing import Optional

from eventchat.adapters.base import ChatBackendClient
from eventchat.adapters.identity import IdentityVerifier, build_identity_verifier
from eventchat.adapters.stream_chat import StreamChatBackend
from eventchat.config import Settings
from eventchat.services.history_store import HistoryStore, build_history_store
from eventchat.utils.rate_limit import build_redis_client
from eventchat.workers.llm import LanguageBackend, build_llm_runner

logger = logging.getLogger(__name__)


class AppState:
    def __init__(
        self,
        settings: Settings,
        chat: Optional[ChatBackendClient],
        identity_verifier: IdentityVerifier,
        history_store: HistoryStore,
        llm: Optional[LanguageBackend] = None,
        redis_client: Optional[object] = None,
    ) -> None:
        self.settings = settings
        self.chat = chat
        self.identity_verifier = identity_verifier
        self.history_store = history_store
        self.llm = llm
        self.redis_client = redis_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppState":
        chat: Optional[ChatBackendClient] = None
        if settings.stream_key and settings.stream_secret:
            chat = StreamChatBackend(settings.stream_key, settings.stream_secret)
        else:
            logger.error("Missing STREAM_KEY or STREAM_SECRET; chat endpoints disabled")
        return cls(
            settings=settings,
            chat=chat,
            identity_verifier=build_identity_verifier(settings),
            history_store=build_history_store(settings),
            llm=build_llm_runner(settings),
            redis_client=build_redis_client(settings),
        )

    @property
    def firebase_enabled(self) -> bool:
        return self.identity_verifier.enabled

    async def aclose(self) -> None:
        if self.chat is not None:
            await self.chat.close()
