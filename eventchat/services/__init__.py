from eventchat.services.bot_relay import BotRelay
from eventchat.services.event_service import EventService
from eventchat.services.history_store import (
    HistoryStore,
    InMemoryHistoryStore,
    SqlHistoryStore,
)
from eventchat.services.message_gatekeeper import MessageGatekeeper
from eventchat.services.message_service import MessageService
from eventchat.services.token_service import TokenService

__all__ = [
    "BotRelay",
    "EventService",
    "HistoryStore",
    "InMemoryHistoryStore",
    "MessageGatekeeper",
    "MessageService",
    "SqlHistoryStore",
    "TokenService",
]
