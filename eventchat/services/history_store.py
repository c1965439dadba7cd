"""
Per-user conversation memory for the chat bot.

Stores an ordered list of HistoryEntry (oldest first) per user id, under a
namespace. Writes replace the whole list; trimming is the caller's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List

from fastapi.concurrency import run_in_threadpool

from eventchat.config import Settings
from eventchat.db import DatabaseManager
from eventchat.models.bot_conversation import BotConversation
from eventchat.schemas.bot import HistoryEntry


class HistoryStore(ABC):
    @abstractmethod
    async def load(self, user_id: str) -> List[HistoryEntry]:
        """Return the stored history, oldest first; [] if none exists."""
        ...

    @abstractmethod
    async def save(self, user_id: str, entries: List[HistoryEntry]) -> None:
        ...


class InMemoryHistoryStore(HistoryStore):
    """Process-local store. Data lost on restart; for development and tests."""

    def __init__(self) -> None:
        self._conversations: Dict[str, List[HistoryEntry]] = {}

    async def load(self, user_id: str) -> List[HistoryEntry]:
        return list(self._conversations.get(user_id, []))

    async def save(self, user_id: str, entries: List[HistoryEntry]) -> None:
        self._conversations[user_id] = list(entries)


class SqlHistoryStore(HistoryStore):
    """One BotConversation row per (namespace, user_id)."""

    def __init__(self, db_manager: DatabaseManager, namespace: str) -> None:
        self._db = db_manager
        self._namespace = namespace

    def _get_row(self, db, user_id: str) -> BotConversation | None:
        return (
            db.query(BotConversation)
            .filter(
                BotConversation.namespace == self._namespace,
                BotConversation.user_id == user_id,
            )
            .first()
        )

    def _load_sync(self, user_id: str) -> List[HistoryEntry]:
        with self._db.db_session() as db:
            row = self._get_row(db, user_id)
            if row is None:
                return []
            return [HistoryEntry.model_validate(item) for item in row.messages or []]

    def _save_sync(self, user_id: str, entries: List[HistoryEntry]) -> None:
        payload = [entry.model_dump() for entry in entries]
        with self._db.db_session() as db:
            row = self._get_row(db, user_id)
            if row is None:
                db.add(
                    BotConversation(
                        namespace=self._namespace, user_id=user_id, messages=payload
                    )
                )
            else:
                row.messages = payload

    async def load(self, user_id: str) -> List[HistoryEntry]:
        return await run_in_threadpool(self._load_sync, user_id)

    async def save(self, user_id: str, entries: List[HistoryEntry]) -> None:
        await run_in_threadpool(self._save_sync, user_id, entries)


def build_history_store(settings: Settings) -> HistoryStore:
    if settings.history_store.lower() == "memory":
        return InMemoryHistoryStore()
    db_manager = DatabaseManager(settings.database_url)
    db_manager.create_all()
    return SqlHistoryStore(db_manager, namespace=settings.history_namespace)
