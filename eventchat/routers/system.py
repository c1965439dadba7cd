"""Health and diagnostics."""

from typing import Any

from fastapi import APIRouter, Depends

from eventchat.core.app_state import AppState
from eventchat.routers.utils.dependencies import get_app_state

router = APIRouter(tags=["system"])


def _health(state: AppState) -> dict[str, Any]:
    """Non-sensitive configuration flags for troubleshooting."""
    s = state.settings
    return {
        "ok": True,
        "app": s.app_name,
        "environment": s.environment,
        "stream_key": bool(s.stream_key),
        "chat_backend_enabled": state.chat is not None,
        "firebase_enabled": state.firebase_enabled,
        "bot_enabled": state.llm is not None,
        "history_store": s.history_store,
        "rate_limit_enabled": state.redis_client is not None,
    }


@router.get("/health")
def health(state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    return _health(state)


@router.get("/healthz")
def healthz(state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    return _health(state)
