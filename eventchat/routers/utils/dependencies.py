from typing import Optional

from fastapi import Depends, Header, Request

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.app_state import AppState
from eventchat.core.errors import NotConfigured
from eventchat.schemas.identity import Identity
from eventchat.services.bot_relay import BotRelay
from eventchat.services.event_service import EventService
from eventchat.services.message_service import MessageService
from eventchat.services.token_service import TokenService

BEARER_PREFIX = "Bearer "


def get_app_state(request: Request) -> AppState:
    return request.app.state.gateway


def get_chat_backend(state: AppState = Depends(get_app_state)) -> ChatBackendClient:
    """FastAPI dependency for the chat backend; 503 when it is not configured."""
    if state.chat is None:
        raise NotConfigured("Chat backend is not configured")
    return state.chat


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    state: AppState = Depends(get_app_state),
) -> Optional[Identity]:
    """
    Verified caller identity, or None when verification is disabled.
    Raises Unauthenticated (401) when enabled and the bearer token is bad.
    """
    token = None
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip() or None
    return await state.identity_verifier.verify(token)


def get_token_service(
    chat: ChatBackendClient = Depends(get_chat_backend),
) -> TokenService:
    return TokenService(chat)


def get_event_service(
    chat: ChatBackendClient = Depends(get_chat_backend),
    state: AppState = Depends(get_app_state),
) -> EventService:
    return EventService(
        chat,
        channel_type=state.settings.event_channel_type,
        link_scheme=state.settings.event_link_scheme,
    )


def get_bot_relay(
    chat: ChatBackendClient = Depends(get_chat_backend),
    state: AppState = Depends(get_app_state),
) -> BotRelay:
    return BotRelay(
        chat,
        history_store=state.history_store,
        llm=state.llm,
        bot_user_id=state.settings.bot_user_id,
        bot_user_name=state.settings.bot_user_name,
    )


def get_message_service(
    chat: ChatBackendClient = Depends(get_chat_backend),
) -> MessageService:
    return MessageService(chat)
