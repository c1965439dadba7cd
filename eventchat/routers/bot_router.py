"""Chat bot relay endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from eventchat.routers.utils.dependencies import get_bot_relay, get_current_identity
from eventchat.schemas.bot import BotMessageRequest, BotMessageResponse
from eventchat.schemas.identity import Identity
from eventchat.services.bot_relay import BotRelay

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/bot", response_model=BotMessageResponse)
async def chat_with_bot(
    body: BotMessageRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    relay: BotRelay = Depends(get_bot_relay),
) -> BotMessageResponse:
    """
    Send a message to the bot. The reply is posted into the channel as the bot
    user and also returned here.
    """
    user_id = identity.subject_id if identity else body.user_id
    reply = await relay.handle_message(
        user_id=user_id,
        message=body.message,
        channel_id=body.channel_id,
        channel_type=body.channel_type or "messaging",
    )
    return BotMessageResponse(reply=reply)
