"""
Pre-send message policy for event channels.

Called synchronously by the chat backend before it accepts a message. Only
the organizer recorded in event_admin may post in an event channel.

Fail-open: any error while evaluating allows the message. A dependency
outage therefore disables the organizer-only restriction until it recovers;
blocking all chat traffic on a transient lookup error is the worse outcome.
"""

from __future__ import annotations

import logging

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.errors import ChannelNotFound
from eventchat.schemas.events import EVENT_ADMIN
from eventchat.schemas.webhook import GateDecision, MessageHookPayload
from eventchat.services.event_service import is_event_channel

logger = logging.getLogger(__name__)

NEW_MESSAGE_EVENT = "message.new"

REASON_MISSING_SENDER = "No sender ID"
REASON_NOT_ORGANIZER = "Only the event organizer can send messages"


class MessageGatekeeper:
    def __init__(self, chat: ChatBackendClient, channel_type: str = "messaging") -> None:
        self.chat = chat
        self.channel_type = channel_type

    async def evaluate(self, payload: MessageHookPayload) -> GateDecision:
        """Apply the event channel write policy. Never raises."""
        try:
            return await self._evaluate(payload)
        except Exception:
            logger.exception(
                "Message hook evaluation failed for %s:%s; allowing message",
                payload.channel_type,
                payload.channel_id,
            )
            return GateDecision.allow()

    async def _evaluate(self, payload: MessageHookPayload) -> GateDecision:
        if payload.channel_type != self.channel_type:
            return GateDecision.allow()
        if payload.type != NEW_MESSAGE_EVENT:
            return GateDecision.allow()

        sender_id = payload.sender_id
        if not sender_id:
            return GateDecision.reject(REASON_MISSING_SENDER)

        if not payload.channel_id:
            return GateDecision.allow()
        try:
            channel = await self.chat.get_channel(self.channel_type, payload.channel_id)
        except ChannelNotFound:
            # New channel being created with its first message: not an event
            return GateDecision.allow()
        if not is_event_channel(channel):
            return GateDecision.allow()

        if sender_id != channel.custom.get(EVENT_ADMIN):
            logger.info(
                "Rejected message from %s in event channel %s",
                sender_id,
                payload.channel_id,
            )
            return GateDecision.reject(REASON_NOT_ORGANIZER)
        return GateDecision.allow()
