"""Server-side message deletion for authors and event organizers."""

from __future__ import annotations

import logging
from typing import Optional

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.errors import (
    ChannelNotFound,
    InvalidRequest,
    MessageNotFound,
    NotFound,
    PolicyViolation,
)
from eventchat.schemas.events import EVENT_ADMIN
from eventchat.services.event_service import is_event_channel

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, chat: ChatBackendClient) -> None:
        self.chat = chat

    async def _is_event_organizer(
        self, user_id: str, channel_type: Optional[str], channel_id: Optional[str]
    ) -> bool:
        if not channel_type or not channel_id:
            return False
        try:
            channel = await self.chat.get_channel(channel_type, channel_id)
        except ChannelNotFound:
            return False
        return is_event_channel(channel) and channel.custom.get(EVENT_ADMIN) == user_id

    async def delete_message(
        self, message_id: Optional[str], user_id: Optional[str]
    ) -> None:
        """
        Soft-delete a message. Authors may delete their own messages; the
        organizer of an event channel may delete any message in it.

        Raises:
            InvalidRequest: message id or user id missing.
            NotFound: no such message.
            PolicyViolation: user is neither author nor organizer.
        """
        message_id = (message_id or "").strip()
        user_id = (user_id or "").strip()
        if not message_id or not user_id:
            raise InvalidRequest("Missing messageId or userId")
        try:
            message = await self.chat.get_message(message_id)
        except MessageNotFound as e:
            raise NotFound("Message not found") from e

        if message.user_id != user_id and not await self._is_event_organizer(
            user_id, message.channel_type, message.channel_id
        ):
            raise PolicyViolation("Not allowed to delete this message")

        await self.chat.delete_message(message_id)
        logger.info("User %s deleted message %s", user_id, message_id)
