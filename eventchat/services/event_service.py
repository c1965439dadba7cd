"""
Event channels: create, join, look up, list.

An event is a channel of the managed messaging type carrying
is_event_channel=true and the organizer id in event_admin. event_admin is
written once at creation and never updated.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any, Optional

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.errors import (
    ChannelNotFound,
    EventCreationFailed,
    EventNotFound,
    InvalidRequest,
)
from eventchat.schemas.chat import ChannelState
from eventchat.schemas.events import (
    EVENT_ADMIN,
    EVENT_COVER_IMAGE,
    EVENT_DATE,
    EVENT_DESCRIPTION,
    IS_EVENT_CHANNEL,
    JOIN_LINK,
    CreateEventRequest,
    CreateEventResult,
    EventDetails,
    JoinEventResult,
)

logger = logging.getLogger(__name__)

EVENT_ID_PREFIX = "event"
EVENT_ID_SUFFIX_LENGTH = 9
_BASE36 = string.digits + string.ascii_lowercase

STEP_ADD_ADMIN_MEMBER = "add_admin_member"
STEP_GRANT_MODERATOR = "grant_moderator"


def generate_event_id() -> str:
    """event-<epoch millis>-<random base36>; unique without coordination."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(EVENT_ID_SUFFIX_LENGTH))
    return f"{EVENT_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def is_event_channel(channel: ChannelState) -> bool:
    return channel.custom.get(IS_EVENT_CHANNEL) is True


def member_count(channel: ChannelState) -> int:
    """Channel member_count field, else the length of the explicit member list."""
    if channel.member_count is not None:
        return channel.member_count
    return len(channel.members or [])


def to_event_details(channel: ChannelState) -> EventDetails:
    data = channel.custom
    return EventDetails(
        id=channel.id,
        name=data.get("name"),
        description=data.get(EVENT_DESCRIPTION),
        admin_user_id=data.get(EVENT_ADMIN),
        event_date=data.get(EVENT_DATE),
        cover_image=data.get(EVENT_COVER_IMAGE),
        join_link=data.get(JOIN_LINK),
        member_count=member_count(channel),
        created_at=channel.created_at,
        channel_id=channel.id,
        channel_cid=channel.cid,
    )


class EventService:
    def __init__(
        self,
        chat: ChatBackendClient,
        channel_type: str = "messaging",
        link_scheme: str = "temp",
    ) -> None:
        self.chat = chat
        self.channel_type = channel_type
        self.link_scheme = link_scheme

    def build_join_link(self, event_id: str) -> str:
        return f"{self.link_scheme}://event/{event_id}"

    async def create_event(
        self, body: CreateEventRequest, admin_user_id: Optional[str] = None
    ) -> CreateEventResult:
        """
        Create the event channel, add the organizer, make them moderator.

        Only channel creation is fatal. Later steps that fail leave the channel
        in place and are reported through provisioning_incomplete/failed_steps;
        nothing is rolled back.

        Raises:
            InvalidRequest: admin id or event name missing.
            EventCreationFailed: the channel could not be created.
        """
        admin_id = (admin_user_id or body.admin_user_id or "").strip()
        name = (body.event_name or "").strip()
        if not admin_id or not name:
            raise InvalidRequest("Missing required fields: adminUserId, eventName")

        event_id = generate_event_id()
        join_link = self.build_join_link(event_id)
        data: dict[str, Any] = {
            "name": name,
            IS_EVENT_CHANNEL: True,
            EVENT_ADMIN: admin_id,
            EVENT_DESCRIPTION: body.description or "",
            EVENT_DATE: body.event_date,
            EVENT_COVER_IMAGE: body.cover_image or "",
            JOIN_LINK: join_link,
        }
        try:
            channel = await self.chat.create_channel(
                self.channel_type, event_id, data, created_by_id=admin_id
            )
        except Exception as e:
            logger.exception("Error creating event channel %s", event_id)
            raise EventCreationFailed(detail=str(e)) from e

        failed_steps: list[str] = []
        try:
            await self.chat.add_members(self.channel_type, event_id, [admin_id])
        except Exception:
            logger.exception("Event %s created but adding admin %s failed", event_id, admin_id)
            failed_steps.append(STEP_ADD_ADMIN_MEMBER)
        try:
            await self.chat.add_moderators(self.channel_type, event_id, [admin_id])
        except Exception:
            logger.exception("Event %s created but granting moderator to %s failed", event_id, admin_id)
            failed_steps.append(STEP_GRANT_MODERATOR)

        logger.info("Created event %s for admin %s", event_id, admin_id)
        return CreateEventResult(
            event_id=event_id,
            join_link=join_link,
            channel_id=channel.id,
            channel_cid=channel.cid,
            provisioning_incomplete=bool(failed_steps),
            failed_steps=failed_steps,
        )

    async def _get_event_channel(self, event_id: str) -> ChannelState:
        try:
            channel = await self.chat.get_channel(self.channel_type, event_id)
        except ChannelNotFound as e:
            raise EventNotFound() from e
        if not is_event_channel(channel):
            raise EventNotFound()
        return channel

    async def join_event(
        self, event_id: Optional[str], user_id: Optional[str]
    ) -> JoinEventResult:
        """Add user_id to the event with full history visible. Re-joining is a no-op."""
        event_id = (event_id or "").strip()
        user_id = (user_id or "").strip()
        if not event_id or not user_id:
            raise InvalidRequest("Missing eventId or userId")
        try:
            channel = await self._get_event_channel(event_id)
        except EventNotFound:
            raise
        except Exception as e:
            logger.warning("Event lookup failed for %s: %s", event_id, e)
            raise EventNotFound(detail=str(e)) from e

        await self.chat.add_members(
            self.channel_type, channel.id, [user_id], hide_history=False
        )
        logger.info("User %s joined event %s", user_id, event_id)
        return JoinEventResult(channel_id=channel.id, channel_cid=channel.cid)

    async def get_event(self, event_id: str) -> EventDetails:
        channel = await self._get_event_channel(event_id)
        return to_event_details(channel)

    async def list_events(
        self, user_id: Optional[str] = None, limit: int = 30
    ) -> list[EventDetails]:
        """Event channels, newest first; only the user's when user_id is given."""
        filters: dict[str, Any] = {
            "type": self.channel_type,
            IS_EVENT_CHANNEL: True,
        }
        if user_id:
            filters["members"] = {"$in": [user_id]}
        channels = await self.chat.query_channels(filters, limit=limit)
        return [to_event_details(c) for c in channels if is_event_channel(c)]
