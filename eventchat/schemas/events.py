"""Request/response schemas for event channels (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Custom channel data keys that mark and describe an event channel
IS_EVENT_CHANNEL = "is_event_channel"
EVENT_ADMIN = "event_admin"
EVENT_DESCRIPTION = "event_description"
EVENT_DATE = "event_date"
EVENT_COVER_IMAGE = "event_cover_image"
JOIN_LINK = "join_link"

EventDate = Union[int, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateEventRequest(CamelModel):
    event_name: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[EventDate] = None
    cover_image: Optional[str] = None
    admin_user_id: Optional[str] = None


class CreateEventResult(CamelModel):
    success: bool = True
    event_id: str
    join_link: str
    channel_id: str
    channel_cid: str
    provisioning_incomplete: bool = False
    failed_steps: list[str] = Field(default_factory=list)


class JoinEventRequest(CamelModel):
    event_id: Optional[str] = None
    user_id: Optional[str] = None


class JoinEventResult(CamelModel):
    success: bool = True
    channel_id: str
    channel_cid: str


class EventDetails(CamelModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    admin_user_id: Optional[str] = None
    event_date: Optional[EventDate] = None
    cover_image: Optional[str] = None
    join_link: Optional[str] = None
    member_count: int = 0
    created_at: Optional[datetime] = None
    channel_id: Optional[str] = None
    channel_cid: Optional[str] = None


class EventDetailsResponse(CamelModel):
    success: bool = True
    event: EventDetails


class EventListResponse(CamelModel):
    success: bool = True
    events: list[EventDetails] = Field(default_factory=list)
