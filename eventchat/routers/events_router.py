"""Event channels API: create, join, list, details."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from eventchat.core.errors import GatewayError, UpstreamFailure
from eventchat.infra.logging_config import get_logger
from eventchat.routers.utils.dependencies import get_current_identity, get_event_service
from eventchat.schemas.events import (
    CreateEventRequest,
    EventDetailsResponse,
    EventListResponse,
    JoinEventRequest,
)
from eventchat.schemas.identity import Identity
from eventchat.services.event_service import EventService

logger = get_logger("events")

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/create", response_model=dict[str, Any])
async def create_event(
    body: CreateEventRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    """Create an event channel. The verified caller becomes the organizer."""
    result = await service.create_event(
        body, admin_user_id=identity.subject_id if identity else None
    )
    return result.model_dump(by_alias=True)


@router.post("/join", response_model=dict[str, Any])
async def join_event(
    body: JoinEventRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    """Join an event via its id (from the join link)."""
    user_id = identity.subject_id if identity else body.user_id
    try:
        result = await service.join_event(body.event_id, user_id)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception("Error joining event %s", body.event_id)
        raise UpstreamFailure("Failed to join event", detail=str(e)) from e
    return result.model_dump(by_alias=True)


@router.get("/all", response_model=dict[str, Any])
async def list_events(
    user_id: Optional[str] = Query(default=None),
    limit: int = Query(30, ge=1, le=100),
    _identity: Optional[Identity] = Depends(get_current_identity),
    service: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    """List event channels, newest first. Filter to the user's events when user_id is set."""
    try:
        events = await service.list_events(user_id=user_id, limit=limit)
    except Exception as e:
        logger.exception("Error listing events")
        raise UpstreamFailure("Failed to list events", detail=str(e)) from e
    return EventListResponse(events=events).model_dump(by_alias=True)


@router.get("/{event_id}", response_model=dict[str, Any])
async def get_event(
    event_id: str,
    _identity: Optional[Identity] = Depends(get_current_identity),
    service: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    """Return event details, with memberCount computed from the channel."""
    try:
        event = await service.get_event(event_id)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception("Error fetching event %s", event_id)
        raise UpstreamFailure("Failed to fetch event", detail=str(e)) from e
    return EventDetailsResponse(event=event).model_dump(by_alias=True)
