"""Server-side message moderation."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from eventchat.core.errors import GatewayError, UpstreamFailure
from eventchat.routers.utils.dependencies import get_current_identity, get_message_service
from eventchat.schemas.identity import Identity
from eventchat.schemas.messages import DeleteMessageRequest
from eventchat.services.message_service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/delete")
async def delete_message(
    body: DeleteMessageRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: MessageService = Depends(get_message_service),
) -> dict[str, bool]:
    """Delete a message as its author, or as organizer of the event channel."""
    user_id = identity.subject_id if identity else body.user_id
    try:
        await service.delete_message(body.message_id, user_id)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception("Error deleting message %s", body.message_id)
        raise UpstreamFailure("Failed to delete message", detail=str(e)) from e
    return {"success": True}
