"""
Chat backend webhook: pre-send message validation.

The chat backend calls this before accepting each new message and waits for
the answer. 200 {"message": "allowed"} accepts, 403 {"message": "rejected"}
blocks. Every internal failure answers "allowed" (fail-open).
Excluded from the shared-secret check; optionally verified by X-Signature.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from eventchat.core.app_state import AppState
from eventchat.routers.utils.dependencies import get_app_state
from eventchat.schemas.webhook import MessageHookPayload
from eventchat.services.message_gatekeeper import MessageGatekeeper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])

SIGNATURE_HEADER = "X-Signature"

ALLOWED = {"message": "allowed"}


def _rejected(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=403, content={"error": reason, "message": "rejected"}
    )


@router.post("/message")
async def message_webhook(
    request: Request,
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """Allow or reject a candidate message according to the event channel policy."""
    raw = await request.body()
    if state.chat is None:
        logger.error("Message webhook called but chat backend is not configured")
        return JSONResponse(status_code=200, content=ALLOWED)

    if state.settings.stream_webhook_verify_signature and not state.chat.verify_webhook(
        raw, request.headers.get(SIGNATURE_HEADER)
    ):
        return _rejected("Invalid webhook signature")

    try:
        payload = MessageHookPayload.model_validate(json.loads(raw or b"{}"))
    except (ValueError, ValidationError) as e:
        logger.warning("Message webhook unreadable payload, allowing: %s", e)
        return JSONResponse(status_code=200, content=ALLOWED)

    gatekeeper = MessageGatekeeper(
        state.chat, channel_type=state.settings.event_channel_type
    )
    decision = await gatekeeper.evaluate(payload)
    if not decision.allowed:
        return _rejected(decision.reason or "rejected")
    return JSONResponse(status_code=200, content=ALLOWED)
