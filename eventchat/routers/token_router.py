"""Chat session token issuance."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from eventchat.routers.utils.dependencies import get_current_identity, get_token_service
from eventchat.schemas.identity import Identity
from eventchat.schemas.token import TokenResponse
from eventchat.services.token_service import TokenService

router = APIRouter(tags=["token"])


@router.get("/token", response_model=TokenResponse)
async def issue_token(
    user_id: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
    image: Optional[str] = Query(default=None),
    identity: Optional[Identity] = Depends(get_current_identity),
    service: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """
    Issue a token and upsert the user so channel creation works.
    When identity verification is on, user_id comes from the verified token.
    """
    token = await service.issue_token(
        user_id=user_id, name=name, image=image, identity=identity
    )
    return TokenResponse(token=token)
