"""Issues chat session tokens and keeps the user directory in sync."""

from __future__ import annotations

import logging
from typing import Optional

from eventchat.adapters.base import ChatBackendClient
from eventchat.core.errors import InvalidRequest, UpstreamFailure
from eventchat.schemas.chat import ChatUser
from eventchat.schemas.identity import Identity

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class TokenService:
    def __init__(self, chat: ChatBackendClient) -> None:
        self.chat = chat

    async def issue_token(
        self,
        user_id: Optional[str] = None,
        name: Optional[str] = None,
        image: Optional[str] = None,
        identity: Optional[Identity] = None,
    ) -> str:
        """
        Upsert the user profile and return a token scoped to the user.

        A verified identity wins over the explicit user_id. name/image fall back
        to the identity's profile. Profile upsert is best effort: the token does
        not depend on it.

        Raises:
            InvalidRequest: no user id could be resolved.
            UpstreamFailure: the chat backend could not sign a token.
        """
        subject_id = _clean(identity.subject_id if identity else None) or _clean(
            user_id
        )
        if not subject_id:
            raise InvalidRequest("Missing user_id")

        user = ChatUser(
            id=subject_id,
            name=_clean(name) or _clean(identity.display_name if identity else None),
            image=_clean(image) or _clean(identity.picture_url if identity else None),
        )
        try:
            await self.chat.upsert_user(user)
        except Exception as e:
            logger.exception("Failed to upsert user %s, issuing token anyway: %s", subject_id, e)

        try:
            return self.chat.create_token(subject_id)
        except Exception as e:
            logger.exception("Failed to issue token for %s", subject_id)
            raise UpstreamFailure("Failed to issue token", detail=str(e)) from e
