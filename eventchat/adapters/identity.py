"""
Identity verification for bearer credentials.

FirebaseIdentityVerifier checks Firebase ID tokens with firebase-admin.
When no Firebase credentials are configured the NoopIdentityVerifier is used:
requests carry no verified identity and callers pass explicit user ids
(local development mode).
"""

from __future__ import annotations

import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import firebase_admin
from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from eventchat.config import Settings
from eventchat.core.errors import Unauthenticated
from eventchat.schemas.identity import Identity

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "eventchat"


class IdentityVerifier(ABC):
    """Validates a bearer credential and returns the trusted subject."""

    enabled: bool = True

    @abstractmethod
    async def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        """
        Return the verified Identity, or None when verification is disabled.
        Raise Unauthenticated if the credential is missing or invalid.
        """
        ...


class NoopIdentityVerifier(IdentityVerifier):
    enabled = False

    async def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        return None


class FirebaseIdentityVerifier(IdentityVerifier):
    """Verifies Firebase ID tokens (signature, issuer, audience, expiry)."""

    def __init__(self, app: firebase_admin.App) -> None:
        self._app = app

    async def verify(self, bearer_token: Optional[str]) -> Optional[Identity]:
        if not bearer_token:
            raise Unauthenticated("Missing Authorization Bearer token")
        try:
            # Revocation is not checked; that costs an extra round trip per request.
            decoded = await run_in_threadpool(
                auth.verify_id_token, bearer_token, self._app, False
            )
        except (ValueError, FirebaseError) as e:
            logger.warning("Firebase ID token verification failed: %s", e)
            raise Unauthenticated("Invalid token", detail=str(e)) from e
        uid = decoded.get("uid")
        if not uid:
            raise Unauthenticated("Invalid token: missing uid")
        logger.info("Firebase token verified for uid: %s", uid)
        return Identity(
            subject_id=uid,
            display_name=decoded.get("name"),
            picture_url=decoded.get("picture"),
            email=decoded.get("email"),
        )


def _load_service_account(encoded: str) -> dict[str, Any]:
    return json.loads(base64.b64decode(encoded).decode("utf-8"))


def _init_firebase_app(settings: Settings) -> Optional[firebase_admin.App]:
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass

    if settings.firebase_service_account_json_base64:
        info = _load_service_account(settings.firebase_service_account_json_base64)
        options = {"projectId": settings.firebase_project_id or info.get("project_id")}
        app = firebase_admin.initialize_app(
            credentials.Certificate(info), options, name=FIREBASE_APP_NAME
        )
        logger.info("Firebase Admin initialized via base64 service account")
        return app
    if settings.google_application_credentials:
        options = (
            {"projectId": settings.firebase_project_id}
            if settings.firebase_project_id
            else None
        )
        app = firebase_admin.initialize_app(
            credentials.ApplicationDefault(), options, name=FIREBASE_APP_NAME
        )
        logger.info("Firebase Admin initialized via GOOGLE_APPLICATION_CREDENTIALS")
        return app
    return None


def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    """Firebase verifier when credentials are configured, pass-through otherwise."""
    try:
        app = _init_firebase_app(settings)
    except (ValueError, OSError, FirebaseError) as e:
        logger.warning(
            "Failed to initialize Firebase Admin; Firebase auth disabled: %s", e
        )
        app = None
    if app is None:
        return NoopIdentityVerifier()
    return FirebaseIdentityVerifier(app)
