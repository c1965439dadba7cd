"""Tests for identity verifiers."""

from unittest.mock import MagicMock, patch

import pytest

from eventchat.adapters.identity import (
    FirebaseIdentityVerifier,
    NoopIdentityVerifier,
    build_identity_verifier,
)
from eventchat.config import Settings
from eventchat.core.errors import Unauthenticated


@pytest.fixture
def verifier():
    return FirebaseIdentityVerifier(app=MagicMock())


def test_build_without_credentials_is_noop():
    settings = Settings(
        environment="test",
        firebase_service_account_json_base64=None,
        google_application_credentials=None,
    )
    with patch(
        "eventchat.adapters.identity.firebase_admin.get_app",
        side_effect=ValueError("no app"),
    ):
        built = build_identity_verifier(settings)
    assert isinstance(built, NoopIdentityVerifier)
    assert built.enabled is False


def test_build_with_bad_credentials_falls_back_to_noop():
    settings = Settings(
        environment="test", firebase_service_account_json_base64="bm90LWpzb24="
    )
    with patch(
        "eventchat.adapters.identity.firebase_admin.get_app",
        side_effect=ValueError("no app"),
    ):
        built = build_identity_verifier(settings)
    assert isinstance(built, NoopIdentityVerifier)


@pytest.mark.asyncio
async def test_noop_verifier_returns_none():
    assert await NoopIdentityVerifier().verify("anything") is None


@pytest.mark.asyncio
async def test_valid_token(verifier):
    decoded = {"uid": "uid-1", "name": "Ann", "picture": "https://img", "email": "a@x.io"}
    with patch(
        "eventchat.adapters.identity.auth.verify_id_token", return_value=decoded
    ) as verify:
        identity = await verifier.verify("id-token")
    assert identity.subject_id == "uid-1"
    assert identity.display_name == "Ann"
    assert identity.picture_url == "https://img"
    assert identity.email == "a@x.io"
    assert verify.call_args.args[0] == "id-token"


@pytest.mark.asyncio
async def test_missing_token(verifier):
    with pytest.raises(Unauthenticated):
        await verifier.verify(None)


@pytest.mark.asyncio
async def test_invalid_token(verifier):
    with patch(
        "eventchat.adapters.identity.auth.verify_id_token",
        side_effect=ValueError("bad signature"),
    ):
        with pytest.raises(Unauthenticated) as exc_info:
            await verifier.verify("forged")
    assert exc_info.value.error == "Invalid token"
    assert exc_info.value.detail == "bad signature"


@pytest.mark.asyncio
async def test_token_without_uid(verifier):
    with patch("eventchat.adapters.identity.auth.verify_id_token", return_value={}):
        with pytest.raises(Unauthenticated):
            await verifier.verify("id-token")
