"""Adapters for the chat backend and identity provider."""

from eventchat.adapters.base import ChatBackendClient
from eventchat.adapters.identity import (
    FirebaseIdentityVerifier,
    IdentityVerifier,
    NoopIdentityVerifier,
)
from eventchat.adapters.stream_chat import StreamChatBackend

__all__ = [
    "ChatBackendClient",
    "FirebaseIdentityVerifier",
    "IdentityVerifier",
    "NoopIdentityVerifier",
    "StreamChatBackend",
]
