"""
Error taxonomy for the gateway.

Services raise these; the handler registered in main.create_app renders them
as {"error": ..., "detail": ...} with the mapped status code. The detail field
is dropped in production.
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base error. `error` is the short machine-readable message."""

    status_code = 500
    error = "Internal error"

    def __init__(self, error: Optional[str] = None, detail: Optional[str] = None):
        self.error = error or self.error
        self.detail = detail
        super().__init__(self.error if detail is None else f"{self.error}: {detail}")


class InvalidRequest(GatewayError):
    status_code = 400
    error = "Invalid request"


class Unauthenticated(GatewayError):
    status_code = 401
    error = "Unauthorized"


class PolicyViolation(GatewayError):
    status_code = 403
    error = "Forbidden"


class NotFound(GatewayError):
    status_code = 404
    error = "Not found"


class EventNotFound(NotFound):
    error = "Event not found"


class UpstreamFailure(GatewayError):
    status_code = 500
    error = "Upstream failure"


class EventCreationFailed(UpstreamFailure):
    error = "Failed to create event"


class LanguageBackendUnavailable(UpstreamFailure):
    error = "Failed to generate bot reply"


class NotConfigured(GatewayError):
    status_code = 503
    error = "Not configured"


class ChannelNotFound(Exception):
    """Raised by chat backend clients when a channel lookup finds nothing."""


class MessageNotFound(Exception):
    """Raised by chat backend clients when a message lookup finds nothing."""
