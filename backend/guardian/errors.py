# guardian/errors.py
"""
Error taxonomy shared by services and routes.

Services raise these; the handler registered in create_app() turns them into
{"error": <message>, "code": <name>} JSON with the matching status code.
Nothing here carries tracebacks or internal identifiers to the client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GuardianError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, **extra: Any):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message, "code": self.code}
        payload.update(self.extra)
        return payload


class BadRequest(GuardianError):
    status_code = 400
    default_message = "The request was malformed or invalid."


class WebhookRejected(BadRequest):
    default_message = "Webhook payload could not be verified."


class Unauthorized(GuardianError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(GuardianError):
    status_code = 401
    default_message = "Invalid credentials"


class EntitlementRequired(GuardianError):
    status_code = 403
    default_message = "Premium subscription required"


class NotFound(GuardianError):
    status_code = 404
    default_message = "Not found"


class DuplicateEmail(GuardianError):
    status_code = 409
    default_message = "Email already registered"


class ProviderError(GuardianError):
    """A third-party dependency failed: network, timeout, bad status or payload."""
    status_code = 502
    default_message = "An upstream service is unavailable. Please try again later."


class ProviderNotConfigured(ProviderError):
    status_code = 503
    default_message = "This service is not configured."


class ScanFailed(GuardianError):
    status_code = 502
    default_message = "Scan failed"


class PaymentNotConfigured(GuardianError):
    status_code = 503
    default_message = "Payment not configured. Set STRIPE_SECRET_KEY."
