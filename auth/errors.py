"""
Auth error taxonomy and the single error → HTTP status mapping.

Leaf components (hasher, token service, store / Google adapters) raise
these exceptions.  Flows catch them at their boundary and turn them into a
``FlowResult`` with ``error_result``; the FastAPI exception handler uses the
same function for errors raised by the auth gate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


class AuthError(Exception):
    """Base class for every error the auth core raises on purpose."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(AuthError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(AuthError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidToken(AuthError):
    """Signature, structure, expiry or payload check failed."""

    status_code = 401
    default_message = "Invalid token"


class Forbidden(AuthError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AuthError):
    status_code = 404
    default_message = "Not found"


class Conflict(AuthError):
    status_code = 409
    default_message = "Conflict"


class ConfigurationError(AuthError):
    status_code = 500
    default_message = "Server is not configured"


class ComparisonError(AuthError):
    """Stored password hash could not be parsed."""

    status_code = 500
    default_message = "Password comparison failed"


class ExternalServiceError(AuthError):
    status_code = 502
    default_message = "External service unavailable"


class EmailDeliveryError(ExternalServiceError):
    default_message = "Failed to send email"


class UniqueViolation(Exception):
    """Raised by a ``UserStore`` when an insert breaks a uniqueness constraint."""


@dataclass
class FlowResult:
    """``(status_code, body)`` pair returned by every auth flow."""

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def error_result(exc: AuthError) -> FlowResult:
    """Map an ``AuthError`` to its status code and ``{"error": ...}`` body."""
    return FlowResult(exc.status_code, {"error": exc.message})

