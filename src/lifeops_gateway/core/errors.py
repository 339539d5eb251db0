"""Error taxonomy for the integration gateway.

Every error carries the HTTP status it maps to so routers can re-raise without
translating, and the application exception handler renders them all as
``{"error": ..., "code": ...}``.
"""

from __future__ import annotations

from fastapi import status


class GatewayError(RuntimeError):
    """Base exception for gateway and dispatcher failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str | None = None

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.code:
            body["code"] = self.code
        return body


class AuthError(GatewayError):
    """Raised when the caller identity is missing or invalid."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidRequestError(GatewayError):
    """Raised for malformed bodies, unknown actions and missing payload fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(GatewayError):
    """Raised when a provider name is not one the gateway knows."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(GatewayError):
    """Raised when a CI/CD provider cannot be reached at all."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_unreachable"


class TransientDeliveryError(GatewayError):
    """A single webhook attempt failed; the retry loop decides what happens next."""

    status_code = status.HTTP_502_BAD_GATEWAY


class PersistenceError(GatewayError):
    """Raised when a credential or ledger write fails."""

    code = "persistence_failed"
