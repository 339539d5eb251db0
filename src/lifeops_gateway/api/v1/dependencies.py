"""Shared API dependencies for authentication and service wiring."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lifeops_gateway.core.errors import AuthError
from lifeops_gateway.core.security import resolve_user_id
from lifeops_gateway.db.session import get_db
from lifeops_gateway.repositories.credential_repo import CredentialVault
from lifeops_gateway.repositories.delivery_repo import DeliveryLedger
from lifeops_gateway.services.crypto import CredentialCipher, get_credential_cipher
from lifeops_gateway.services.executor import DispatchExecutor
from lifeops_gateway.services.gateway import CicdGateway
from lifeops_gateway.services.notifications import NotificationDispatcher
from lifeops_gateway.services.webhooks import WebhookDeliverer

# Missing headers are reported as our own 401 body rather than FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_optional_user_id(credentials: BearerDep) -> str | None:
    """Return the caller's user id, or None when no bearer token was sent.

    Raises:
        AuthError: If a token was sent but is invalid.
    """
    if credentials is None or not credentials.credentials:
        return None
    return resolve_user_id(credentials.credentials)


def get_current_user_id(credentials: BearerDep) -> str:
    """Return the authenticated caller's user id.

    Raises:
        AuthError: If the token is missing or invalid.
    """
    user_id = get_optional_user_id(credentials)
    if user_id is None:
        raise AuthError("Unauthorized")
    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
OptionalUserDep = Annotated[str | None, Depends(get_optional_user_id)]


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound clients; None uses httpx's default network transport."""
    return None


TransportDep = Annotated[httpx.AsyncBaseTransport | None, Depends(get_http_transport)]
CipherDep = Annotated[CredentialCipher, Depends(get_credential_cipher)]


def get_credential_vault(db: SessionDep, cipher: CipherDep) -> CredentialVault:
    return CredentialVault(db, cipher)


def get_cicd_gateway(
    vault: Annotated[CredentialVault, Depends(get_credential_vault)],
    transport: TransportDep,
) -> CicdGateway:
    return CicdGateway(vault, DispatchExecutor(transport=transport))


def get_webhook_deliverer(db: SessionDep, transport: TransportDep) -> WebhookDeliverer:
    return WebhookDeliverer(DeliveryLedger(db), transport=transport)


def get_notification_dispatcher(
    db: SessionDep,
    deliverer: Annotated[WebhookDeliverer, Depends(get_webhook_deliverer)],
) -> NotificationDispatcher:
    return NotificationDispatcher(db, deliverer)


GatewayDep = Annotated[CicdGateway, Depends(get_cicd_gateway)]
DispatcherDep = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]
