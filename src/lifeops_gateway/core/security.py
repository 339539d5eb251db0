"""Bearer token helpers.

Token issuance belongs to the dashboard's auth service; the gateway only needs to
resolve a token to a user id. ``create_access_token`` exists for local tooling and
tests.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from lifeops_gateway.core.errors import AuthError
from lifeops_gateway.core.settings import settings


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Create a signed JWT whose subject is ``user_id``."""
    minutes = expires_minutes or settings.access_token_expire_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def resolve_user_id(token: str) -> str:
    """Return the user id carried by ``token``.

    Raises:
        AuthError: If the token is malformed, expired or carries no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise AuthError("Unauthorized") from err
    subject = payload.get("sub")
    if not subject:
        raise AuthError("Unauthorized")
    return str(subject)
