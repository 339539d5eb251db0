# tests/v1/test_jwt_validation.py
"""Tests for bearer token validation edge cases."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from jose import jwt

from lifeops_gateway.core.errors import AuthError
from lifeops_gateway.core.security import create_access_token, resolve_user_id
from lifeops_gateway.core.settings import settings

ENDPOINT = "/api/v1/notifications"


def _token(claims: dict, secret: str | None = None) -> str:
    return jwt.encode(claims, secret or settings.secret_key, algorithm=settings.jwt_algorithm)


class TestJWTValidationEdgeCases:
    """Test JWT validation edge cases and security scenarios."""

    def test_jwt_without_bearer_prefix(self, client):
        """Test that requests without Bearer prefix are rejected."""
        response = client.get(ENDPOINT, headers={"Authorization": "InvalidToken123"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_jwt_with_empty_token(self, client):
        """Test that empty JWT tokens are rejected."""
        response = client.get(ENDPOINT, headers={"Authorization": "Bearer "})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_jwt_signed_with_other_secret(self, client):
        token = _token({"sub": "user-1"}, secret="someone-elses-secret")
        response = client.get(ENDPOINT, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_jwt(self, client):
        expired = datetime.now(UTC) - timedelta(minutes=5)
        token = _token({"sub": "user-1", "exp": expired})
        response = client.get(ENDPOINT, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_jwt_without_subject(self, client):
        token = _token({"scope": "notifications"})
        response = client.get(ENDPOINT, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Unauthorized"}


def test_resolve_user_id_round_trip() -> None:
    assert resolve_user_id(create_access_token("user-42")) == "user-42"


def test_resolve_user_id_rejects_garbage() -> None:
    with pytest.raises(AuthError):
        resolve_user_id("definitely.not.ajwt")
