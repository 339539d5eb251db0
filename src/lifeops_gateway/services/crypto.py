# src/lifeops_gateway/services/crypto.py
"""Symmetric encryption for stored provider credentials."""

from __future__ import annotations

import base64
import hashlib
import json

from cryptography.fernet import Fernet, InvalidToken

from lifeops_gateway.core.settings import settings
from lifeops_gateway.schemas.cicd import ProviderCredentials


class CredentialDecryptionError(ValueError):
    """Raised when a stored blob cannot be decrypted or parsed."""


def _derive_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary secret string."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class CredentialCipher:
    """Encrypts credential maps into opaque blobs and back.

    The vault is the only caller; everything else treats the blob as ciphertext.
    """

    def __init__(self, key: str | bytes | None = None) -> None:
        if key is None:
            key = settings.credential_encryption_key or _derive_key(settings.secret_key)
        self._fernet = Fernet(key)

    @staticmethod
    def generate_key() -> str:
        """Return a fresh Fernet key suitable for CREDENTIAL_ENCRYPTION_KEY."""
        return Fernet.generate_key().decode()

    def encrypt(self, credentials: ProviderCredentials) -> str:
        """Serialize and encrypt a credential map.

        Args:
            credentials: Decrypted credential fields; unset fields are dropped.

        Returns:
            URL-safe base64 Fernet token
        """
        plaintext = json.dumps(
            credentials.model_dump(by_alias=True, exclude_none=True),
            sort_keys=True,
        )
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, blob: str) -> ProviderCredentials:
        """Decrypt a stored blob into a credential map.

        Raises:
            CredentialDecryptionError: If the blob was written with another key or is corrupt.
        """
        try:
            plaintext = self._fernet.decrypt(blob.encode("ascii"))
            data = json.loads(plaintext)
        except (InvalidToken, ValueError, UnicodeEncodeError) as err:
            raise CredentialDecryptionError("Stored credentials could not be decrypted") from err
        if not isinstance(data, dict):
            raise CredentialDecryptionError("Stored credentials are not a mapping")
        return ProviderCredentials.model_validate(data)


def get_credential_cipher() -> CredentialCipher:
    """Return a cipher bound to the configured key."""
    return CredentialCipher()
