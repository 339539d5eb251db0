"""Data access for encrypted CI/CD provider credentials."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeops_gateway.core.errors import PersistenceError
from lifeops_gateway.db.time import utcnow
from lifeops_gateway.models.credential import ProviderCredential
from lifeops_gateway.schemas.cicd import Provider, ProviderCredentials
from lifeops_gateway.services.crypto import CredentialCipher, CredentialDecryptionError

__all__ = ["CredentialVault"]

logger = logging.getLogger(__name__)


class CredentialVault:
    """Reads and writes one encrypted credential blob per (user, provider)."""

    def __init__(self, session: Session, cipher: CredentialCipher) -> None:
        """Initialize the vault with a session and the cipher that owns the key."""
        self.session = session
        self.cipher = cipher

    def _row(self, user_id: str, provider: Provider) -> ProviderCredential | None:
        result = self.session.execute(
            select(ProviderCredential).where(
                ProviderCredential.user_id == user_id,
                ProviderCredential.provider == provider.value,
            )
        )
        return result.scalars().first()

    def get(self, user_id: str, provider: Provider) -> ProviderCredentials | None:
        """Return decrypted credentials, or None when the integration is not configured."""
        row = self._row(user_id, provider)
        if row is None:
            return None
        try:
            return self.cipher.decrypt(row.encrypted_credentials)
        except CredentialDecryptionError:
            logger.warning(
                "Credential %s for provider %s could not be decrypted; treating as unset",
                row.id,
                provider.value,
            )
            return None

    def save(
        self,
        user_id: str,
        provider: Provider,
        credentials: ProviderCredentials,
    ) -> ProviderCredential:
        """Create or wholesale-replace the credential row for (user, provider).

        Fields not present in ``credentials`` are dropped rather than merged with the
        previous blob.
        """
        blob = self.cipher.encrypt(credentials)
        row = self._row(user_id, provider)
        try:
            if row is None:
                row = ProviderCredential(
                    user_id=user_id,
                    provider=provider.value,
                    encrypted_credentials=blob,
                )
                self.session.add(row)
            else:
                row.encrypted_credentials = blob
                row.updated_at = utcnow()
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            raise PersistenceError(f"Failed to save credentials: {err}") from err
        self.session.refresh(row)
        logger.info("Saved %s credentials for user %s", provider.value, user_id)
        return row

    def delete(self, user_id: str, provider: Provider) -> None:
        """Remove the credential row entirely; a missing row is not an error."""
        row = self._row(user_id, provider)
        if row is None:
            return
        try:
            self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            raise PersistenceError(f"Failed to delete credentials: {err}") from err
        logger.info("Deleted %s credentials for user %s", provider.value, user_id)

    def list(self, user_id: str, provider: Provider | None = None) -> list[ProviderCredential]:
        """Return credential rows for a user. Callers must only expose metadata."""
        stmt = select(ProviderCredential).where(ProviderCredential.user_id == user_id)
        if provider is not None:
            stmt = stmt.where(ProviderCredential.provider == provider.value)
        stmt = stmt.order_by(ProviderCredential.created_at)
        return list(self.session.execute(stmt).scalars())
