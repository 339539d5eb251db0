"""SQLAlchemy model for per-user CI/CD provider credentials."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import VARCHAR, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lifeops_gateway.db.session import Base
from lifeops_gateway.db.time import utcnow


class ProviderCredential(Base):
    """Encrypted credential blob for one (user, provider) pair."""

    __tablename__ = "cicd_provider_credentials"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_cicd_credentials_user_provider"),
    )

    id: Mapped[str] = mapped_column(
        VARCHAR(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(VARCHAR(64), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(VARCHAR(32), nullable=False)
    # Fernet token; opaque to everything except the credential vault
    encrypted_credentials: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<ProviderCredential id={self.id} provider={self.provider}>"
