"""SQLAlchemy models for in-app notifications and the webhook delivery ledger."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, VARCHAR, DateTime, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from lifeops_gateway.db.session import Base
from lifeops_gateway.db.time import utcnow

DELIVERY_STATUSES = ("pending", "sent", "failed", "dead_letter")
TERMINAL_DELIVERY_STATUSES = frozenset({"sent", "dead_letter"})


def _uuid() -> str:
    return str(uuid.uuid4())


class InAppNotification(Base):
    """Notification row rendered in the dashboard bell menu."""

    __tablename__ = "in_app_notifications"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(VARCHAR(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(VARCHAR(40), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    entity_type: Mapped[str | None] = mapped_column(VARCHAR(40), nullable=True)
    route_to: Mapped[str] = mapped_column(
        VARCHAR(40), nullable=False, default="master_dashboard"
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )


class NotificationDelivery(Base):
    """Ledger row for one webhook delivery sequence."""

    __tablename__ = "notification_deliveries"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=_uuid)
    channel: Mapped[str] = mapped_column(VARCHAR(20), nullable=False)
    recipient: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        VARCHAR(20), nullable=False, default="pending", index=True
    )  # 'pending', 'sent', 'failed', 'dead_letter'
    retry_count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def is_terminal(self) -> bool:
        """Return True once the row has reached ``sent`` or ``dead_letter``."""
        return self.status in TERMINAL_DELIVERY_STATUSES
