"""Data access for the notification delivery ledger."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeops_gateway.core.errors import PersistenceError
from lifeops_gateway.db.time import utcnow
from lifeops_gateway.models.notification import NotificationDelivery

__all__ = ["DeliveryLedger"]


class DeliveryLedger:
    """Persists delivery attempts and enforces their state machine.

    ``pending`` and ``failed`` rows may move on; ``sent`` and ``dead_letter`` are
    terminal and ``retry_count`` never decreases.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self, row: NotificationDelivery) -> NotificationDelivery:
        try:
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            raise PersistenceError(f"Failed to write delivery ledger: {err}") from err
        self.session.refresh(row)
        return row

    @staticmethod
    def _ensure_open(row: NotificationDelivery) -> None:
        if row.is_terminal:
            raise PersistenceError(
                f"Delivery {row.id} is already {row.status} and cannot change state"
            )

    def open(self, *, channel: str, recipient: str, payload: dict[str, Any]) -> NotificationDelivery:
        """Insert a ``pending`` row for a new delivery sequence."""
        row = NotificationDelivery(
            channel=channel,
            recipient=recipient,
            payload=payload,
            status="pending",
            retry_count=0,
        )
        self.session.add(row)
        return self._commit(row)

    def mark_sent(self, row: NotificationDelivery) -> NotificationDelivery:
        """Record terminal success."""
        self._ensure_open(row)
        row.status = "sent"
        row.sent_at = utcnow()
        return self._commit(row)

    def record_failure(self, row: NotificationDelivery, error: str) -> NotificationDelivery:
        """Record one failed attempt and bump the retry counter."""
        self._ensure_open(row)
        row.status = "failed"
        row.retry_count = row.retry_count + 1
        row.last_error = error
        return self._commit(row)

    def mark_dead_letter(self, row: NotificationDelivery) -> NotificationDelivery:
        """Demote a sequence whose retries are exhausted; the last error is kept."""
        self._ensure_open(row)
        row.status = "dead_letter"
        return self._commit(row)

    def get(self, delivery_id: str) -> NotificationDelivery | None:
        return self.session.get(NotificationDelivery, delivery_id)

    def list_by_status(self, status: str, limit: int = 50) -> list[NotificationDelivery]:
        """Return the most recent rows in ``status``, newest first."""
        stmt = (
            select(NotificationDelivery)
            .where(NotificationDelivery.status == status)
            .order_by(NotificationDelivery.created_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())
