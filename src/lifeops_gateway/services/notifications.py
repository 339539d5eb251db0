"""Notification fan-out across in-app, webhook and email channels."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeops_gateway.core.errors import GatewayError, PersistenceError
from lifeops_gateway.db.time import utcnow
from lifeops_gateway.models.notification import InAppNotification
from lifeops_gateway.schemas.notification import (
    DeliveryOutcome,
    NotificationChannel,
    SendNotificationRequest,
)
from lifeops_gateway.services.webhooks import WebhookDeliverer

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "Event {{eventType}} for {{entityId}}"
EMAIL_NOT_CONFIGURED = "Email channel requires SMTP configuration"
WEBHOOK_URL_REQUIRED = "webhookUrl required for webhook channel"
IN_APP_LIST_LIMIT = 50

TEMPLATES: dict[str, str] = {
    "run_started": "Run {{entityId}} started",
    "run_completed": "Run {{entityId}} completed",
    "run_failed": "Run {{entityId}} failed",
    "approval_pending": "Approval {{entityId}} is waiting for review",
    "approval_resolved": "Approval {{entityId}} was resolved",
    "agent_conflict": "Agents reported a conflict on {{entityId}}",
    "connector_expiring": "Connector {{entityId}} is about to expire",
}


def apply_template(template: str, variables: dict[str, str]) -> str:
    """Replace literal ``{{key}}`` tokens; tokens without a value stay as written."""
    rendered = template
    for key, value in variables.items():
        rendered = rendered.replace("{{" + key + "}}", str(value))
    return rendered


def _is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class NotificationDispatcher:
    """Renders one event and delivers it to every requested channel.

    Channels are independent: a failure in one becomes that channel's ``failed``
    outcome and never prevents the others from running.
    """

    def __init__(self, session: Session, deliverer: WebhookDeliverer) -> None:
        self.session = session
        self.deliverer = deliverer

    def render(self, request: SendNotificationRequest) -> tuple[str, str]:
        """Return ``(title, message)`` for the event."""
        event_type = request.event_type.value
        title = request.variables.get("title") or f"Event: {event_type}"
        message = request.variables.get("message")
        if not message:
            template = TEMPLATES.get(request.template_id or "", DEFAULT_TEMPLATE)
            message = apply_template(
                template,
                {
                    **request.variables,
                    "eventType": event_type,
                    "entityId": request.entity_id or "unknown",
                },
            )
        return title, message

    async def dispatch(
        self, request: SendNotificationRequest, user_id: str
    ) -> list[DeliveryOutcome]:
        """Deliver to each channel in request order and collect the outcomes."""
        title, message = self.render(request)
        outcomes: list[DeliveryOutcome] = []
        for channel in request.channels:
            try:
                if channel is NotificationChannel.IN_APP:
                    outcome = self._deliver_in_app(request, user_id, title, message)
                elif channel is NotificationChannel.WEBHOOK:
                    outcome = await self._deliver_webhook(request, user_id, title, message)
                else:
                    outcome = DeliveryOutcome(
                        channel=channel, status="pending", error=EMAIL_NOT_CONFIGURED
                    )
            except GatewayError as exc:
                logger.error("Channel %s failed for %s: %s", channel.value, user_id, exc.message)
                outcome = DeliveryOutcome(channel=channel, status="failed", error=exc.message)
            outcomes.append(outcome)
        return outcomes

    def _deliver_in_app(
        self,
        request: SendNotificationRequest,
        user_id: str,
        title: str,
        message: str,
    ) -> DeliveryOutcome:
        row = InAppNotification(
            user_id=user_id,
            title=title,
            message=message,
            type=request.event_type.value,
            entity_id=request.entity_id,
            entity_type=request.entity_type,
            route_to=request.route_to,
        )
        try:
            with self.session.begin_nested():
                self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("In-app notification insert failed for %s: %s", user_id, err)
            return DeliveryOutcome(
                channel=NotificationChannel.IN_APP, status="failed", error=str(err)
            )
        return DeliveryOutcome(channel=NotificationChannel.IN_APP, status="sent")

    async def _deliver_webhook(
        self,
        request: SendNotificationRequest,
        user_id: str,
        title: str,
        message: str,
    ) -> DeliveryOutcome:
        url = (request.webhook_url or "").strip()
        if not url:
            return DeliveryOutcome(
                channel=NotificationChannel.WEBHOOK, status="failed", error=WEBHOOK_URL_REQUIRED
            )
        if not _is_http_url(url):
            return DeliveryOutcome(
                channel=NotificationChannel.WEBHOOK,
                status="failed",
                error="webhookUrl must be an absolute http(s) URL",
            )

        payload: dict[str, Any] = {
            "eventType": request.event_type.value,
            "userId": user_id,
            "title": title,
            "message": message,
            "entityId": request.entity_id,
            "entityType": request.entity_type,
            "routeTo": request.route_to,
            "timestamp": utcnow().isoformat(),
        }
        ledger_payload = {
            "eventType": request.event_type.value,
            "title": title,
            "message": message,
            "entityId": request.entity_id,
            "entityType": request.entity_type,
        }
        result = await self.deliverer.deliver(url, payload, ledger_payload=ledger_payload)
        return DeliveryOutcome(
            channel=NotificationChannel.WEBHOOK, status=result.status, error=result.error
        )

    def list_in_app(self, user_id: str, limit: int = IN_APP_LIST_LIMIT) -> list[InAppNotification]:
        """Return the caller's latest in-app notifications, newest first."""
        stmt = (
            select(InAppNotification)
            .where(InAppNotification.user_id == user_id)
            .order_by(InAppNotification.created_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def mark_read(self, user_id: str, notification_id: str) -> InAppNotification | None:
        """Set ``read_at`` on one of the caller's notifications; None if it is not theirs."""
        row = self.session.get(InAppNotification, notification_id)
        if row is None or row.user_id != user_id:
            return None
        if row.read_at is None:
            row.read_at = utcnow()
            try:
                self.session.commit()
            except SQLAlchemyError as err:
                self.session.rollback()
                raise PersistenceError(f"Failed to mark notification read: {err}") from err
            self.session.refresh(row)
        return row
