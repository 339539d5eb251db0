"""Notification dispatch Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NotificationChannel(str, Enum):
    """Delivery channels a single event can fan out to."""

    IN_APP = "in_app"
    WEBHOOK = "webhook"
    EMAIL = "email"


class EventType(str, Enum):
    """Domain events that produce notifications."""

    RUN_STARTED = "run_started"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"
    APPROVAL_PENDING = "approval_pending"
    APPROVAL_RESOLVED = "approval_resolved"
    AGENT_CONFLICT = "agent_conflict"
    CONNECTOR_EXPIRING = "connector_expiring"


RouteTo = Literal["master_dashboard", "run_details", "approvals_queue"]


class SendNotificationRequest(BaseModel):
    """Request body for ``POST /notifications``."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: EventType = Field(..., alias="eventType")
    user_id: str | None = Field(None, alias="userId")
    channels: list[NotificationChannel] = Field(
        default_factory=lambda: [NotificationChannel.IN_APP]
    )
    template_id: str | None = Field(None, alias="templateId")
    variables: dict[str, str] = Field(default_factory=dict)
    webhook_url: str | None = Field(None, alias="webhookUrl")
    route_to: RouteTo = Field("master_dashboard", alias="routeTo")
    entity_id: str | None = Field(None, alias="entityId")
    entity_type: str | None = Field(None, alias="entityType")


class DeliveryOutcome(BaseModel):
    """Result of one channel in a fan-out."""

    channel: NotificationChannel
    status: Literal["pending", "sent", "failed", "dead_letter"]
    error: str | None = None


class SendNotificationResponse(BaseModel):
    """Response body for ``POST /notifications``."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deliveries: list[DeliveryOutcome]
    route_to: RouteTo = Field(..., alias="routeTo")


class InAppNotificationOut(BaseModel):
    """In-app notification as listed for the dashboard."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str | None
    type: str
    entity_id: str | None
    entity_type: str | None
    route_to: str
    read_at: datetime | None
    created_at: datetime
