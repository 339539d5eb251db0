# src/lifeops_gateway/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .cicd import (
    CicdAction,
    CredentialListPayload,
    CredentialRecord,
    CredentialsPayload,
    Provider,
    ProviderCredentials,
    RunPayload,
    TriggerPayload,
)
from .notification import (
    DeliveryOutcome,
    EventType,
    InAppNotificationOut,
    NotificationChannel,
    SendNotificationRequest,
    SendNotificationResponse,
)

__all__ = [
    "CicdAction", "Provider", "ProviderCredentials",
    "TriggerPayload", "RunPayload",
    "CredentialsPayload", "CredentialListPayload", "CredentialRecord",
    "DeliveryOutcome", "EventType", "NotificationChannel",
    "SendNotificationRequest", "SendNotificationResponse",
    "InAppNotificationOut",
]
