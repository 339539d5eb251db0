# src/lifeops_gateway/models/__init__.py
"""SQLAlchemy models for the LifeOps integration gateway."""

from .credential import ProviderCredential
from .notification import (
    DELIVERY_STATUSES,
    TERMINAL_DELIVERY_STATUSES,
    InAppNotification,
    NotificationDelivery,
)

__all__ = [
    "ProviderCredential",
    "InAppNotification",
    "NotificationDelivery",
    "DELIVERY_STATUSES",
    "TERMINAL_DELIVERY_STATUSES",
]
