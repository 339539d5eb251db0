# src/lifeops_gateway/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .cicd import router as cicd_router
from .notifications import router as notifications_router
from .system import router as system_router

__all__ = [
    "cicd_router",
    "notifications_router",
    "system_router",
]
