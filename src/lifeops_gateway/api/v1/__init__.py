# src/lifeops_gateway/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import cicd_router, notifications_router, system_router

__all__ = [
    "cicd_router",
    "notifications_router",
    "system_router",
]
