"""System and configuration endpoints for the LifeOps gateway."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lifeops_gateway.api.v1.dependencies import SessionDep
from lifeops_gateway.core.settings import settings
from lifeops_gateway.schemas.cicd import Provider
from lifeops_gateway.services.providers import registered_adapters
from lifeops_gateway.services.webhooks import worst_case_delivery_seconds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets, encryption keys and connection strings.

    Returns:
        Dictionary containing app settings, the provider action matrix and the
        webhook retry policy with its worst-case blocking time
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "debug": settings.debug,
        },
        "providers": {
            provider.value: sorted(action.value for action in adapter.supported_actions)
            for provider, adapter in registered_adapters().items()
        },
        "provider_http_timeout_seconds": settings.provider_http_timeout_seconds,
        "webhooks": {
            "max_retries": settings.webhook_max_retries,
            "retry_base_delay_seconds": settings.webhook_retry_base_delay_seconds,
            "http_timeout_seconds": settings.webhook_http_timeout_seconds,
            "worst_case_seconds": worst_case_delivery_seconds(
                settings.webhook_max_retries,
                settings.webhook_retry_base_delay_seconds,
                settings.webhook_http_timeout_seconds,
            ),
        },
    }


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check including database connectivity.

    Returns:
        Dictionary with overall status, component health and version info
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        db_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
            "providers": [provider.value for provider in Provider],
        },
        "version": settings.app_version,
    }
