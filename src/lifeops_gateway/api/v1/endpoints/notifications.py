"""Notification dispatch endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from lifeops_gateway.api.v1.dependencies import (
    CurrentUserDep,
    DispatcherDep,
    OptionalUserDep,
)
from lifeops_gateway.core.errors import InvalidRequestError
from lifeops_gateway.schemas.notification import (
    InAppNotificationOut,
    SendNotificationRequest,
    SendNotificationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=SendNotificationResponse, response_model_by_alias=True)
async def send_notification(
    payload: SendNotificationRequest,
    dispatcher: DispatcherDep,
    token_user_id: OptionalUserDep,
) -> SendNotificationResponse:
    """Fan one event out to the requested channels.

    The recipient is the bearer token's subject when a token is sent, otherwise
    the ``userId`` field of the body.
    """
    user_id = token_user_id or payload.user_id
    if not user_id:
        raise InvalidRequestError("User ID required")

    deliveries = await dispatcher.dispatch(payload, user_id)
    logger.info(
        "Dispatched %s to %s over %s",
        payload.event_type.value,
        user_id,
        ",".join(f"{d.channel.value}={d.status}" for d in deliveries),
    )
    return SendNotificationResponse(success=True, deliveries=deliveries, route_to=payload.route_to)


@router.get("", response_model=list[InAppNotificationOut])
async def list_notifications(
    user_id: CurrentUserDep,
    dispatcher: DispatcherDep,
) -> list[InAppNotificationOut]:
    """Return the caller's latest 50 in-app notifications, newest first."""
    rows = dispatcher.list_in_app(user_id)
    return [InAppNotificationOut.model_validate(row) for row in rows]


@router.post("/{notification_id}/read", response_model=InAppNotificationOut)
async def mark_notification_read(
    notification_id: str,
    user_id: CurrentUserDep,
    dispatcher: DispatcherDep,
) -> InAppNotificationOut:
    """Mark one of the caller's in-app notifications as read."""
    row = dispatcher.mark_read(user_id, notification_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return InAppNotificationOut.model_validate(row)
