"""CI/CD provider gateway endpoint."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from lifeops_gateway.api.v1.dependencies import CurrentUserDep, GatewayDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cicd"])


@router.post("/cicd-provider")
async def cicd_provider(
    request: Request,
    user_id: CurrentUserDep,
    gateway: GatewayDep,
) -> JSONResponse:
    """Run one ``{action, payload}`` request against a CI/CD provider.

    The caller is authenticated before the body is read. Provider actions return
    the provider's normalized response; credential actions return metadata only.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON body"},
        )

    result = await gateway.handle(user_id, body)
    return JSONResponse(status_code=result.status_code, content=result.body)
