"""Executes adapter-built requests and normalizes provider responses."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from lifeops_gateway.core.errors import UpstreamError
from lifeops_gateway.core.settings import settings
from lifeops_gateway.services.providers import ProviderRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderResponse:
    """Upstream status plus the normalized body."""

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def normalize_body(text: str, status_code: int) -> Any:
    """Parse an upstream body as JSON, falling back to ``{raw, status}``.

    CI systems (Jenkins in particular) frequently answer with HTML or an empty body.
    """
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text, "status": status_code}


class DispatchExecutor:
    """Issues one HTTP request per call with a finite timeout; never retries."""

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.provider_http_timeout_seconds
        )
        self.transport = transport

    async def execute(self, request: ProviderRequest) -> ProviderResponse:
        """Send ``request`` and return the normalized response.

        Raises:
            UpstreamError: If the provider could not be reached (DNS, refused, timeout).
        """
        start_time = time.time()
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=self.transport,
        ) as client:
            try:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    json=request.json_body,
                )
            except httpx.HTTPError as exc:
                logger.warning(
                    "%s %s failed after %.2fs: %s",
                    request.provider.value,
                    request.describe(),
                    time.time() - start_time,
                    exc,
                )
                raise UpstreamError(
                    f"{request.provider.value} request failed: {exc}"
                ) from exc

        elapsed = time.time() - start_time
        log = logger.info if response.status_code < 400 else logger.warning
        log(
            "%s %s -> %d in %.2fs",
            request.provider.value,
            request.describe(),
            response.status_code,
            elapsed,
        )
        return ProviderResponse(
            status_code=response.status_code,
            body=normalize_body(response.text, response.status_code),
        )
