"""Webhook delivery with inline linear-backoff retries and dead-lettering.

Retries run inside the caller's request, so a delivery can block for up to
:attr:`WebhookDeliverer.worst_case_seconds`. Moving this onto a task queue would
decouple caller latency from retry duration without changing the state machine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from lifeops_gateway.core.errors import TransientDeliveryError
from lifeops_gateway.core.settings import settings
from lifeops_gateway.repositories.delivery_repo import DeliveryLedger

logger = logging.getLogger(__name__)

# Upstream error bodies are truncated before they reach the ledger
MAX_ERROR_BODY_CHARS = 500

Sleeper = Callable[[float], Awaitable[Any]]


def worst_case_delivery_seconds(
    max_retries: int, base_delay_seconds: float, timeout_seconds: float
) -> float:
    """Total backoff sleep plus every attempt running into its timeout."""
    sleeping = sum(base_delay_seconds * n for n in range(1, max_retries))
    return sleeping + max_retries * timeout_seconds


@dataclass(frozen=True)
class WebhookResult:
    """Final outcome of one delivery sequence."""

    success: bool
    attempts: int
    delivery_id: str
    error: str | None = None

    @property
    def status(self) -> str:
        return "sent" if self.success else "failed"


class WebhookDeliverer:
    """POSTs a payload to a URL, retrying transient failures up to ``max_retries`` times.

    Ledger row lifecycle for one sequence:

    - ``pending`` on creation, ``retry_count = 0``
    - ``sent`` on the first 2xx response
    - ``failed`` after each failed attempt, ``retry_count`` incremented
    - ``dead_letter`` once every attempt has failed, keeping the last error
    """

    def __init__(
        self,
        ledger: DeliveryLedger,
        *,
        max_retries: int | None = None,
        base_delay_seconds: float | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.ledger = ledger
        self.max_retries = max_retries or settings.webhook_max_retries
        self.base_delay_seconds = (
            base_delay_seconds
            if base_delay_seconds is not None
            else settings.webhook_retry_base_delay_seconds
        )
        self.timeout_seconds = timeout_seconds or settings.webhook_http_timeout_seconds
        self.transport = transport
        self.sleep = sleep

    def backoff_seconds(self, attempt: int) -> float:
        """Delay after failed attempt ``attempt`` (1-based); linear, not exponential."""
        return self.base_delay_seconds * attempt

    @property
    def worst_case_seconds(self) -> float:
        """Longest time :meth:`deliver` can block: all sleeps plus every attempt timing out."""
        return worst_case_delivery_seconds(
            self.max_retries, self.base_delay_seconds, self.timeout_seconds
        )

    async def _attempt(self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]) -> None:
        try:
            response = await client.post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransientDeliveryError(str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY_CHARS]
            raise TransientDeliveryError(f"HTTP {response.status_code}: {body}")

    async def deliver(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        ledger_payload: dict[str, Any] | None = None,
    ) -> WebhookResult:
        """Deliver ``payload`` to ``url`` and return only the final outcome.

        Args:
            url: Absolute http(s) target.
            payload: JSON body sent on every attempt.
            ledger_payload: What to persist in the ledger; defaults to ``payload``.

        Raises:
            PersistenceError: If the ledger cannot be written.
        """
        row = self.ledger.open(
            channel="webhook",
            recipient=url,
            payload=ledger_payload if ledger_payload is not None else payload,
        )
        last_error: str | None = None

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=self.transport,
        ) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    await self._attempt(client, url, payload)
                except TransientDeliveryError as exc:
                    last_error = exc.message
                    row = self.ledger.record_failure(row, last_error)
                    logger.warning(
                        "Webhook delivery %s attempt %d/%d failed: %s",
                        row.id,
                        attempt,
                        self.max_retries,
                        last_error,
                    )
                    if attempt < self.max_retries:
                        await self.sleep(self.backoff_seconds(attempt))
                    continue

                row = self.ledger.mark_sent(row)
                logger.info("Webhook delivery %s sent on attempt %d", row.id, attempt)
                return WebhookResult(success=True, attempts=attempt, delivery_id=row.id)

        row = self.ledger.mark_dead_letter(row)
        logger.error(
            "Webhook delivery %s dead-lettered after %d attempts: %s",
            row.id,
            row.retry_count,
            last_error,
        )
        return WebhookResult(
            success=False,
            attempts=self.max_retries,
            delivery_id=row.id,
            error=last_error,
        )
