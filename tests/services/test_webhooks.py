"""Tests for webhook delivery, retry backoff and dead-lettering."""

import httpx
import pytest

from lifeops_gateway.repositories.delivery_repo import DeliveryLedger
from lifeops_gateway.services.webhooks import WebhookDeliverer, worst_case_delivery_seconds

WEBHOOK_URL = "https://hooks.example.com/lifeops"
PAYLOAD = {"eventType": "run_failed", "title": "Event: run_failed"}


class ScriptedEndpoint:
    """Answers successive POSTs from a script of status codes or exceptions."""

    def __init__(self, *script: int | Exception) -> None:
        self.script = list(script)
        self.calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        step = self.script.pop(0) if self.script else 200
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step, text="boom" if step >= 400 else "ok")


def _deliverer(
    ledger: DeliveryLedger, endpoint: ScriptedEndpoint, sleeps: list[float]
) -> WebhookDeliverer:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return WebhookDeliverer(
        ledger,
        max_retries=3,
        base_delay_seconds=1.0,
        timeout_seconds=5.0,
        transport=httpx.MockTransport(endpoint),
        sleep=fake_sleep,
    )


@pytest.mark.asyncio
async def test_first_attempt_success(ledger: DeliveryLedger) -> None:
    endpoint = ScriptedEndpoint(200)
    sleeps: list[float] = []

    result = await _deliverer(ledger, endpoint, sleeps).deliver(WEBHOOK_URL, PAYLOAD)

    assert result.success and result.status == "sent"
    assert result.attempts == 1
    assert len(endpoint.calls) == 1
    assert sleeps == []

    row = ledger.get(result.delivery_id)
    assert row is not None
    assert row.status == "sent"
    assert row.retry_count == 0
    assert row.sent_at is not None
    assert row.last_error is None


@pytest.mark.asyncio
async def test_success_after_transient_failures(ledger: DeliveryLedger) -> None:
    endpoint = ScriptedEndpoint(503, httpx.ConnectTimeout("timed out"), 200)
    sleeps: list[float] = []

    result = await _deliverer(ledger, endpoint, sleeps).deliver(WEBHOOK_URL, PAYLOAD)

    assert result.success
    assert result.attempts == 3
    assert len(endpoint.calls) == 3
    assert sleeps == [1.0, 2.0]

    row = ledger.get(result.delivery_id)
    assert row is not None
    assert row.status == "sent"
    assert row.retry_count == 2


@pytest.mark.asyncio
async def test_exhausted_retries_dead_letter(ledger: DeliveryLedger) -> None:
    endpoint = ScriptedEndpoint(500, 500, 502)
    sleeps: list[float] = []

    result = await _deliverer(ledger, endpoint, sleeps).deliver(WEBHOOK_URL, PAYLOAD)

    assert not result.success and result.status == "failed"
    assert result.error == "HTTP 502: boom"
    assert len(endpoint.calls) == 3
    # Linear backoff, and no sleep after the final attempt
    assert sleeps == [1.0, 2.0]

    row = ledger.get(result.delivery_id)
    assert row is not None
    assert row.status == "dead_letter"
    assert row.retry_count == 3
    assert row.last_error == "HTTP 502: boom"
    assert row.sent_at is None


@pytest.mark.asyncio
async def test_transport_errors_are_recorded(ledger: DeliveryLedger) -> None:
    endpoint = ScriptedEndpoint(*(httpx.ConnectError("connection refused") for _ in range(3)))

    result = await _deliverer(ledger, endpoint, []).deliver(WEBHOOK_URL, PAYLOAD)

    assert result.error == "connection refused"
    row = ledger.get(result.delivery_id)
    assert row is not None
    assert row.status == "dead_letter"


@pytest.mark.asyncio
async def test_ledger_payload_is_persisted_separately(ledger: DeliveryLedger) -> None:
    endpoint = ScriptedEndpoint(200)

    result = await _deliverer(ledger, endpoint, []).deliver(
        WEBHOOK_URL, PAYLOAD, ledger_payload={"eventType": "run_failed"}
    )

    row = ledger.get(result.delivery_id)
    assert row is not None
    assert row.payload == {"eventType": "run_failed"}
    assert row.recipient == WEBHOOK_URL
    assert row.channel == "webhook"


def test_worst_case_bound(ledger: DeliveryLedger) -> None:
    deliverer = WebhookDeliverer(
        ledger, max_retries=3, base_delay_seconds=1.0, timeout_seconds=10.0
    )
    # Sleeps of 1s and 2s plus three full timeouts
    assert deliverer.worst_case_seconds == pytest.approx(33.0)
    assert deliverer.backoff_seconds(1) == 1.0
    assert deliverer.backoff_seconds(2) == 2.0


def test_worst_case_bound_matches_public_config(ledger: DeliveryLedger) -> None:
    deliverer = WebhookDeliverer(
        ledger, max_retries=4, base_delay_seconds=0.5, timeout_seconds=2.0
    )

    assert worst_case_delivery_seconds(4, 0.5, 2.0) == pytest.approx(11.0)
    assert deliverer.worst_case_seconds == worst_case_delivery_seconds(4, 0.5, 2.0)
