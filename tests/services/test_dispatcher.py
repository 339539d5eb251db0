"""Tests for notification rendering and channel fan-out."""

import json

import httpx
import pytest
from pytest_mock import MockerFixture
from sqlalchemy import select
from sqlalchemy.orm import Session

from lifeops_gateway.core.errors import PersistenceError
from lifeops_gateway.models import InAppNotification, NotificationDelivery
from lifeops_gateway.repositories.delivery_repo import DeliveryLedger
from lifeops_gateway.schemas.notification import SendNotificationRequest
from lifeops_gateway.services.notifications import (
    EMAIL_NOT_CONFIGURED,
    WEBHOOK_URL_REQUIRED,
    NotificationDispatcher,
    apply_template,
)
from lifeops_gateway.services.webhooks import WebhookDeliverer


async def _no_sleep(seconds: float) -> None:
    return None


def _dispatcher(db_session: Session, handler=None) -> NotificationDispatcher:
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(200)))
    deliverer = WebhookDeliverer(
        DeliveryLedger(db_session), max_retries=3, transport=transport, sleep=_no_sleep
    )
    return NotificationDispatcher(db_session, deliverer)


def _request(**fields) -> SendNotificationRequest:
    return SendNotificationRequest.model_validate({"eventType": "run_failed", **fields})


def test_apply_template_replaces_known_tokens_only() -> None:
    rendered = apply_template(
        "Run {{runId}} by {{actor}} on {{branch}}", {"runId": "42", "actor": "ops"}
    )
    assert rendered == "Run 42 by ops on {{branch}}"


def test_render_defaults(db_session: Session) -> None:
    title, message = _dispatcher(db_session).render(_request())

    assert title == "Event: run_failed"
    assert message == "Event run_failed for unknown"


def test_render_prefers_variables_and_templates(db_session: Session) -> None:
    dispatcher = _dispatcher(db_session)

    title, message = dispatcher.render(
        _request(variables={"title": "Deploy broke", "message": "See logs"})
    )
    assert (title, message) == ("Deploy broke", "See logs")

    _, templated = dispatcher.render(_request(templateId="run_failed", entityId="run-7"))
    assert templated == "Run run-7 failed"

    _, fallback = dispatcher.render(_request(templateId="no-such-template", entityId="run-7"))
    assert fallback == "Event run_failed for run-7"


@pytest.mark.asyncio
async def test_in_app_channel_inserts_row(db_session: Session) -> None:
    outcomes = await _dispatcher(db_session).dispatch(
        _request(entityId="run-7", entityType="run", routeTo="run_details"), "user-1"
    )

    assert [(o.channel.value, o.status) for o in outcomes] == [("in_app", "sent")]
    row = db_session.execute(select(InAppNotification)).scalars().one()
    assert row.user_id == "user-1"
    assert row.type == "run_failed"
    assert row.route_to == "run_details"
    assert row.entity_id == "run-7"
    assert row.read_at is None


@pytest.mark.asyncio
async def test_email_channel_is_pending_placeholder(db_session: Session) -> None:
    outcomes = await _dispatcher(db_session).dispatch(_request(channels=["email"]), "user-1")

    assert outcomes[0].status == "pending"
    assert outcomes[0].error == EMAIL_NOT_CONFIGURED


@pytest.mark.asyncio
async def test_webhook_without_url_fails_without_call(db_session: Session) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    outcomes = await _dispatcher(db_session, handler).dispatch(
        _request(channels=["webhook"]), "user-1"
    )

    assert outcomes[0].status == "failed"
    assert outcomes[0].error == WEBHOOK_URL_REQUIRED
    assert calls == []


@pytest.mark.asyncio
async def test_webhook_payload_shape(db_session: Session) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    await _dispatcher(db_session, handler).dispatch(
        _request(
            channels=["webhook"],
            webhookUrl="https://hooks.example.com/x",
            entityId="run-7",
            entityType="run",
        ),
        "user-1",
    )

    assert len(calls) == 1
    body = json.loads(calls[0].content)
    assert body["eventType"] == "run_failed"
    assert body["userId"] == "user-1"
    assert body["routeTo"] == "master_dashboard"
    assert body["entityId"] == "run-7"
    assert "timestamp" in body

    ledger_row = db_session.execute(select(NotificationDelivery)).scalars().one()
    assert "userId" not in ledger_row.payload
    assert ledger_row.payload["title"] == "Event: run_failed"


@pytest.mark.asyncio
async def test_channels_are_independent(db_session: Session) -> None:
    outcomes = await _dispatcher(
        db_session, lambda request: httpx.Response(500, text="down")
    ).dispatch(
        _request(
            channels=["in_app", "webhook", "email"],
            webhookUrl="https://hooks.example.com/x",
        ),
        "user-1",
    )

    assert [(o.channel.value, o.status) for o in outcomes] == [
        ("in_app", "sent"),
        ("webhook", "failed"),
        ("email", "pending"),
    ]
    assert outcomes[1].error == "HTTP 500: down"
    ledger_row = db_session.execute(select(NotificationDelivery)).scalars().one()
    assert ledger_row.status == "dead_letter"
    assert ledger_row.retry_count == 3


@pytest.mark.asyncio
async def test_malformed_webhook_url_does_not_stop_other_channels(db_session: Session) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    outcomes = await _dispatcher(db_session, handler).dispatch(
        _request(channels=["webhook", "in_app", "email"], webhookUrl="http://[::1"),
        "user-1",
    )

    assert [(o.channel.value, o.status) for o in outcomes] == [
        ("webhook", "failed"),
        ("in_app", "sent"),
        ("email", "pending"),
    ]
    assert outcomes[0].error == "webhookUrl must be an absolute http(s) URL"
    assert calls == []
    assert db_session.execute(select(NotificationDelivery)).scalars().all() == []


@pytest.mark.asyncio
async def test_ledger_failure_only_fails_webhook_channel(
    db_session: Session, mocker: MockerFixture
) -> None:
    dispatcher = _dispatcher(db_session)
    mocker.patch.object(
        dispatcher.deliverer,
        "deliver",
        side_effect=PersistenceError("Failed to write delivery ledger: disk full"),
    )

    outcomes = await dispatcher.dispatch(
        _request(channels=["webhook", "in_app"], webhookUrl="https://hooks.example.com/x"),
        "user-1",
    )

    assert outcomes[0].status == "failed"
    assert "disk full" in outcomes[0].error
    assert outcomes[1].status == "sent"


def test_mark_read_only_for_owner(db_session: Session) -> None:
    row = InAppNotification(user_id="user-1", title="t", message="m", type="run_failed")
    db_session.add(row)
    db_session.commit()
    dispatcher = _dispatcher(db_session)

    assert dispatcher.mark_read("user-2", row.id) is None
    updated = dispatcher.mark_read("user-1", row.id)
    assert updated is not None and updated.read_at is not None
