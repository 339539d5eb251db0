# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator, Iterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lifeops_gateway.api.v1.dependencies import (
    SessionDep,
    TransportDep,
    get_http_transport,
    get_webhook_deliverer,
)
from lifeops_gateway.core.security import create_access_token
from lifeops_gateway.db.session import Base
from lifeops_gateway.db.session import get_db as app_get_session
from lifeops_gateway.main import app as fastapi_app
from lifeops_gateway.repositories.credential_repo import CredentialVault
from lifeops_gateway.repositories.delivery_repo import DeliveryLedger
from lifeops_gateway.services.crypto import CredentialCipher
from lifeops_gateway.services.webhooks import WebhookDeliverer

TEST_DB_URL = "sqlite://"
TEST_USER_ID = "user-alpha"
OTHER_USER_ID = "user-beta"


class OutboundRecorder:
    """Stands in for the network: records every outbound request and replays queued replies.

    Queued items are returned in order; an exception instance is raised instead of
    answering. Once the queue is empty every request gets a fresh default reply.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.sleeps: list[float] = []
        self.default_status = 200
        self.default_json: object = {"ok": True}
        self._queue: list[httpx.Response | Exception] = []

    def queue(self, *replies: httpx.Response | Exception) -> None:
        self._queue.extend(replies)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queue:
            reply = self._queue.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return httpx.Response(self.default_status, json=self.default_json)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test gets a clean database explicitly.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def outbound(app: FastAPI) -> Iterator[OutboundRecorder]:
    """Route every outbound HTTP call made through the API into a recorder."""
    recorder = OutboundRecorder()

    def _transport_override() -> httpx.AsyncBaseTransport:
        return recorder.transport

    def _deliverer_override(db: SessionDep, transport: TransportDep) -> WebhookDeliverer:
        return WebhookDeliverer(DeliveryLedger(db), transport=transport, sleep=recorder.sleep)

    app.dependency_overrides[get_http_transport] = _transport_override
    app.dependency_overrides[get_webhook_deliverer] = _deliverer_override
    try:
        yield recorder
    finally:
        app.dependency_overrides.pop(get_http_transport, None)
        app.dependency_overrides.pop(get_webhook_deliverer, None)


@pytest.fixture()
def client(app: FastAPI, outbound: OutboundRecorder) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {create_access_token(TEST_USER_ID)}"}


@pytest.fixture()
def other_auth_headers() -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}


@pytest.fixture()
def cipher() -> CredentialCipher:
    return CredentialCipher(CredentialCipher.generate_key())


@pytest.fixture()
def vault(db_session: Session, cipher: CredentialCipher) -> CredentialVault:
    return CredentialVault(db_session, cipher)


@pytest.fixture()
def ledger(db_session: Session) -> DeliveryLedger:
    return DeliveryLedger(db_session)
