"""Provider adapter interface and the result types it produces.

An adapter is a pure translation from ``(action, payload, credentials)`` to a
concrete HTTP request description. It never performs I/O and never raises for an
action it does not implement; it returns :class:`UnsupportedAction` instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar
from urllib.parse import quote

from lifeops_gateway.core.errors import InvalidRequestError
from lifeops_gateway.schemas.cicd import (
    CicdAction,
    Provider,
    ProviderCredentials,
    RunPayload,
    TriggerPayload,
)

NO_CREDENTIALS_MESSAGE = "No credentials configured for provider"


@dataclass(frozen=True)
class ProviderRequest:
    """Concrete HTTP request an adapter wants executed."""

    provider: Provider
    action: CicdAction
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json_body: Any | None = None

    def describe(self) -> str:
        """Return a log-safe one-line summary (no headers, no body)."""
        return f"{self.method} {self.url}"


@dataclass(frozen=True)
class UnsupportedAction:
    """The adapter has no implementation for this action."""

    provider: Provider
    action: CicdAction

    @property
    def message(self) -> str:
        return (
            f"{self.action.value} for {self.provider.value} "
            "requires provider-specific implementation"
        )

    def to_body(self) -> dict[str, str]:
        return {
            "error": self.message,
            "code": "unsupported_action",
            "provider": self.provider.value,
            "action": self.action.value,
        }


@dataclass(frozen=True)
class NoCredentials:
    """The caller has not configured this integration; no call was attempted."""

    provider: Provider
    reason: str = NO_CREDENTIALS_MESSAGE

    def to_body(self) -> dict[str, str]:
        return {
            "error": self.reason,
            "code": "no_credentials",
            "provider": self.provider.value,
        }


AdapterResult = ProviderRequest | UnsupportedAction | NoCredentials


def quote_path(value: str) -> str:
    """Percent-encode a path fragment while keeping ``/`` separators."""
    return quote(value, safe="/")


class ProviderAdapter:
    """Base class for one CI/CD provider.

    Subclasses set ``provider`` and ``supported_actions`` and override the builder
    for each supported action.
    """

    provider: ClassVar[Provider]
    supported_actions: ClassVar[frozenset[CicdAction]] = frozenset()

    def supports(self, action: CicdAction) -> bool:
        return action in self.supported_actions

    def trigger_target(self, payload: TriggerPayload) -> str:
        """Return the pipeline, project or job a trigger addresses."""
        return require_pipeline_id(payload)

    def build(
        self,
        action: CicdAction,
        payload: TriggerPayload | RunPayload,
        credentials: ProviderCredentials | None,
    ) -> AdapterResult:
        """Translate a generic action into a provider request.

        Raises:
            InvalidRequestError: If the payload is malformed for this provider.
        """
        if not self.supports(action):
            return UnsupportedAction(provider=self.provider, action=action)
        if credentials is None:
            return NoCredentials(provider=self.provider)
        base_url = self.base_url(credentials)
        if not base_url:
            return NoCredentials(
                provider=self.provider,
                reason=f"No base URL configured for {self.provider.value}",
            )

        if action is CicdAction.TRIGGER:
            if not isinstance(payload, TriggerPayload):
                raise InvalidRequestError("trigger requires a trigger payload")
            return self.trigger(base_url, payload, credentials)

        if not isinstance(payload, RunPayload):
            raise InvalidRequestError(f"{action.value} requires provider and runId")
        if action is CicdAction.STATUS:
            return self.status(base_url, payload, credentials)
        if action is CicdAction.ARTIFACTS:
            return self.artifacts(base_url, payload, credentials)
        return self.retry(base_url, payload, credentials)

    def base_url(self, credentials: ProviderCredentials) -> str | None:
        raise NotImplementedError

    def auth_headers(self, credentials: ProviderCredentials) -> dict[str, str]:
        secret = credentials.secret
        return {"Authorization": f"Bearer {secret}"} if secret else {}

    def extra_headers(self) -> dict[str, str]:
        return {}

    def request(
        self,
        action: CicdAction,
        method: str,
        url: str,
        credentials: ProviderCredentials,
        json_body: Any | None = None,
    ) -> ProviderRequest:
        headers = {"Content-Type": "application/json"}
        headers.update(self.extra_headers())
        headers.update(self.auth_headers(credentials))
        return ProviderRequest(
            provider=self.provider,
            action=action,
            method=method,
            url=url,
            headers=headers,
            json_body=json_body,
        )

    def trigger(
        self, base_url: str, payload: TriggerPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        raise NotImplementedError

    def status(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        raise NotImplementedError

    def artifacts(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        raise NotImplementedError

    def retry(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        raise NotImplementedError


def require_pipeline_id(payload: TriggerPayload) -> str:
    pipeline_id = (payload.pipeline_id or "").strip().strip("/")
    if not pipeline_id:
        raise InvalidRequestError("pipelineId required")
    return pipeline_id
