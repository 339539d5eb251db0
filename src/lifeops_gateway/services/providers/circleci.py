"""CircleCI adapter (API v2)."""

from __future__ import annotations

from lifeops_gateway.core.settings import settings
from lifeops_gateway.schemas.cicd import (
    CicdAction,
    Provider,
    ProviderCredentials,
    RunPayload,
    TriggerPayload,
)

from .base import ProviderAdapter, ProviderRequest, quote_path, require_pipeline_id


class CircleCIAdapter(ProviderAdapter):
    """Pipeline trigger and workflow status.

    Artifacts and rerun are not wired up; the registry reports them as unsupported.
    """

    provider = Provider.CIRCLECI
    supported_actions = frozenset({CicdAction.TRIGGER, CicdAction.STATUS})

    def base_url(self, credentials: ProviderCredentials) -> str | None:
        return (credentials.base_url or settings.circleci_default_base_url).rstrip("/")

    def auth_headers(self, credentials: ProviderCredentials) -> dict[str, str]:
        secret = credentials.secret
        return {"Circle-Token": secret} if secret else {}

    def trigger(
        self, base_url: str, payload: TriggerPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        project_slug = require_pipeline_id(payload)
        url = f"{base_url}/project/{quote_path(project_slug)}/pipeline"
        body = {"branch": payload.branch, "parameters": payload.parameters}
        return self.request(CicdAction.TRIGGER, "POST", url, credentials, body)

    def status(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        url = f"{base_url}/pipeline/{quote_path(payload.run_id)}/workflow"
        return self.request(CicdAction.STATUS, "GET", url, credentials)
