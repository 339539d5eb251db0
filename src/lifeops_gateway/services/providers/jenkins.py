"""Jenkins adapter."""

from __future__ import annotations

import base64

from lifeops_gateway.schemas.cicd import (
    CicdAction,
    Provider,
    ProviderCredentials,
    TriggerPayload,
)

from .base import ProviderAdapter, ProviderRequest, quote_path, require_pipeline_id


class JenkinsAdapter(ProviderAdapter):
    """Remote job trigger against a self-hosted Jenkins.

    There is no public Jenkins, so a credential without ``baseUrl`` is treated as
    not configured.
    """

    provider = Provider.JENKINS
    supported_actions = frozenset({CicdAction.TRIGGER})

    def trigger_target(self, payload: TriggerPayload) -> str:
        job_name = (payload.job_name or "").strip().strip("/")
        if not (payload.pipeline_id or "").strip() and job_name:
            return job_name
        return require_pipeline_id(payload)

    def base_url(self, credentials: ProviderCredentials) -> str | None:
        if not credentials.base_url:
            return None
        return credentials.base_url.rstrip("/")

    def auth_headers(self, credentials: ProviderCredentials) -> dict[str, str]:
        secret = credentials.secret
        if not secret:
            return {}
        if credentials.username:
            # Jenkins API tokens are presented as basic auth alongside the user name
            raw = f"{credentials.username}:{secret}".encode()
            return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
        return {"Authorization": f"Bearer {secret}"}

    def trigger(
        self, base_url: str, payload: TriggerPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        job_path = self.trigger_target(payload)
        url = f"{base_url}/job/{quote_path(job_path)}/build"
        return self.request(CicdAction.TRIGGER, "POST", url, credentials, payload.parameters)
