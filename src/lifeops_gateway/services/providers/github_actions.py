"""GitHub Actions adapter."""

from __future__ import annotations

from lifeops_gateway.core.errors import InvalidRequestError
from lifeops_gateway.core.settings import settings
from lifeops_gateway.schemas.cicd import (
    CicdAction,
    Provider,
    ProviderCredentials,
    RunPayload,
    TriggerPayload,
)

from .base import ProviderAdapter, ProviderRequest, quote_path, require_pipeline_id


def split_repository(pipeline_id: str) -> tuple[str, str]:
    """Split ``"<owner>/<repo>"`` into its two parts."""
    parts = pipeline_id.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidRequestError("pipelineId must be '<owner>/<repo>' for github_actions")
    return parts[0], parts[1]


def split_run_id(run_id: str) -> tuple[str, str, str]:
    """Split ``"<owner>/<repo>/<runId>"``; the last segment is the numeric run id."""
    parts = run_id.strip("/").split("/")
    if len(parts) < 3 or not parts[0] or not parts[1] or not parts[-1].isdigit():
        raise InvalidRequestError("runId must be '<owner>/<repo>/<runId>' for github_actions")
    return parts[0], parts[1], parts[-1]


class GitHubActionsAdapter(ProviderAdapter):
    """Workflow dispatch and run management through the GitHub REST API."""

    provider = Provider.GITHUB_ACTIONS
    supported_actions = frozenset(
        {CicdAction.TRIGGER, CicdAction.STATUS, CicdAction.ARTIFACTS, CicdAction.RETRY}
    )

    def base_url(self, credentials: ProviderCredentials) -> str | None:
        # Fixed public API; stored baseUrl values are ignored for GitHub
        return settings.github_api_base_url.rstrip("/")

    def extra_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.github_api_version,
        }

    def _run_url(self, base_url: str, run_id: str, suffix: str = "") -> str:
        owner, repo, number = split_run_id(run_id)
        return (
            f"{base_url}/repos/{quote_path(owner)}/{quote_path(repo)}"
            f"/actions/runs/{number}{suffix}"
        )

    def trigger(
        self, base_url: str, payload: TriggerPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        owner, repo = split_repository(require_pipeline_id(payload))
        url = (
            f"{base_url}/repos/{quote_path(owner)}/{quote_path(repo)}"
            f"/actions/workflows/{quote_path(payload.workflow_id)}/dispatches"
        )
        body = {"ref": payload.branch, "inputs": payload.parameters}
        return self.request(CicdAction.TRIGGER, "POST", url, credentials, body)

    def status(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        url = self._run_url(base_url, payload.run_id)
        return self.request(CicdAction.STATUS, "GET", url, credentials)

    def artifacts(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        url = self._run_url(base_url, payload.run_id, "/artifacts")
        return self.request(CicdAction.ARTIFACTS, "GET", url, credentials)

    def retry(
        self, base_url: str, payload: RunPayload, credentials: ProviderCredentials
    ) -> ProviderRequest:
        url = self._run_url(base_url, payload.run_id, "/rerun")
        return self.request(CicdAction.RETRY, "POST", url, credentials)
