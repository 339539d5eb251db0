"""CI/CD gateway Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """CI/CD providers the gateway has adapters for."""

    GITHUB_ACTIONS = "github_actions"
    CIRCLECI = "circleci"
    JENKINS = "jenkins"


class CicdAction(str, Enum):
    """Actions accepted by the ``/cicd-provider`` endpoint."""

    TRIGGER = "trigger"
    STATUS = "status"
    ARTIFACTS = "artifacts"
    RETRY = "retry"
    CREDENTIALS_LIST = "credentials_list"
    CREDENTIALS_SAVE = "credentials_save"
    CREDENTIALS_DELETE = "credentials_delete"


# Actions that call out to a provider, as opposed to credential management.
PROVIDER_ACTIONS = frozenset(
    {CicdAction.TRIGGER, CicdAction.STATUS, CicdAction.ARTIFACTS, CicdAction.RETRY}
)
RUN_ACTIONS = frozenset({CicdAction.STATUS, CicdAction.ARTIFACTS, CicdAction.RETRY})


class ProviderCredentials(BaseModel):
    """Decrypted credential map; lives only for the duration of one request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str | None = None
    api_key: str | None = Field(None, alias="apiKey")
    base_url: str | None = Field(None, alias="baseUrl")
    username: str | None = None

    @property
    def secret(self) -> str | None:
        """Return the bearer secret, preferring ``token`` over ``apiKey``."""
        return self.token or self.api_key

    def __repr__(self) -> str:
        # Keep secrets out of tracebacks and debug logs
        return f"ProviderCredentials(base_url={self.base_url!r}, username={self.username!r})"

    __str__ = __repr__


class TriggerPayload(BaseModel):
    """Start a pipeline, workflow or job."""

    model_config = ConfigDict(populate_by_name=True)

    provider: Provider
    pipeline_id: str | None = Field(None, alias="pipelineId")
    branch: str = "main"
    workflow_id: str = Field("ci.yml", alias="workflowId")
    job_name: str | None = Field(None, alias="jobName")
    parameters: dict[str, Any] = Field(default_factory=dict)


class RunPayload(BaseModel):
    """Identify a single run for status, artifacts and retry."""

    model_config = ConfigDict(populate_by_name=True)

    provider: Provider
    run_id: str = Field(..., alias="runId", min_length=1)


class CredentialsPayload(BaseModel):
    """Save or delete the credential set for one provider."""

    provider: Provider
    credentials: ProviderCredentials | None = None


class CredentialListPayload(BaseModel):
    """Optional provider filter for credential listing."""

    provider: Provider | None = None


class CredentialRecord(BaseModel):
    """Credential metadata; never includes secrets."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: Provider
    created_at: datetime
