"""CI/CD gateway orchestration.

Each request runs ``ResolveCredentials -> BuildRequest -> Execute -> Normalize``
once. Caller authentication happens in the API dependency before anything here
is reached. Provider calls are never retried automatically; ``retry`` is a
provider action (re-run a specific run) and is reported once like any other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import status
from pydantic import BaseModel, ValidationError

from lifeops_gateway.core.errors import ConfigurationError, InvalidRequestError
from lifeops_gateway.repositories.credential_repo import CredentialVault
from lifeops_gateway.schemas.cicd import (
    PROVIDER_ACTIONS,
    RUN_ACTIONS,
    CicdAction,
    CredentialListPayload,
    CredentialRecord,
    CredentialsPayload,
    Provider,
    RunPayload,
    TriggerPayload,
)
from lifeops_gateway.services.executor import DispatchExecutor
from lifeops_gateway.services.providers import (
    NoCredentials,
    UnsupportedAction,
    resolve_adapter,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResult:
    """HTTP status and JSON body the router should return."""

    status_code: int
    body: Any


def _validation_message(err: ValidationError) -> str:
    first = err.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
    return f"Invalid payload: {location}: {first.get('msg', 'invalid value')}"


def _parse(model: type[BaseModel], payload: dict[str, Any]) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as err:
        raise InvalidRequestError(_validation_message(err)) from err


def _provider_from(payload: dict[str, Any], missing_message: str) -> Provider:
    raw = payload.get("provider")
    if not raw:
        raise InvalidRequestError(missing_message)
    try:
        return Provider(raw)
    except ValueError as err:
        raise ConfigurationError("Unsupported provider", code="unsupported_provider") from err


class CicdGateway:
    """Answers trigger/status/artifacts/retry and credential management requests."""

    def __init__(self, vault: CredentialVault, executor: DispatchExecutor) -> None:
        self.vault = vault
        self.executor = executor

    async def handle(self, user_id: str, body: Any) -> GatewayResult:
        """Route a decoded ``{action, payload}`` request body.

        Raises:
            InvalidRequestError: For unknown actions or malformed payloads.
            ConfigurationError: For a provider name the gateway does not know.
            UpstreamError: If the provider could not be reached.
            PersistenceError: If a credential write fails.
        """
        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        try:
            action = CicdAction(body.get("action"))
        except ValueError as err:
            raise InvalidRequestError("Unknown action", code="unknown_action") from err

        payload = body.get("payload") or {}
        if not isinstance(payload, dict):
            raise InvalidRequestError("payload must be a JSON object")

        if action in PROVIDER_ACTIONS:
            return await self.dispatch(user_id, action, payload)
        if action is CicdAction.CREDENTIALS_LIST:
            return self.list_credentials(user_id, payload)
        if action is CicdAction.CREDENTIALS_SAVE:
            return self.save_credentials(user_id, payload)
        return self.delete_credentials(user_id, payload)

    async def dispatch(
        self, user_id: str, action: CicdAction, payload: dict[str, Any]
    ) -> GatewayResult:
        """Run one provider action for ``user_id``."""
        if action in RUN_ACTIONS:
            missing = "provider and runId required"
            provider = _provider_from(payload, missing)
            if not str(payload.get("runId") or "").strip():
                raise InvalidRequestError(missing)
        else:
            provider = _provider_from(payload, "provider required")

        # Unsupported pairs are rejected before the vault is touched
        resolved = resolve_adapter(provider, action)
        if isinstance(resolved, UnsupportedAction):
            logger.info("Rejected %s for %s: unsupported", action.value, provider.value)
            return GatewayResult(status.HTTP_400_BAD_REQUEST, resolved.to_body())

        request_model: TriggerPayload | RunPayload
        if action is CicdAction.TRIGGER:
            request_model = _parse(TriggerPayload, payload)
            resolved.trigger_target(request_model)
        else:
            request_model = _parse(RunPayload, payload)

        credentials = self.vault.get(user_id, provider)
        built = resolved.build(action, request_model, credentials)

        if isinstance(built, NoCredentials):
            logger.info(
                "Skipped %s for %s: %s", action.value, provider.value, built.reason
            )
            return GatewayResult(status.HTTP_200_OK, built.to_body())
        if isinstance(built, UnsupportedAction):
            return GatewayResult(status.HTTP_400_BAD_REQUEST, built.to_body())

        response = await self.executor.execute(built)
        # Upstream error statuses and bodies are passed through untouched
        status_code = response.status_code if response.status_code >= 400 else status.HTTP_200_OK
        return GatewayResult(status_code, response.body)

    def list_credentials(self, user_id: str, payload: dict[str, Any]) -> GatewayResult:
        """List credential metadata, optionally filtered by provider."""
        if payload.get("provider"):
            _provider_from(payload, "provider required")
        request = _parse(CredentialListPayload, payload)
        rows = self.vault.list(user_id, request.provider)
        records = [
            CredentialRecord.model_validate(row).model_dump(mode="json") for row in rows
        ]
        return GatewayResult(status.HTTP_200_OK, {"credentials": records})

    def save_credentials(self, user_id: str, payload: dict[str, Any]) -> GatewayResult:
        """Upsert the full credential set for one provider."""
        missing = "provider and credentials required"
        provider = _provider_from(payload, missing)
        if not isinstance(payload.get("credentials"), dict):
            raise InvalidRequestError(missing)
        request = _parse(CredentialsPayload, payload)
        row = self.vault.save(user_id, provider, request.credentials)
        return GatewayResult(
            status.HTTP_200_OK,
            {"success": True, "credential": {"id": row.id, "provider": row.provider}},
        )

    def delete_credentials(self, user_id: str, payload: dict[str, Any]) -> GatewayResult:
        """Delete the credential row for one provider."""
        provider = _provider_from(payload, "provider required")
        self.vault.delete(user_id, provider)
        return GatewayResult(status.HTTP_200_OK, {"success": True})
