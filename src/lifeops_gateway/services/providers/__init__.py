"""Provider adapter registry.

One adapter instance per provider, selected once per request by
:func:`get_adapter`.
"""

from __future__ import annotations

from lifeops_gateway.schemas.cicd import CicdAction, Provider

from .base import (
    AdapterResult,
    NoCredentials,
    ProviderAdapter,
    ProviderRequest,
    UnsupportedAction,
)
from .circleci import CircleCIAdapter
from .github_actions import GitHubActionsAdapter
from .jenkins import JenkinsAdapter

_ADAPTERS: dict[Provider, ProviderAdapter] = {
    adapter.provider: adapter
    for adapter in (GitHubActionsAdapter(), CircleCIAdapter(), JenkinsAdapter())
}


def get_adapter(provider: Provider) -> ProviderAdapter:
    """Return the adapter registered for ``provider``."""
    return _ADAPTERS[provider]


def registered_adapters() -> dict[Provider, ProviderAdapter]:
    """Return a copy of the registry keyed by provider."""
    return dict(_ADAPTERS)


def resolve_adapter(
    provider: Provider, action: CicdAction
) -> ProviderAdapter | UnsupportedAction:
    """Return the adapter for ``provider`` if it implements ``action``."""
    adapter = get_adapter(provider)
    if not adapter.supports(action):
        return UnsupportedAction(provider=provider, action=action)
    return adapter


__all__ = [
    "AdapterResult",
    "CircleCIAdapter",
    "GitHubActionsAdapter",
    "JenkinsAdapter",
    "NoCredentials",
    "ProviderAdapter",
    "ProviderRequest",
    "UnsupportedAction",
    "get_adapter",
    "registered_adapters",
    "resolve_adapter",
]
