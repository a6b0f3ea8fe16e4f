"""Register a local Ollama server as a model provider.

Provisioning only happens when both a base URL and an API key are given.
The provider entry always ends up speaking ``openai-completions`` without
an auth header; Ollama answers ``openai-responses`` requests with empty
bodies. Keys a user added to the entry by hand are kept, models are only
ever appended, and a requested model becomes the default selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from clawprep.config import DEFAULT_CONTEXT_WINDOW
from clawprep.defaults import OLLAMA_PROVIDER
from clawprep.logging import get_logger
from clawprep.schemas import DefaultModelSelector, ModelEntry, ProviderEntry

logger = get_logger(__name__)


class ProvisionStatus(str, Enum):
    """Outcome of a provisioning attempt."""

    PROVISIONED = "provisioned"
    MISSING_API_KEY = "missing_api_key"
    MISSING_BASE_URL = "missing_base_url"
    NOT_CONFIGURED = "not_configured"


@dataclass
class ProvisionResult:
    """What provisioning changed in the tree."""

    status: ProvisionStatus
    provider: str | None = None
    model_added: bool = False
    default_model: str | None = None
    previous_model: str | None = None
    default_model_changed: bool = False

    @property
    def provisioned(self) -> bool:
        return self.status is ProvisionStatus.PROVISIONED


def _child_mapping(parent: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``parent[key]``, replacing it with ``{}`` unless it is a mapping."""
    if not isinstance(parent.get(key), dict):
        parent[key] = {}
    return parent[key]


def build_model_entry(model_id: str, context_window: int) -> dict[str, Any]:
    """Model entry for an Ollama model tag."""
    return ModelEntry(
        id=model_id,
        display_name=f"Ollama - {model_id}",
        context_window=context_window,
    ).to_config()


def build_provider_entry(
    existing: Any,
    base_url: str,
    api_key: str,
) -> dict[str, Any]:
    """Required connection fields followed by any other keys already present.

    The required fields are written first and never taken from ``existing``;
    everything else on the existing entry, including its model list, is
    carried over in its original order.
    """
    required = ProviderEntry(base_url=base_url, api_key=api_key).required_fields()
    entry = dict(required)
    if isinstance(existing, dict):
        entry.update((key, value) for key, value in existing.items() if key not in required)
    return entry


def add_model(entry: dict[str, Any], model_id: str, context_window: int) -> bool:
    """Append a model to the provider entry unless its id is already listed.

    Returns True when a model was appended. Existing entries are untouched.
    """
    models = entry.get("models")
    if not isinstance(models, list):
        models = []
    if any(isinstance(model, dict) and model.get("id") == model_id for model in models):
        return False
    entry["models"] = [*models, build_model_entry(model_id, context_window)]
    return True


def select_default_model(tree: dict[str, Any], primary: str) -> str | None:
    """Point ``agents.defaults.model.primary`` at ``primary``.

    Returns the previous primary selection. Nothing is written when the
    selection already matches. Unlike a plain overwrite of the selector,
    other keys such as ``fallbacks`` are kept when ``primary`` changes.
    """
    defaults = _child_mapping(_child_mapping(tree, "agents"), "defaults")
    current = defaults.get("model")
    previous = current.get("primary") if isinstance(current, dict) else None
    if previous != primary:
        selector = dict(current) if isinstance(current, dict) else {}
        selector.update(DefaultModelSelector(primary=primary).to_config())
        defaults["model"] = selector
    return previous


def provision_provider(
    tree: dict[str, Any],
    base_url: str | None,
    api_key: str | None,
    model_id: str | None = None,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
) -> ProvisionResult:
    """Add or refresh the Ollama provider in ``tree``.

    Without both ``base_url`` and ``api_key`` nothing is written, and a
    provider entry left by an earlier run stays as it is.
    """
    if not base_url or not api_key:
        if base_url:
            status = ProvisionStatus.MISSING_API_KEY
        elif api_key:
            status = ProvisionStatus.MISSING_BASE_URL
        else:
            status = ProvisionStatus.NOT_CONFIGURED
        return ProvisionResult(status=status)

    logger.info(
        "provider_configuring",
        provider=OLLAMA_PROVIDER,
        base_url=base_url,
        model=model_id or "(user will select in UI)",
        context_window=context_window,
    )

    providers = _child_mapping(_child_mapping(tree, "models"), "providers")
    entry = build_provider_entry(providers.get(OLLAMA_PROVIDER), base_url, api_key)
    providers[OLLAMA_PROVIDER] = entry

    result = ProvisionResult(status=ProvisionStatus.PROVISIONED, provider=OLLAMA_PROVIDER)
    if not model_id:
        return result

    result.model_added = add_model(entry, model_id, context_window)
    if result.model_added:
        logger.info("model_added", provider=OLLAMA_PROVIDER, model=model_id)

    desired = DefaultModelSelector.for_model(OLLAMA_PROVIDER, model_id).primary
    result.previous_model = select_default_model(tree, desired)
    result.default_model = desired
    result.default_model_changed = result.previous_model != desired
    if result.default_model_changed:
        if result.previous_model:
            logger.info("default_model_updated", previous=result.previous_model, current=desired)
        else:
            logger.info("default_model_set", current=desired)
    return result
