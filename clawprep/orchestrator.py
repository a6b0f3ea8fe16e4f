"""Startup pipeline: load, apply defaults, provision, save, summarize.

The run is one pass over one file. ``run_startup`` is the entry point for
the container hook; it never raises, because the gateway must start even
when its configuration could not be updated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from clawprep.config import Settings
from clawprep.defaults import AGENT_DEFAULTS, GATEWAY_DEFAULTS
from clawprep.errors import ConfigWriteError
from clawprep.logging import bind_context, clear_context, get_logger
from clawprep.merge import force_merge, preserve_merge
from clawprep.provisioner import ProvisionResult, ProvisionStatus, provision_provider
from clawprep.store import LoadStatus, ensure_directory, load_document, save_document

logger = get_logger(__name__)

_MISSING_VARS = {
    ProvisionStatus.MISSING_API_KEY: "OLLAMA_API_KEY",
    ProvisionStatus.MISSING_BASE_URL: "OLLAMA_BASE_URL",
}


@dataclass
class StartupSummary:
    """Resulting state of the configuration after a run."""

    config_file: Path
    providers: list[str] = field(default_factory=list)
    default_model: str | None = None
    load_status: LoadStatus | None = None
    provision: ProvisionResult | None = None

    def lines(self) -> list[str]:
        """Human-readable summary block."""
        out = []
        if self.providers:
            out.append(f"Providers: {', '.join(self.providers)}")
        if self.default_model:
            out.append(f"Default Model: {self.default_model}")
        return out


def summarize(tree: dict[str, Any], config_file: Path) -> StartupSummary:
    """Read provider names and the default model out of ``tree``."""
    models = tree.get("models")
    providers = models.get("providers") if isinstance(models, dict) else None
    agents = tree.get("agents")
    defaults = agents.get("defaults") if isinstance(agents, dict) else None
    selector = defaults.get("model") if isinstance(defaults, dict) else None
    primary = selector.get("primary") if isinstance(selector, dict) else None
    return StartupSummary(
        config_file=config_file,
        providers=list(providers) if isinstance(providers, dict) else [],
        default_model=primary or None,
    )


def _log_load(result_status: LoadStatus, config_file: Path, error: str | None) -> None:
    if result_status is LoadStatus.LOADED:
        logger.info("config_loaded", path=str(config_file))
    elif result_status is LoadStatus.MISSING:
        logger.info("config_missing", path=str(config_file), action="creating new one")
    else:
        logger.warning(
            "config_parse_failed",
            path=str(config_file),
            error=error,
            action="starting fresh",
        )


def _log_provision(result: ProvisionResult) -> None:
    if result.provisioned:
        logger.info("provider_configured", provider=result.provider)
    elif result.status in _MISSING_VARS:
        logger.warning(
            "provider_partially_configured",
            missing=_MISSING_VARS[result.status],
            hint="Set both OLLAMA_BASE_URL and OLLAMA_API_KEY to enable Ollama integration",
        )
    else:
        logger.info(
            "provider_not_configured",
            hint="Set OLLAMA_BASE_URL and OLLAMA_API_KEY to enable Ollama integration",
        )


def prepare_config(settings: Settings) -> StartupSummary:
    """Run the full pipeline against ``settings.config_file``.

    Raises:
        ConfigWriteError: If the directory or file cannot be written.
    """
    config_dir = settings.config_dir
    config_file = settings.config_file

    try:
        if ensure_directory(config_dir):
            logger.info("config_dir_created", path=str(config_dir))
    except OSError as exc:
        raise ConfigWriteError(config_dir, exc) from exc

    loaded = load_document(config_file)
    _log_load(loaded.status, config_file, loaded.error)
    tree = loaded.tree

    force_merge(tree, GATEWAY_DEFAULTS)
    logger.info("gateway_configured")

    preserve_merge(tree, AGENT_DEFAULTS)
    logger.info("agent_tools_configured")

    provision = provision_provider(
        tree,
        base_url=settings.ollama_base_url,
        api_key=settings.ollama_api_key,
        model_id=settings.ollama_model,
        context_window=settings.ollama_context_window,
    )
    _log_provision(provision)

    try:
        save_document(config_file, tree)
    except OSError as exc:
        raise ConfigWriteError(config_file, exc) from exc
    logger.info("config_saved", path=str(config_file))

    summary = summarize(tree, config_file)
    summary.load_status = loaded.status
    summary.provision = provision
    return summary


def run_startup(settings: Settings) -> StartupSummary | None:
    """Run ``prepare_config`` and turn any failure into a logged no-op.

    Returns None when the run failed; the existing file, if any, is then
    left for the gateway to use as it is.
    """
    clear_context()
    bind_context(config_file=str(settings.config_file))
    try:
        return prepare_config(settings)
    except Exception:
        logger.exception(
            "startup_config_failed",
            action="continuing with existing/default configuration",
        )
        return None
    finally:
        clear_context()
