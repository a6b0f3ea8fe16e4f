"""CLI interface for clawprep.

Provides commands for:
- Preparing the gateway configuration before start, then handing off
- Showing the providers and default model of the current configuration
"""

import os
from pathlib import Path

import click
from pydantic import ValidationError

from clawprep import __version__
from clawprep.config import Settings, get_settings
from clawprep.logging import configure_logging, get_logger
from clawprep.orchestrator import StartupSummary, run_startup, summarize
from clawprep.store import LoadStatus, load_document

logger = get_logger(__name__)

RULE = "─" * 40


def _load_settings(config_dir: str | None) -> Settings | None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging()
        logger.error("settings_invalid", errors=exc.errors(include_url=False))
        return None
    if config_dir:
        settings = settings.model_copy(update={"config_dir": Path(config_dir)})
    configure_logging(json_format=settings.log_json, level=settings.log_level)
    return settings


def _echo_summary(summary: StartupSummary) -> None:
    click.echo("\nConfiguration Summary:")
    click.echo(RULE)
    for line in summary.lines():
        click.echo(f"   {line}")
    click.echo(RULE)


def _hand_off(command: tuple[str, ...]) -> None:
    click.echo(click.style(f"\nStarting: {' '.join(command)}\n", fg="green"))
    try:
        os.execvp(command[0], list(command))
    except OSError as exc:
        raise click.ClickException(f"Could not start {command[0]}: {exc}") from exc


@click.group()
@click.version_option(version=__version__, prog_name="clawprep")
def cli() -> None:
    """clawprep - OpenClaw startup configuration.

    Merges required gateway settings into the persisted configuration and
    registers a local Ollama server when one is configured.
    """
    pass


@cli.command(context_settings={"ignore_unknown_options": True})
@click.option(
    "--config-dir",
    "-d",
    default=None,
    help="Directory holding openclaw.json (overrides TEST_CONFIG_DIR).",
)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
def prepare(config_dir: str | None, command: tuple[str, ...]) -> None:
    """Prepare the configuration, then run COMMAND if given.

    Configuration errors are logged and never stop COMMAND from starting.
    """
    click.echo("OpenClaw Startup Configuration")
    click.echo("=" * 34)

    settings = _load_settings(config_dir)
    if settings is not None:
        summary = run_startup(settings)
        if summary is not None:
            _echo_summary(summary)

    if command:
        _hand_off(command)


@cli.command()
@click.option(
    "--config-dir",
    "-d",
    default=None,
    help="Directory holding openclaw.json (overrides TEST_CONFIG_DIR).",
)
def show(config_dir: str | None) -> None:
    """Show providers and the default model without changing anything."""
    settings = _load_settings(config_dir)
    if settings is None:
        raise click.ClickException("Invalid settings in environment.")

    loaded = load_document(settings.config_file)
    if loaded.status is LoadStatus.MISSING:
        click.echo(f"No configuration at {settings.config_file}")
        return
    if loaded.status is LoadStatus.INVALID:
        raise click.ClickException(
            f"Could not parse {settings.config_file}: {loaded.error}"
        )

    summary = summarize(loaded.tree, settings.config_file)
    click.echo(f"Configuration: {summary.config_file}")
    if not summary.lines():
        click.echo("No providers or default model configured.")
        return
    for line in summary.lines():
        click.echo(f"  {line}")
