"""Main CLI implementation using Typer."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from provisioner.backend import BackendUnavailableError
from provisioner.cli.commands import (
    run_cleanup,
    run_setup,
    show_plan,
    show_status,
    validate_config,
)
from provisioner.engine.config import ConfigManager
from provisioner.models.resource import ResourceKind
from provisioner.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="provisionctl",
    help="BookVerse provisioner - idempotent setup of OIDC integrations and static addresses",
    add_completion=False,
)

# Console for rich output
console = Console()


def _load_manager(config: Optional[Path]) -> ConfigManager:
    manager = ConfigManager(config_path=config)
    asyncio.run(manager.load())
    setup_logging(manager.config.log_level)
    return manager


def _run_cli_command(handler: Callable[..., int], config: Optional[Path], **kwargs: Any):
    """Helper to run a CLI command with loaded configuration and error handling."""
    try:
        manager = _load_manager(config)
        exit_code = handler(manager, **kwargs)
    except (ValidationError, ValueError, BackendUnavailableError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if exit_code:
        raise typer.Exit(exit_code)


def _parse_kind(value: Optional[str]) -> Optional[ResourceKind]:
    if value is None:
        return None
    for kind in ResourceKind:
        if value.lower() == kind.value.lower():
            return kind
    choices = ", ".join(k.value for k in ResourceKind)
    raise typer.BadParameter(f"Unknown kind {value!r}, expected one of: {choices}")


ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to provisioner configuration file"
)


@app.command("setup")
def setup_command(
    only: Optional[str] = typer.Option(
        None, "--only", help="Reconcile only one resource kind"
    ),
    config: Optional[Path] = ConfigOption,
):
    """Create every planned resource that does not exist yet."""
    _run_cli_command(run_setup, config=config, only=_parse_kind(only))


@app.command("status")
def status_command(
    config: Optional[Path] = ConfigOption,
):
    """Show which planned resources exist."""
    _run_cli_command(show_status, config=config)


@app.command("cleanup")
def cleanup_command(
    kind: Optional[str] = typer.Option(
        None, "--kind", help="Delete only one resource kind"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Delete without confirmation"
    ),
    config: Optional[Path] = ConfigOption,
):
    """Delete planned resources, dependents first."""
    parsed = _parse_kind(kind)
    if not force:
        target = parsed.value if parsed else "all planned"
        confirm = typer.confirm(f"Delete {target} resources?")
        if not confirm:
            raise typer.Abort()
    _run_cli_command(run_cleanup, config=config, kind=parsed)


@app.command("plan")
def plan_command(
    config: Optional[Path] = ConfigOption,
):
    """Print the resources setup would reconcile, in order."""
    _run_cli_command(show_plan, config=config)


# Config subcommands
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")


@config_app.command("validate")
def config_validate_command(
    config: Optional[Path] = ConfigOption,
):
    """Validate configuration and environment."""
    _run_cli_command(validate_config, config=config)


def main():
    """Main entry point for CLI."""
    app()
