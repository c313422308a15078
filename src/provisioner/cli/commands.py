"""Command implementations for CLI."""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from provisioner.engine.batch import BatchReconciler, BatchSummary
from provisioner.engine.cleanup import CleanupOutcome, remove_resources
from provisioner.engine.config import ConfigManager
from provisioner.engine.plan import build_plan
from provisioner.engine.reconciler import Reconciler, RetryPolicy
from provisioner.models.resource import ReconciliationResult, ReconcileState, ResourceKind
from provisioner.providers import ProviderRegistry, ProviderStatus


console = Console()

STATE_STYLES = {
    ReconcileState.CREATED: ("[green]✓[/green]", "Created"),
    ReconcileState.ALREADY_EXISTS: ("[yellow]●[/yellow]", "Already exists"),
    ReconcileState.FAILED_TERMINAL: ("[red]✗[/red]", "Rejected"),
    ReconcileState.FAILED_EXHAUSTED: ("[red]✗[/red]", "Retries exhausted"),
}

STATUS_STYLES = {
    ProviderStatus.PRESENT: "[green]present[/green]",
    ProviderStatus.ABSENT: "[red]absent[/red]",
    ProviderStatus.UNKNOWN: "[yellow]not found[/yellow]",
}


@asynccontextmanager
async def _registry(manager: ConfigManager):
    """Initialized provider registry whose clients are closed on exit."""
    registry = ProviderRegistry(tokens=manager.tokens())
    try:
        await registry.initialize(manager.config)
        yield registry
    finally:
        await registry.close()


def _format_result(result: ReconciliationResult) -> str:
    icon, label = STATE_STYLES[result.state]
    line = f"{icon} {result.spec.describe()}: {label}"
    if result.skipped:
        line += " (skipped, parent failed)"
    elif result.attempts:
        line += f" (attempts: {result.attempts})"
    return line


def print_summary(summary: BatchSummary):
    """Print one line per resource and the count summary."""
    for result in summary.results:
        console.print(_format_result(result))
        if not result.succeeded and result.last_error and not result.skipped:
            if result.last_error.body:
                console.print(f"    Response body: {escape(result.last_error.body)}")
            elif result.last_error.message:
                console.print(f"    {escape(result.last_error.message)}")

    counts = summary.counts()
    console.print()
    console.print(
        f"[bold]Summary[/bold]: {counts['created']} created, "
        f"{counts['already_exists']} already existed, "
        f"{counts['failed']} failed ({counts['skipped']} skipped) "
        f"of {counts['total']}"
    )


def run_setup(manager: ConfigManager, only: Optional[ResourceKind] = None) -> int:
    """Reconcile every planned resource. Returns the process exit status."""
    config = manager.config
    specs = build_plan(config, only=only)
    if not specs:
        console.print("[yellow]Nothing to provision[/yellow]")
        return 0

    async def _run() -> Tuple[BatchSummary, Dict[str, str]]:
        async with _registry(manager) as registry:
            reconciler = Reconciler(registry, policy=RetryPolicy.from_config(config.retry))
            summary = await BatchReconciler(reconciler).run(specs)
            addresses = {}
            for result in summary.results:
                if result.succeeded and result.spec.kind == ResourceKind.STATIC_ADDRESS:
                    details = await reconciler.details(result.spec)
                    if details.get("address"):
                        addresses[result.spec.name] = details["address"]
            return summary, addresses

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Reconciling {len(specs)} resources...", total=None)
        summary, addresses = asyncio.run(_run())
        progress.update(task, completed=True)

    print_summary(summary)
    if addresses:
        console.print()
        console.print("[bold]Static IPs configured[/bold]:")
        for name, address in addresses.items():
            console.print(f"  {name} → {address}")
    return summary.exit_code


def show_status(manager: ConfigManager) -> int:
    """Check every planned resource without creating anything."""
    specs = build_plan(manager.config)

    async def _run() -> List[Tuple[ProviderStatus, Dict[str, str]]]:
        async with _registry(manager) as registry:
            reconciler = Reconciler(registry)
            rows = []
            for spec in specs:
                status = await reconciler.check(spec)
                details = await reconciler.details(spec) if status == ProviderStatus.PRESENT else {}
                rows.append((status, details))
            return rows

    rows = asyncio.run(_run())
    statuses = [status for status, _ in rows]

    table = Table(title=f"Resources for {manager.config.project_key}")
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Parent", style="dim")
    table.add_column("Status")
    table.add_column("Address")

    for spec, (status, details) in zip(specs, rows):
        table.add_row(
            spec.kind.value, spec.name, spec.parent_key or "", STATUS_STYLES[status],
            details.get("address", ""),
        )

    console.print(table)
    present = sum(1 for s in statuses if s == ProviderStatus.PRESENT)
    console.print(f"[bold]Resources[/bold]: {present}/{len(specs)} present")
    return 0


def run_cleanup(manager: ConfigManager, kind: Optional[ResourceKind] = None) -> int:
    """Delete planned resources, children first."""
    specs = build_plan(manager.config, only=kind)

    async def _run() -> List[CleanupOutcome]:
        async with _registry(manager) as registry:
            return await remove_resources(registry, specs)

    outcomes = asyncio.run(_run())
    for outcome in outcomes:
        label = outcome.spec.describe()
        if outcome.error:
            console.print(f"[red]✗[/red] {label}: {escape(outcome.error)}")
        elif outcome.deleted:
            console.print(f"[green]✓[/green] {label}: deleted")
        else:
            console.print(f"[yellow]●[/yellow] {label}: already absent")

    failed = sum(1 for o in outcomes if not o.ok)
    console.print(f"[bold]Cleanup[/bold]: {len(outcomes) - failed}/{len(outcomes)} succeeded")
    return 1 if failed else 0


def show_plan(manager: ConfigManager) -> int:
    """Print the derived plan."""
    table = Table(title="Provisioning plan")
    table.add_column("#", justify="right")
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Parent", style="dim")

    for index, spec in enumerate(build_plan(manager.config), start=1):
        table.add_row(str(index), spec.kind.value, spec.name, spec.parent_key or "")

    console.print(table)
    return 0


def validate_config(manager: ConfigManager) -> int:
    """Report on the loaded configuration."""
    config = manager.config
    tokens = manager.tokens()
    console.print("[green]✓[/green] Configuration is valid")
    console.print(f"  Project key: {config.project_key}")
    console.print(f"  JFrog URL: {config.jfrog.url}")
    console.print(f"  GCP project: {config.gcp.project_id if config.gcp else 'not configured'}")
    console.print(f"  Services: {len(config.services)}")
    console.print(f"  Static addresses: {len(config.static_addresses) if config.gcp else 0}")

    if "jfrog" not in tokens:
        console.print("[yellow]![/yellow] JFROG_ADMIN_TOKEN is not set")
    if config.gcp and "gcp" not in tokens:
        console.print("[yellow]![/yellow] GCP_ACCESS_TOKEN is not set")
    return 0
