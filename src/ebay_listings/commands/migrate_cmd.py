"""CLI commands for cross-environment listing migration."""

from __future__ import annotations

import signal
import threading
from typing import Annotated

import typer
from rich.console import Console

from ebay_listings.commands.auth_cmd import prompt_for_code
from ebay_listings.config import Environment, get_config
from ebay_listings.models.migration import MigrationOutcome
from ebay_listings.services.migration import (
    EnvironmentStack,
    MigrationOrchestrator,
    build_environment_stack,
)
from ebay_listings.utils.errors import handle_error
from ebay_listings.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="migrate", help="Copy live listings from one environment into another.")

RESULT_COLUMNS = ["title", "sourceListingId", "targetListingId", "status", "error"]


def _build_stacks(
    source: Environment, target: Environment, verbose: bool = False
) -> tuple[EnvironmentStack, EnvironmentStack]:
    config = get_config()
    return (
        build_environment_stack(config, source, prompt=prompt_for_code, verbose=verbose),
        build_environment_stack(config, target, prompt=prompt_for_code, verbose=verbose),
    )


def _report(outcome: MigrationOutcome, output: OutputFormat) -> None:
    """Print per-listing rows, the totals, and any inventory items left behind."""
    print_output(outcome.rows(), output, columns=RESULT_COLUMNS, title="Migration Results")
    console.print(
        f"Enumerated: {outcome.enumerated}  "
        f"[green]Success: {outcome.success_count}[/green]  "
        f"[red]Failed: {outcome.failure_count}[/red]"
    )
    if outcome.cancelled:
        console.print(
            f"[yellow]Cancelled after {outcome.processed} of {outcome.enumerated} listings.[/yellow]"
        )
    if outcome.orphaned_skus:
        console.print(
            "[yellow]Warning:[/yellow] these inventory items were created in the target but their "
            "offers were not published. Remove them or re-run `offers create`:"
        )
        for sku in outcome.orphaned_skus:
            console.print(f"  {sku}")


@app.command("run")
def run_migration(
    source: Annotated[Environment, typer.Option("--source", case_sensitive=False, help="Environment to read listings from")] = Environment.PRODUCTION,
    target: Annotated[Environment, typer.Option("--target", "-t", case_sensitive=False, help="Environment to create listings in")] = Environment.SANDBOX,
    page_size: Annotated[int | None, typer.Option("--page-size", min=1, help="Listings to migrate (first page only)")] = None,
    delay: Annotated[float | None, typer.Option("--delay", min=0.0, help="Seconds between listings")] = None,
    save: Annotated[str | None, typer.Option("--save", "-s", help="Save enumerated source listings to a JSON file")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="List what would be migrated without creating anything")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Recreate the source environment's active listings in the target.

    Policy IDs are re-resolved in the target. Failed listings are counted
    and the run continues. Press Ctrl+C to stop before the next listing.
    """
    if source == target:
        console.print("[red]--source and --target must differ[/red]")
        raise typer.Exit(1)

    settings = get_config().settings
    source_stack, target_stack = _build_stacks(source, target, verbose)
    orchestrator = MigrationOrchestrator(
        source_stack,
        target_stack,
        page_size=settings.migration_page_size if page_size is None else page_size,
        delay=settings.migration_delay if delay is None else delay,
    )
    cancel = threading.Event()

    def _stop(signum, frame) -> None:
        console.print("[yellow]Stopping after the current listing...[/yellow]")
        cancel.set()

    try:
        # Pre-flight may prompt for an authorization code; Ctrl+C there still interrupts
        orchestrator.validate_tokens()
        previous_handler = signal.signal(signal.SIGINT, _stop)
        try:
            outcome = orchestrator.migrate(dry_run=dry_run, cancel=cancel, save_path=save, validate=False)
        finally:
            signal.signal(signal.SIGINT, previous_handler)
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        source_stack.close()
        target_stack.close()

    if dry_run:
        console.print(
            f"[yellow]DRY RUN:[/yellow] Would migrate {outcome.enumerated} listings "
            f"from {source.value} to {target.value}"
        )
        return

    _report(outcome, output)
