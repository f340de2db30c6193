"""CLI commands for offer (listing) management."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from ebay_listings.commands.auth_cmd import EnvOption, prompt_for_code
from ebay_listings.config import Environment, get_config
from ebay_listings.models.offers import Offer
from ebay_listings.services.migration import EnvironmentStack, build_environment_stack
from ebay_listings.utils.errors import handle_error
from ebay_listings.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="offers", help="Create, inspect, update and delete offers.")

OFFER_COLUMNS = ["listing_id", "title", "price", "currency", "quantity", "category_id", "condition"]


def _build_stack(environment: Environment, verbose: bool = False) -> EnvironmentStack:
    return build_environment_stack(get_config(), environment, prompt=prompt_for_code, verbose=verbose)


def _load_offer(path: str) -> Offer:
    """Read an offer definition from a JSON file."""
    try:
        with open(path) as f:
            return Offer.model_validate(json.load(f))
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Invalid offer file {path}:[/red] {e}")
        raise typer.Exit(1)


def _not_found(listing_id: str) -> None:
    console.print(f"[yellow]No offer found for listing {listing_id}[/yellow]")
    raise typer.Exit(1)


@app.command("list")
def list_offers(
    env: EnvOption = Environment.PRODUCTION,
    page_size: Annotated[int, typer.Option("--page-size", min=1, help="Inventory items per page")] = 100,
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="Page number (1-based)")] = 1,
    all_pages: Annotated[bool, typer.Option("--all", help="Walk every inventory page")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List published offers."""
    stack = _build_stack(env, verbose)
    try:
        if all_pages:
            offers = stack.offers.get_all_active_offers(page_size)
        else:
            offers = stack.offers.get_active_offers(page_size, page)
        console.print(f"[dim]Found {len(offers)} active offers[/dim]")
        print_output(offers, output, columns=OFFER_COLUMNS, title=f"Active Offers ({env.value})")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()


@app.command("get")
def get_offer(
    listing_id: Annotated[str, typer.Option("--listing-id", "-l", help="Listing ID")],
    env: EnvOption = Environment.PRODUCTION,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Show a single offer."""
    stack = _build_stack(env, verbose)
    try:
        offer = stack.offers.get_offer(listing_id)
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()

    if offer is None:
        _not_found(listing_id)
    print_output(offer, output, title=f"Offer {listing_id}")


@app.command("create")
def create_offer(
    file: Annotated[str, typer.Option("--file", "-f", help="JSON file with the offer definition")],
    env: EnvOption = Environment.SANDBOX,
    resolve_policies: Annotated[
        bool,
        typer.Option("--resolve-policies/--keep-policies", help="Replace policy IDs with ones from this environment"),
    ] = True,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create and publish an offer from a JSON file."""
    offer = _load_offer(file)
    if dry_run:
        console.print("[yellow]DRY RUN:[/yellow] Would create offer:")
        print_output(offer, output, title="Offer [DRY RUN]")
        return

    stack = _build_stack(env, verbose)
    try:
        if resolve_policies or offer.policies is None:
            offer = offer.with_policies(stack.policies.resolve())
        listing_id = stack.offers.create_offer(offer)
        print_output({"listing_id": listing_id, "title": offer.title}, output, title="Offer Created")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()


@app.command("update")
def update_offer(
    listing_id: Annotated[str, typer.Option("--listing-id", "-l", help="Listing ID to update")],
    file: Annotated[str, typer.Option("--file", "-f", help="JSON file with the updated offer")],
    env: EnvOption = Environment.SANDBOX,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Update an existing offer and re-publish it."""
    offer = _load_offer(file)
    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would update listing {listing_id}:")
        print_output(offer, output, title="Offer Update [DRY RUN]")
        return

    stack = _build_stack(env, verbose)
    try:
        updated = stack.offers.update_offer(listing_id, offer)
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()

    if not updated:
        _not_found(listing_id)
    print_output({"listing_id": listing_id, "status": "updated"}, output, title="Offer Updated")


@app.command("delete")
def delete_offer(
    listing_id: Annotated[str, typer.Option("--listing-id", "-l", help="Listing ID to delete")],
    env: EnvOption = Environment.SANDBOX,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be deleted without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Delete an offer and its inventory item."""
    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would delete listing {listing_id} in {env.value}")
        return

    stack = _build_stack(env, verbose)
    try:
        deleted = stack.offers.delete_offer(listing_id)
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()

    if not deleted:
        _not_found(listing_id)
    print_output({"listing_id": listing_id, "status": "deleted"}, output, title="Offer Deleted")
