"""eBay Listings CLI — entry point.

Agent-friendly CLI for managing eBay offers and migrating live
listings from production into the sandbox.
"""

from __future__ import annotations

import logging

import typer

from ebay_listings.commands.auth_cmd import app as auth_app
from ebay_listings.commands.offers_cmd import app as offers_app
from ebay_listings.commands.policies_cmd import app as policies_app
from ebay_listings.commands.migrate_cmd import app as migrate_app

app = typer.Typer(
    name="ebay-listings",
    help="CLI tool for managing eBay listings across production and sandbox.",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(offers_app, name="offers")
app.add_typer(policies_app, name="policies")
app.add_typer(migrate_app, name="migrate")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """eBay Listings CLI — manage offers, policies, and sandbox migrations."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


if __name__ == "__main__":
    app()
