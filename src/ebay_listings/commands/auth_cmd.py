"""CLI commands for authentication management."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from ebay_listings.auth import AuthenticationService, parse_authorization_code
from ebay_listings.config import Environment, get_config
from ebay_listings.token_store import RefreshTokenStore
from ebay_listings.utils.errors import handle_error
from ebay_listings.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Manage OAuth tokens per environment.")

EnvOption = Annotated[
    Environment,
    typer.Option("--env", "-e", case_sensitive=False, help="Environment (production or sandbox)"),
]


def prompt_for_code(url: str) -> str:
    """Ask the user to authorize in a browser and paste the resulting code."""
    console.print("Please visit the following URL in your browser to authorize the application:")
    console.print(url, style="bold", soft_wrap=True)
    console.print("After authorization you will be redirected to your redirect URI.")
    return typer.prompt("Paste the authorization code (or the full redirect URL)")


def _build_auth(environment: Environment) -> tuple[AuthenticationService, RefreshTokenStore]:
    config = get_config()
    store = RefreshTokenStore(environment, config.settings.token_dir or ".")
    auth = AuthenticationService(
        config.get_credential(environment),
        config.get_environment(environment),
        store=store,
        prompt=prompt_for_code,
    )
    return auth, store


@app.command()
def login(
    env: EnvOption = Environment.SANDBOX,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Authenticate (interactively if no refresh token is known) and display token status."""
    auth, _ = _build_auth(env)

    try:
        console.print(f"Authenticating against [bold]{env.value}[/bold]...", style="yellow")
        auth.get_access_token()
        status = auth.get_status()
        result = {
            "environment": env.value,
            "status": "authenticated",
            "expires_at": str(status.expires_at),
            "seconds_remaining": status.seconds_remaining,
        }
        print_output(result, output, title="Authentication")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        auth.close()


@app.command()
def status(
    env: EnvOption = Environment.SANDBOX,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show token status and whether a refresh token is stored."""
    auth, store = _build_auth(env)

    token_status = auth.get_status()
    result = {
        "environment": env.value,
        "has_token": token_status.has_token,
        "is_expired": token_status.is_expired,
        "has_refresh_token": token_status.has_refresh_token or store.path.exists(),
        "token_file": str(store.path),
        "seconds_remaining": token_status.seconds_remaining or 0,
    }
    print_output(result, output, title="Token Status")
    auth.close()


@app.command()
def refresh(
    env: EnvOption = Environment.SANDBOX,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Force refresh the access token."""
    auth, _ = _build_auth(env)

    try:
        console.print(f"Force refreshing token for [bold]{env.value}[/bold]...", style="yellow")
        auth.get_access_token(force_refresh=True)
        status = auth.get_status()
        result = {
            "environment": env.value,
            "status": "refreshed",
            "expires_at": str(status.expires_at),
            "seconds_remaining": status.seconds_remaining,
        }
        print_output(result, output, title="Token Refreshed")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        auth.close()


@app.command()
def url(env: EnvOption = Environment.SANDBOX) -> None:
    """Print the consent URL for the authorization-code flow."""
    auth, _ = _build_auth(env)
    typer.echo(auth.get_authorization_url())
    auth.close()


@app.command()
def exchange(
    code: Annotated[str, typer.Option("--code", "-c", help="Authorization code or full redirect URL")],
    env: EnvOption = Environment.SANDBOX,
) -> None:
    """Exchange an authorization code for a refresh token and store it."""
    auth, store = _build_auth(env)

    try:
        auth.exchange_code_for_refresh_token(parse_authorization_code(code))
        console.print(f"[green]Refresh token for {env.value} saved to {store.path}[/green]")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        auth.close()


@app.command()
def logout(env: EnvOption = Environment.SANDBOX) -> None:
    """Delete the stored refresh token."""
    config = get_config()
    store = RefreshTokenStore(env, config.settings.token_dir or ".")
    if store.delete():
        console.print(f"Removed {store.path}")
    else:
        console.print(f"[dim]No refresh token stored for {env.value}.[/dim]")
