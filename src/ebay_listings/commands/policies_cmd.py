"""CLI commands for business policies."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from ebay_listings.commands.auth_cmd import EnvOption, prompt_for_code
from ebay_listings.config import Environment, get_config
from ebay_listings.services.migration import EnvironmentStack, build_environment_stack
from ebay_listings.services.policies import POLICY_KEYS
from ebay_listings.utils.errors import handle_error
from ebay_listings.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="policies", help="Inspect and resolve business policies.")


def _build_stack(environment: Environment, verbose: bool = False) -> EnvironmentStack:
    return build_environment_stack(get_config(), environment, prompt=prompt_for_code, verbose=verbose)


@app.command("list")
def list_policies(
    env: EnvOption = Environment.SANDBOX,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List the first page of each policy type."""
    stack = _build_stack(env, verbose)
    try:
        rows = []
        for policy_type, (_, id_key) in POLICY_KEYS.items():
            for policy in stack.policies.list_policies(policy_type):
                rows.append({"type": policy_type, "id": policy.get(id_key, ""), "name": policy.get("name", "")})
        print_output(rows, output, columns=["type", "id", "name"], title=f"Policies ({env.value})")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()


@app.command("resolve")
def resolve_policies(
    env: EnvOption = Environment.SANDBOX,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Find or create the shipping, payment and return policies used for new listings."""
    stack = _build_stack(env, verbose)
    try:
        triple = stack.policies.resolve()
        print_output(triple, output, title=f"Resolved Policies ({env.value})")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        stack.close()
