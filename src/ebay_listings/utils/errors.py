"""Error types and structured error handling for agent-friendly output."""

from __future__ import annotations

import json
import sys

from rich.console import Console

console = Console(stderr=True)


class EbayListingsError(RuntimeError):
    """Base class for all errors raised by this package."""


class AuthenticationFailedError(EbayListingsError):
    """Token exchange or refresh failed."""


class ApiError(EbayListingsError):
    """The eBay API answered with a non-success status."""

    def __init__(self, status_code: int, body: str, method: str = "", path: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        target = f" {method} {path}" if method else ""
        super().__init__(f"API error (HTTP {status_code}){target}: {body}")


class NotFoundError(EbayListingsError):
    """No offer matches the given listing ID."""

    def __init__(self, listing_id: str) -> None:
        self.listing_id = listing_id
        super().__init__(f"No offer found for listing {listing_id}")


class PolicyResolutionError(EbayListingsError):
    """Business policies could not be read or created."""


class OfferCreationError(EbayListingsError):
    """A step of the inventory item -> offer -> publish sequence failed.

    ``sku`` is set once the inventory item exists, so callers can report
    the item left behind in the destination.
    """

    def __init__(self, stage: str, sku: str | None, cause: Exception) -> None:
        self.stage = stage
        self.sku = sku
        super().__init__(f"Offer creation failed at '{stage}': {cause}")


class MigrationAborted(EbayListingsError):
    """Pre-flight validation failed; no listing was touched."""


# Actionable hints keyed by error substring
_ERROR_HINTS: list[tuple[str, str]] = [
    ("invalid_grant", "Refresh token was rejected — delete the token file and run `ebay-listings auth login`"),
    ("401", "Token may be expired — run `ebay-listings auth refresh`"),
    ("token", "Token may be expired — run `ebay-listings auth refresh`"),
    ("unauthorized", "Token may be expired — run `ebay-listings auth refresh`"),
    ("429", "Rate limited — wait a moment and retry, or raise EBAY_MIGRATION_DELAY"),
    ("rate limit", "Rate limited — wait a moment and retry, or raise EBAY_MIGRATION_DELAY"),
    ("policy", "Check the business policies of the target account (`ebay-listings policies resolve`)"),
    ("unknown environment", "Use 'production' or 'sandbox'"),
    ("timeout", "Request timed out — try again or check network connectivity"),
    ("connection", "Connection error — check network connectivity"),
    ("no offer found", "The listing does not exist in this environment — verify the listing ID"),
    ("25002", "eBay rejected a field of the listing — check category, condition and aspects"),
]


def _get_hint(error_message: str) -> str | None:
    """Match an error message to an actionable hint."""
    lower = error_message.lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern.lower() in lower:
            return hint
    return None


def _get_code(error: Exception) -> str:
    """Determine an error code from the exception type, then the message."""
    if isinstance(error, MigrationAborted):
        return "MIGRATION_ABORTED"
    if isinstance(error, AuthenticationFailedError):
        return "AUTH_ERROR"
    if isinstance(error, PolicyResolutionError):
        return "POLICY_ERROR"
    if isinstance(error, NotFoundError):
        return "NOT_FOUND"
    if isinstance(error, ApiError):
        if error.status_code == 401:
            return "AUTH_ERROR"
        if error.status_code == 404:
            return "NOT_FOUND"
        if error.status_code == 429:
            return "RATE_LIMITED"

    message = str(error).lower()
    if "401" in message or "unauthorized" in message:
        return "AUTH_ERROR"
    if "429" in message or "rate limit" in message:
        return "RATE_LIMITED"
    if "timeout" in message:
        return "TIMEOUT"
    if "connection" in message:
        return "CONNECTION_ERROR"
    return "RUNTIME_ERROR"


def handle_error(error: Exception) -> None:
    """Handle an error with structured output to stdout and human-readable output to stderr.

    Outputs a JSON error object to stdout for agent consumption:
    {"error": true, "code": "AUTH_ERROR", "message": "...", "hint": "..."}

    Also prints a human-readable error to stderr.
    """
    message = str(error)
    hint = _get_hint(message)

    error_obj: dict[str, object] = {
        "error": True,
        "code": _get_code(error),
        "message": message,
    }
    if isinstance(error, ApiError):
        error_obj["status_code"] = error.status_code
    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout)
    sys.stdout.write("\n")

    # Human-readable to stderr
    console.print(f"[red]Error:[/red] {message}")
    if error.__cause__ is not None:
        console.print(f"[dim]Caused by: {error.__cause__}[/dim]")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
