"""Migration service — recreate live listings of one environment in another.

Typically production -> sandbox. Business policy IDs differ per environment,
so listings are re-filed against policies resolved in the target.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable

from rich.console import Console

from ebay_listings.auth import AuthenticationService, PromptForCode
from ebay_listings.client import EbayApiClient
from ebay_listings.config import Config, Environment
from ebay_listings.models.migration import ItemResult, MigrationOutcome
from ebay_listings.models.offers import Offer, PolicyTriple
from ebay_listings.models.policies import DefaultPolicyTemplate
from ebay_listings.services.offers import OfferService
from ebay_listings.services.policies import PolicyResolver
from ebay_listings.token_store import RefreshTokenStore
from ebay_listings.utils.errors import MigrationAborted, OfferCreationError

logger = logging.getLogger(__name__)
console = Console(stderr=True)


class EnvironmentStack:
    """Auth, client and services bound to a single environment."""

    def __init__(
        self,
        environment: Environment,
        auth: AuthenticationService,
        client: EbayApiClient,
        offers: OfferService,
        policies: PolicyResolver,
    ) -> None:
        self.environment = environment
        self.auth = auth
        self.client = client
        self.offers = offers
        self.policies = policies

    def close(self) -> None:
        self.client.close()


def build_environment_stack(
    config: Config,
    environment: str | Environment,
    prompt: PromptForCode | None = None,
    verbose: bool = False,
    defaults: DefaultPolicyTemplate | None = None,
) -> EnvironmentStack:
    """Wire up a fresh, unshared service graph for one environment."""
    env = Environment.parse(environment)
    profile = config.get_environment(env)
    marketplace_id = config.settings.marketplace_id

    store = RefreshTokenStore(env, config.settings.token_dir or ".")
    auth = AuthenticationService(config.get_credential(env), profile, store=store, prompt=prompt)
    client = EbayApiClient(profile, auth, verbose=verbose)
    return EnvironmentStack(
        environment=env,
        auth=auth,
        client=client,
        offers=OfferService(client, marketplace_id),
        policies=PolicyResolver(client, marketplace_id, defaults),
    )


class MigrationOrchestrator:
    """Copies active listings from a source environment into a target one."""

    def __init__(
        self,
        source: EnvironmentStack,
        target: EnvironmentStack,
        page_size: int = 10,
        delay: float = 1.0,
        on_result: Callable[[ItemResult], None] | None = None,
    ) -> None:
        if source.environment == target.environment:
            raise ValueError("Source and target environments must differ")
        self._source = source
        self._target = target
        self._page_size = page_size
        self._delay = delay
        self._on_result = on_result
        self._target_policies: PolicyTriple | None = None

    def validate_tokens(self) -> None:
        """Obtain a token in both environments before touching any listing.

        Raises:
            MigrationAborted: If either environment cannot authenticate.
        """
        console.print("Validating tokens for source and target environments...")
        for stack in (self._source, self._target):
            try:
                stack.auth.get_access_token()
            except Exception as e:
                raise MigrationAborted(
                    f"Failed to validate {stack.environment.value} token. Check your configuration."
                ) from e
            console.print(f"  {stack.environment.value} token validated.")

    def enumerate_listings(self) -> list[Offer]:
        """First page of active listings in the source environment."""
        listings = self._source.offers.get_active_offers(self._page_size, 1)
        console.print(f"Found {len(listings)} active listings in {self._source.environment.value}")
        return listings

    def migrate(
        self,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
        save_path: str | None = None,
        validate: bool = True,
    ) -> MigrationOutcome:
        """Run a migration and return its outcome.

        Per-listing failures are counted and the run continues. Setting
        ``cancel`` stops the run before the next listing. Pass
        ``validate=False`` when ``validate_tokens`` has already been called.
        """
        if validate:
            self.validate_tokens()
        self._target_policies = None

        listings = self.enumerate_listings()
        outcome = MigrationOutcome(enumerated=len(listings), dry_run=dry_run)

        if save_path:
            _save_listings(listings, save_path)

        if dry_run:
            return outcome

        console.print(
            f"Migrating listings from {self._source.environment.value} "
            f"to {self._target.environment.value}..."
        )
        for listing in listings:
            if cancel is not None and cancel.is_set():
                outcome.cancelled = True
                break

            result = self._migrate_one(listing)
            outcome.record(result)
            if self._on_result is not None:
                self._on_result(result)

            self._pause(cancel)

        console.print(
            f"Migration complete. Success: {outcome.success_count}, Failed: {outcome.failure_count}"
        )
        return outcome

    def resolve_target_policies(self) -> PolicyTriple:
        """Target policy triple, resolved on first use and reused for the run."""
        if self._target_policies is None:
            self._target_policies = self._target.policies.resolve()
            logger.info(f"Resolved {self._target.environment.value} policies: {self._target_policies}")
        return self._target_policies

    def _migrate_one(self, listing: Offer) -> ItemResult:
        try:
            policies = self.resolve_target_policies()
            listing_id = self._target.offers.create_offer(listing.with_policies(policies))
        except OfferCreationError as e:
            console.print(f"  [red]Failed to import {listing.title}:[/red] {e}")
            return ItemResult.failure(listing.title, listing.listing_id, str(e), orphaned_sku=e.sku)
        except Exception as e:
            console.print(f"  [red]Failed to import {listing.title}:[/red] {e}")
            return ItemResult.failure(listing.title, listing.listing_id, str(e))

        console.print(f"  Imported: {listing.title} -> {listing_id}")
        return ItemResult.success(listing.title, listing.listing_id, listing_id)

    def _pause(self, cancel: threading.Event | None) -> None:
        """Fixed delay between listings; returns early when cancelled."""
        if self._delay <= 0:
            return
        if cancel is not None:
            cancel.wait(self._delay)
        else:
            time.sleep(self._delay)


def _save_listings(listings: list[Offer], save_path: str) -> None:
    path = Path(save_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [listing.model_dump(mode="json") for listing in listings]
    path.write_text(json.dumps(data, indent=2))
    console.print(f"Saved {len(listings)} listings to {path}")
