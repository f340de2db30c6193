"""Shared fixtures for the ebay-listings test suite."""
from __future__ import annotations

import itertools
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from ebay_listings.config import Config, Credential, Environment, EnvironmentProfile, Settings
from ebay_listings.models.offers import Offer
from ebay_listings.services.offers import INVENTORY_PATH, OFFER_PATH
from ebay_listings.services.policies import ACCOUNT_PATH, POLICY_KEYS
from ebay_listings.utils.errors import ApiError


@pytest.fixture
def fake_profiles() -> dict[Environment, EnvironmentProfile]:
    return {
        Environment.PRODUCTION: EnvironmentProfile(
            api_endpoint="https://api.ebay.com/",
            auth_endpoint="https://auth.ebay.com/oauth2/authorize",
            token_endpoint="https://api.ebay.com/identity/v1/oauth2/token",
        ),
        Environment.SANDBOX: EnvironmentProfile(
            api_endpoint="https://api.sandbox.ebay.com/",
            auth_endpoint="https://auth.sandbox.ebay.com/oauth2/authorize",
            token_endpoint="https://api.sandbox.ebay.com/identity/v1/oauth2/token",
        ),
    }


@pytest.fixture
def fake_credentials() -> dict[Environment, Credential]:
    return {
        Environment.PRODUCTION: Credential(
            environment=Environment.PRODUCTION,
            client_id="prod-client-id",
            client_secret="prod-client-secret",
            redirect_uri="Prod-RuName",
            refresh_token="prod-refresh-token",
        ),
        Environment.SANDBOX: Credential(
            environment=Environment.SANDBOX,
            client_id="sbx-client-id",
            client_secret="sbx-client-secret",
            redirect_uri="Sbx-RuName",
            refresh_token="",
        ),
    }


@pytest.fixture
def fake_settings(tmp_path) -> Settings:
    return Settings(
        marketplace_id="EBAY_US",
        migration_page_size=10,
        migration_delay=0.0,
        token_dir=str(tmp_path),
    )


@pytest.fixture
def fake_config(fake_settings, fake_credentials, fake_profiles) -> Config:
    return Config(settings=fake_settings, credentials=fake_credentials, environments=fake_profiles)


@pytest.fixture
def mock_client():
    """MagicMock standing in for EbayApiClient."""
    client = MagicMock()
    client.get = MagicMock()
    client.post = MagicMock()
    client.put = MagicMock()
    client.delete = MagicMock()
    client.close = MagicMock()
    return client


@pytest.fixture
def sample_offer() -> Offer:
    return Offer(
        title="Vintage Camera",
        description="A working 35mm film camera.",
        price=Decimal("129.99"),
        currency="USD",
        quantity=3,
        condition="USED_EXCELLENT",
        category_id="15230",
        image_urls=["https://i.ebayimg.com/images/camera.jpg"],
        item_specifics={"Brand": ["Canon"], "Model": ["AE-1"]},
        shipping_policy_id="ship-1",
        payment_policy_id="pay-1",
        return_policy_id="ret-1",
    )


class FakeEbayApi:
    """In-memory stand-in for EbayApiClient speaking the inventory and account paths.

    Inventory items are keyed by SKU, offers by offer ID, and policies by
    policy type. ``fail_once`` makes the next matching call raise.
    """

    def __init__(self) -> None:
        self.inventory: dict[str, dict] = {}
        self.offers: dict[str, dict] = {}
        self.policies: dict[str, list[dict]] = {t: [] for t in POLICY_KEYS}
        self.calls: list[tuple[str, str]] = []
        self._failures: list[tuple[str, str, Exception]] = []
        self._ids = itertools.count(1)

    # ── test helpers ─────────────────────────────────────────────────

    def fail_once(self, method: str, fragment: str, error: Exception | None = None) -> None:
        self._failures.append((method, fragment, error or ApiError(500, "Internal error")))

    def add_item(self, sku: str, title: str, offers: list[dict], condition: str = "NEW") -> None:
        self.inventory[sku] = {
            "condition": condition,
            "product": {"title": title, "description": title, "aspects": {}, "imageUrls": []},
            "availability": {"shipToLocationAvailability": {"quantity": 1}},
        }
        for offer in offers:
            offer_id = offer.get("offerId") or f"offer-{next(self._ids)}"
            self.offers[offer_id] = {"sku": sku, "offerId": offer_id, **offer}

    def calls_to(self, method: str, fragment: str = "") -> list[str]:
        return [p for m, p in self.calls if m == method and fragment in p]

    # ── client surface ───────────────────────────────────────────────

    def get(self, path, params=None, model=None):
        self._enter("GET", path)
        params = params or {}
        if path == INVENTORY_PATH:
            items = [{"sku": sku, **item} for sku, item in self.inventory.items()]
            offset, limit = params.get("offset", 0), params.get("limit", 100)
            data = {"inventoryItems": items[offset:offset + limit], "total": len(items)}
        elif path.startswith(INVENTORY_PATH + "/"):
            sku = path.rsplit("/", 1)[1]
            if sku not in self.inventory:
                raise ApiError(404, "Inventory item not found", "GET", path)
            data = {"sku": sku, **self.inventory[sku]}
        elif path == f"{OFFER_PATH}/get_offers_by_listing_id":
            data = {"offers": [o for o in self.offers.values() if o.get("listingId") == params["listing_id"]]}
        elif path == OFFER_PATH:
            data = {"offers": [o for o in self.offers.values() if o.get("sku") == params["sku"]]}
        elif path.startswith(ACCOUNT_PATH + "/"):
            policy_type = path.rsplit("/", 1)[1]
            data = {POLICY_KEYS[policy_type][0]: list(self.policies[policy_type])}
        else:
            raise ApiError(404, f"Unknown path {path}", "GET", path)
        return model.model_validate(data) if model else data

    def post(self, path, body=None, model=None):
        self._enter("POST", path)
        if path == OFFER_PATH:
            offer_id = f"offer-{next(self._ids)}"
            self.offers[offer_id] = {**body, "offerId": offer_id, "status": "UNPUBLISHED"}
            data = {"offerId": offer_id}
        elif path.startswith(OFFER_PATH + "/") and path.endswith("/publish"):
            offer_id = path.split("/")[-2]
            listing_id = self.offers[offer_id].get("listingId") or f"listing-{next(self._ids)}"
            self.offers[offer_id].update(status="PUBLISHED", listingId=listing_id)
            data = {"listingId": listing_id}
        elif path.startswith(ACCOUNT_PATH + "/"):
            policy_type = path.rsplit("/", 1)[1]
            id_key = POLICY_KEYS[policy_type][1]
            policy_id = f"{policy_type}-{next(self._ids)}"
            self.policies[policy_type].append({**body, id_key: policy_id})
            data = {id_key: policy_id}
        else:
            raise ApiError(404, f"Unknown path {path}", "POST", path)
        return model.model_validate(data) if model else data

    def put(self, path, body=None, model=None):
        self._enter("PUT", path)
        key = path.rsplit("/", 1)[1]
        if path.startswith(INVENTORY_PATH + "/"):
            self.inventory[key] = body
        elif path.startswith(OFFER_PATH + "/"):
            self.offers[key].update(body)
        return model.model_validate({}) if model else None

    def delete(self, path):
        self._enter("DELETE", path)
        key = path.rsplit("/", 1)[1]
        if path.startswith(INVENTORY_PATH + "/"):
            self.inventory.pop(key)
        else:
            self.offers.pop(key)

    def close(self) -> None:
        pass

    def _enter(self, method: str, path: str) -> None:
        self.calls.append((method, path))
        for i, (m, fragment, error) in enumerate(self._failures):
            if m == method and fragment in path:
                del self._failures[i]
                raise error


@pytest.fixture
def fake_api() -> FakeEbayApi:
    return FakeEbayApi()


@pytest.fixture
def make_fake_api():
    """Factory for tests that need one fake per environment."""
    return FakeEbayApi
