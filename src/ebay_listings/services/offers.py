"""Offer lifecycle service (Sell Inventory API).

An offer on eBay is two resources: an inventory item keyed by SKU holding the
product details, and an offer referencing that SKU with price, quantity and
business policies. Publishing the offer turns it into a live listing.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any

from ebay_listings.client import EbayApiClient
from ebay_listings.models.offers import (
    CreateOfferResponse,
    InventoryItem,
    InventoryItemsResponse,
    Offer,
    OfferDetail,
    OffersResponse,
    PublishOfferResponse,
    format_price,
)
from ebay_listings.utils.errors import ApiError, NotFoundError, OfferCreationError
from ebay_listings.utils.pagination import page_params, paginate

logger = logging.getLogger(__name__)

INVENTORY_PATH = "sell/inventory/v1/inventory_item"
OFFER_PATH = "sell/inventory/v1/offer"

PUBLISHED = "PUBLISHED"


def build_inventory_item(offer: Offer) -> dict[str, Any]:
    """Inventory item payload: product details and available quantity."""
    item: dict[str, Any] = {
        "availability": {
            "shipToLocationAvailability": {"quantity": offer.quantity},
        },
        "product": {
            "title": offer.title,
            "description": offer.description,
            "aspects": offer.item_specifics,
            "imageUrls": offer.image_urls,
        },
    }
    if offer.condition:
        item["condition"] = offer.condition
    return item


def build_offer_body(offer: Offer) -> dict[str, Any]:
    """Offer payload fields shared by create and update."""
    body: dict[str, Any] = {
        "format": offer.listing_format,
        "availableQuantity": offer.quantity,
        "categoryId": offer.category_id,
        "listingDescription": offer.description,
        "listingPolicies": {
            "fulfillmentPolicyId": offer.shipping_policy_id,
            "paymentPolicyId": offer.payment_policy_id,
            "returnPolicyId": offer.return_policy_id,
        },
        "pricingSummary": {
            "price": {"value": format_price(offer.price), "currency": offer.currency},
        },
    }
    if offer.schedule_start_time:
        body["listingStartDate"] = offer.schedule_start_time.strftime("%Y-%m-%dT%H:%M:%S.000Z")
    return body


def to_offer(detail: OfferDetail, item: InventoryItem, listing_id: str | None = None) -> Offer:
    """Merge offer-level and inventory-level fields into an Offer."""
    price = detail.pricing_summary.price
    policies = detail.listing_policies
    return Offer(
        listing_id=listing_id or detail.listing_id,
        sku=detail.sku or item.sku,
        title=item.product.title,
        description=detail.listing_description or item.product.description or "",
        price=Decimal(price.value) if price else Decimal("0"),
        currency=price.currency if price else "USD",
        quantity=detail.available_quantity or 0,
        condition=item.condition,
        category_id=detail.category_id or "",
        image_urls=item.product.image_urls,
        item_specifics=item.product.aspects,
        shipping_policy_id=policies.fulfillment_policy_id,
        payment_policy_id=policies.payment_policy_id,
        return_policy_id=policies.return_policy_id,
        listing_format=detail.format or "FIXED_PRICE",
        schedule_start_time=detail.listing_start_date,
    )


class OfferService:
    """Create, read, update and delete offers in one environment."""

    def __init__(self, client: EbayApiClient, marketplace_id: str = "EBAY_US") -> None:
        self._client = client
        self._marketplace_id = marketplace_id

    def create_offer(self, offer: Offer) -> str:
        """Create the inventory item and offer, then publish. Returns the listing ID.

        Raises:
            OfferCreationError: If any step fails. ``sku`` is set when the
                inventory item was already written and is left behind.
        """
        sku = str(uuid.uuid4())
        stage = "inventory_item"
        created_sku: str | None = None
        try:
            self._client.put(f"{INVENTORY_PATH}/{sku}", body=build_inventory_item(offer))
            created_sku = sku

            stage = "offer"
            body = build_offer_body(offer)
            body["sku"] = sku
            body["marketplaceId"] = self._marketplace_id
            created = self._client.post(OFFER_PATH, body=body, model=CreateOfferResponse)

            stage = "publish"
            published = self._publish(created.offer_id)
        except Exception as e:
            raise OfferCreationError(stage, created_sku, e) from e

        logger.info(f"Published '{offer.title}' as listing {published.listing_id} (sku {sku})")
        return published.listing_id

    def update_offer(self, listing_id: str, offer: Offer) -> bool:
        """Update an existing listing in place and re-publish it.

        Returns False if no offer matches ``listing_id``. Remote failures
        during the update propagate.
        """
        try:
            existing = self._find_by_listing_id(listing_id)
        except NotFoundError:
            return False

        self._client.put(f"{INVENTORY_PATH}/{existing.sku}", body=build_inventory_item(offer))
        self._client.put(f"{OFFER_PATH}/{existing.offer_id}", body=build_offer_body(offer))
        self._publish(existing.offer_id)
        logger.info(f"Updated listing {listing_id}")
        return True

    def delete_offer(self, listing_id: str) -> bool:
        """Delete the offer and its inventory item. Returns False if not found."""
        try:
            existing = self._find_by_listing_id(listing_id)
        except NotFoundError:
            return False

        self._client.delete(f"{OFFER_PATH}/{existing.offer_id}")
        self._client.delete(f"{INVENTORY_PATH}/{existing.sku}")
        logger.info(f"Deleted listing {listing_id} (sku {existing.sku})")
        return True

    def get_offer(self, listing_id: str) -> Offer | None:
        """Fetch a listing as an Offer, or None if it does not exist."""
        try:
            existing = self._find_by_listing_id(listing_id)
        except NotFoundError:
            return None

        item = self._client.get(f"{INVENTORY_PATH}/{existing.sku}", model=InventoryItem)
        return to_offer(existing, item, listing_id=listing_id)

    def get_active_offers(self, page_size: int = 100, page_number: int = 1) -> list[Offer]:
        """List published offers for one page of inventory items.

        Makes one call for the inventory page and one offer lookup per item.
        """
        page = self.list_inventory_items(page_size, page_number)
        return self._published_offers(page.inventory_items)

    def get_all_active_offers(self, page_size: int = 100, max_pages: int | None = None) -> list[Offer]:
        """List published offers across all inventory pages."""
        items = paginate(
            lambda size, number: self.list_inventory_items(size, number).inventory_items,
            page_size,
            max_pages=max_pages,
        )
        return self._published_offers(items)

    def list_inventory_items(self, page_size: int = 100, page_number: int = 1) -> InventoryItemsResponse:
        """Fetch one page of inventory items."""
        return self._client.get(
            INVENTORY_PATH,
            params=page_params(page_size, page_number),
            model=InventoryItemsResponse,
        )

    def get_offers_for_sku(self, sku: str) -> list[OfferDetail]:
        """All offers (any status) referencing ``sku``."""
        try:
            response = self._client.get(OFFER_PATH, params={"sku": sku}, model=OffersResponse)
        except ApiError as e:
            # eBay answers 404 when a SKU has no offers yet
            if e.status_code == 404:
                return []
            raise
        return response.offers

    def _published_offers(self, items: list[InventoryItem]) -> list[Offer]:
        result: list[Offer] = []
        for item in items:
            if not item.sku:
                continue
            for detail in self.get_offers_for_sku(item.sku):
                if detail.status == PUBLISHED:
                    result.append(to_offer(detail, item))
        return result

    def _find_by_listing_id(self, listing_id: str) -> OfferDetail:
        try:
            response = self._client.get(
                f"{OFFER_PATH}/get_offers_by_listing_id",
                params={"listing_id": listing_id},
                model=OffersResponse,
            )
        except ApiError as e:
            if e.status_code == 404:
                raise NotFoundError(listing_id) from e
            raise
        if not response.offers:
            raise NotFoundError(listing_id)
        return response.offers[0]

    def _publish(self, offer_id: str | None) -> PublishOfferResponse:
        return self._client.post(f"{OFFER_PATH}/{offer_id}/publish", model=PublishOfferResponse)
