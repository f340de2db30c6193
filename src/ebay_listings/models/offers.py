"""Offer and inventory item data models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer


class PolicyTriple(BaseModel):
    """The three business policy IDs of one environment."""
    shipping_policy_id: str
    payment_policy_id: str
    return_policy_id: str


class Offer(BaseModel):
    """A listing: inventory item details plus commercial terms.

    Policy IDs are only meaningful in the environment they came from.
    """
    listing_id: str | None = None
    sku: str | None = None
    title: str
    description: str = ""
    price: Decimal
    currency: str = "USD"
    quantity: int = 1
    condition: str | None = None
    category_id: str
    image_urls: list[str] = Field(default_factory=list)
    item_specifics: dict[str, list[str]] = Field(default_factory=dict)
    shipping_policy_id: str | None = None
    payment_policy_id: str | None = None
    return_policy_id: str | None = None
    listing_format: str = "FIXED_PRICE"
    schedule_start_time: datetime | None = None
    schedule_end_time: datetime | None = None

    @field_serializer("price")
    def _serialize_price(self, price: Decimal) -> str:
        return format_price(price)

    @property
    def policies(self) -> PolicyTriple | None:
        if not (self.shipping_policy_id and self.payment_policy_id and self.return_policy_id):
            return None
        return PolicyTriple(
            shipping_policy_id=self.shipping_policy_id,
            payment_policy_id=self.payment_policy_id,
            return_policy_id=self.return_policy_id,
        )

    def with_policies(self, policies: PolicyTriple) -> Offer:
        """Copy of this offer carrying another environment's policy IDs."""
        return self.model_copy(update={
            "shipping_policy_id": policies.shipping_policy_id,
            "payment_policy_id": policies.payment_policy_id,
            "return_policy_id": policies.return_policy_id,
        })


def format_price(price: Decimal) -> str:
    """Format a price the way eBay expects it: a decimal string with cents."""
    return str(Decimal(price).quantize(Decimal("0.01")))


# ── Wire models (Sell Inventory API) ─────────────────────────────────

class Amount(BaseModel):
    value: str
    currency: str = "USD"


class PricingSummary(BaseModel):
    price: Amount | None = None


class ListingPolicies(BaseModel):
    fulfillment_policy_id: str | None = Field(default=None, alias="fulfillmentPolicyId")
    payment_policy_id: str | None = Field(default=None, alias="paymentPolicyId")
    return_policy_id: str | None = Field(default=None, alias="returnPolicyId")

    model_config = {"populate_by_name": True}


class OfferDetail(BaseModel):
    offer_id: str | None = Field(default=None, alias="offerId")
    sku: str | None = None
    marketplace_id: str | None = Field(default=None, alias="marketplaceId")
    listing_id: str | None = Field(default=None, alias="listingId")
    format: str | None = None
    available_quantity: int | None = Field(default=None, alias="availableQuantity")
    category_id: str | None = Field(default=None, alias="categoryId")
    listing_description: str | None = Field(default=None, alias="listingDescription")
    listing_start_date: datetime | None = Field(default=None, alias="listingStartDate")
    listing_policies: ListingPolicies = Field(default_factory=ListingPolicies, alias="listingPolicies")
    pricing_summary: PricingSummary = Field(default_factory=PricingSummary, alias="pricingSummary")
    status: str | None = None

    model_config = {"populate_by_name": True}


class OffersResponse(BaseModel):
    offers: list[OfferDetail] = Field(default_factory=list)
    total: int | None = None

    model_config = {"populate_by_name": True}


class Product(BaseModel):
    title: str = ""
    description: str | None = None
    aspects: dict[str, list[str]] = Field(default_factory=dict)
    image_urls: list[str] = Field(default_factory=list, alias="imageUrls")

    model_config = {"populate_by_name": True}


class InventoryItem(BaseModel):
    sku: str | None = None
    condition: str | None = None
    product: Product = Field(default_factory=Product)
    availability: dict | None = None

    model_config = {"populate_by_name": True}


class InventoryItemsResponse(BaseModel):
    inventory_items: list[InventoryItem] = Field(default_factory=list, alias="inventoryItems")
    total: int | None = None

    model_config = {"populate_by_name": True}


class CreateOfferResponse(BaseModel):
    offer_id: str = Field(alias="offerId")

    model_config = {"populate_by_name": True}


class PublishOfferResponse(BaseModel):
    listing_id: str = Field(alias="listingId")

    model_config = {"populate_by_name": True}
