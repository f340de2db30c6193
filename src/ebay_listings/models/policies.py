"""Business policy data models and the default policy definitions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


ALL_CATEGORIES = [{"name": "ALL_EXCLUDING_MOTORS_VEHICLES"}]


class ShippingDefaults(BaseModel):
    name: str = "Default Shipping Policy"
    carrier_code: str = "USPS"
    service_code: str = "USPSPriority"
    cost: str = "4.99"
    currency: str = "USD"
    handling_days: int = 1


class PaymentDefaults(BaseModel):
    name: str = "Default Payment Policy"
    payment_method: str = "PAYPAL"


class ReturnDefaults(BaseModel):
    name: str = "Default Return Policy"
    return_days: int = 30
    return_method: str = "REPLACEMENT_OR_MONEY_BACK"
    shipping_cost_payer: str = "SELLER"


class DefaultPolicyTemplate(BaseModel):
    """Policies created when an account has none of a given type."""
    shipping: ShippingDefaults = Field(default_factory=ShippingDefaults)
    payment: PaymentDefaults = Field(default_factory=PaymentDefaults)
    returns: ReturnDefaults = Field(default_factory=ReturnDefaults)

    def fulfillment_policy(self, marketplace_id: str) -> dict[str, Any]:
        s = self.shipping
        return {
            "name": s.name,
            "marketplaceId": marketplace_id,
            "categoryTypes": ALL_CATEGORIES,
            "handlingTime": {"value": s.handling_days, "unit": "DAY"},
            "shippingOptions": [
                {
                    "optionType": "DOMESTIC",
                    "costType": "FLAT_RATE",
                    "shippingServices": [
                        {
                            "sortOrder": 1,
                            "shippingCarrierCode": s.carrier_code,
                            "shippingServiceCode": s.service_code,
                            "shippingCost": {"value": s.cost, "currency": s.currency},
                        }
                    ],
                }
            ],
        }

    def payment_policy(self, marketplace_id: str) -> dict[str, Any]:
        return {
            "name": self.payment.name,
            "marketplaceId": marketplace_id,
            "categoryTypes": ALL_CATEGORIES,
            "paymentMethods": [{"paymentMethodType": self.payment.payment_method}],
        }

    def return_policy(self, marketplace_id: str) -> dict[str, Any]:
        r = self.returns
        return {
            "name": r.name,
            "marketplaceId": marketplace_id,
            "categoryTypes": ALL_CATEGORIES,
            "returnsAccepted": True,
            "returnPeriod": {"value": r.return_days, "unit": "DAY"},
            "returnMethod": r.return_method,
            "returnShippingCostPayer": r.shipping_cost_payer,
        }
