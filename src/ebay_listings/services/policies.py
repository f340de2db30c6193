"""Business policy resolution (Sell Account API).

Finds a shipping, payment and return policy usable in one environment,
creating a default one for any type the account has none of.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ebay_listings.client import EbayApiClient
from ebay_listings.models.offers import PolicyTriple
from ebay_listings.models.policies import DefaultPolicyTemplate
from ebay_listings.utils.errors import PolicyResolutionError

logger = logging.getLogger(__name__)

ACCOUNT_PATH = "sell/account/v1"

# policy type -> (list key, id key)
POLICY_KEYS = {
    "fulfillment_policy": ("fulfillmentPolicies", "fulfillmentPolicyId"),
    "payment_policy": ("paymentPolicies", "paymentPolicyId"),
    "return_policy": ("returnPolicies", "returnPolicyId"),
}


class PolicyResolver:
    """Resolves the policy triple of the environment its client talks to."""

    def __init__(
        self,
        client: EbayApiClient,
        marketplace_id: str = "EBAY_US",
        defaults: DefaultPolicyTemplate | None = None,
    ) -> None:
        self._client = client
        self._marketplace_id = marketplace_id
        self._defaults = defaults or DefaultPolicyTemplate()

    def resolve(self) -> PolicyTriple:
        """Use the first policy of each type, creating a default where none exist.

        Raises:
            PolicyResolutionError: If any policy could not be read or created.
        """
        return PolicyTriple(
            shipping_policy_id=self._resolve_one("fulfillment_policy", self._defaults.fulfillment_policy),
            payment_policy_id=self._resolve_one("payment_policy", self._defaults.payment_policy),
            return_policy_id=self._resolve_one("return_policy", self._defaults.return_policy),
        )

    def list_policies(self, policy_type: str) -> list[dict[str, Any]]:
        """First page of policies of one type for the marketplace."""
        list_key, _ = POLICY_KEYS[policy_type]
        data = self._client.get(
            f"{ACCOUNT_PATH}/{policy_type}",
            params={"marketplace_id": self._marketplace_id},
        )
        return (data or {}).get(list_key) or []

    def _resolve_one(
        self,
        policy_type: str,
        default_factory: Callable[[str], dict[str, Any]],
    ) -> str:
        _, id_key = POLICY_KEYS[policy_type]
        try:
            policies = self.list_policies(policy_type)
            if policies and policies[0].get(id_key):
                return policies[0][id_key]

            logger.info(f"No {policy_type} found for {self._marketplace_id}, creating default")
            created = self._client.post(
                f"{ACCOUNT_PATH}/{policy_type}",
                body=default_factory(self._marketplace_id),
            )
        except Exception as e:
            raise PolicyResolutionError(f"Failed to get or create {policy_type}: {e}") from e

        policy_id = (created or {}).get(id_key)
        if not policy_id:
            raise PolicyResolutionError(f"Created {policy_type} but the response had no {id_key}")
        return policy_id
