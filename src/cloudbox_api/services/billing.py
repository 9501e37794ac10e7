"""
Checkout session creation against the payment provider.

The exchange is a single form-encoded POST; the provider's response is opaque
apart from the hosted checkout `url`.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import requests

from cloudbox_api.config.settings import Settings
from cloudbox_api.errors import BillingError

logger = logging.getLogger(__name__)

CHECKOUT_SESSIONS_PATH = "/v1/checkout/sessions"


@dataclass(frozen=True)
class PlanDescriptor:
    """What the user is buying."""
    name: str
    unit_amount: int
    currency: str = "usd"
    quantity: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlanDescriptor":
        return cls(
            name=settings.plan_name,
            unit_amount=settings.plan_unit_amount,
            currency=settings.plan_currency,
        )


class BillingClient:
    """Creates hosted checkout sessions and returns their redirect URL."""

    def __init__(
        self,
        secret_key: Optional[str],
        client_url: str,
        api_base: str = "https://api.stripe.com",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.secret_key = secret_key
        self.client_url = client_url.rstrip("/")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "BillingClient":
        return cls(
            secret_key=settings.stripe_secret_key,
            client_url=settings.client_url,
            api_base=settings.stripe_api_base,
        )

    def _session_form(self, plan: PlanDescriptor) -> List[Tuple[str, str]]:
        return [
            ("mode", "payment"),
            ("payment_method_types[]", "card"),
            ("line_items[0][price_data][currency]", plan.currency),
            ("line_items[0][price_data][product_data][name]", plan.name),
            ("line_items[0][price_data][unit_amount]", str(plan.unit_amount)),
            ("line_items[0][quantity]", str(plan.quantity)),
            # the provider substitutes the placeholder on redirect
            ("success_url", f"{self.client_url}?session_id={{CHECKOUT_SESSION_ID}}"),
            ("cancel_url", self.client_url),
        ]

    def create_checkout_session(self, plan: PlanDescriptor) -> str:
        """Create a checkout session and return the URL to redirect the user to."""
        if not self.secret_key:
            raise BillingError("Payment provider secret key is not configured")

        try:
            response = self.session.post(
                f"{self.api_base}{CHECKOUT_SESSIONS_PATH}",
                data=self._session_form(plan),
                auth=(self.secret_key, ""),
                timeout=self.timeout,
            )
            response.raise_for_status()
            session_url = response.json().get("url")
        except requests.exceptions.RequestException as e:
            logger.error(f"Checkout session request failed: {str(e)}")
            raise BillingError(f"Checkout session request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Checkout session response was not JSON: {str(e)}")
            raise BillingError("Checkout session response was not JSON") from e

        if not session_url:
            raise BillingError("Checkout session response had no url")

        logger.info(f"Created checkout session for plan '{plan.name}'")
        return session_url
