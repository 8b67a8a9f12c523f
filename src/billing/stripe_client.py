"""Stripe client wrapper for the billing portal."""

import stripe
from typing import Any, Dict, Iterable, List, Optional
from loguru import logger

from config.settings import get_settings
from config.constants import (
    PRICE_PAGE_LIMIT, PAYMENT_METHOD_LIMIT
)
from core.exceptions import MissingStripeKeyError


def to_plain(obj: Optional[stripe.StripeObject]) -> Optional[Dict[str, Any]]:
    """Stripe object (and everything expanded in it) as plain dicts and lists."""
    if obj is None:
        return None
    return obj.to_dict()


def _plain_list(objects: Iterable[stripe.StripeObject]) -> List[Dict[str, Any]]:
    return [to_plain(obj) for obj in objects]


class StripeClient:
    """
    Thin wrapper for the Stripe API calls the portal needs.

    Stripe objects are converted to plain dicts here, so the rest of the
    portal never depends on the SDK object model; formatting happens in the
    billing state assembler.
    """

    def __init__(self, api_key: Optional[str] = None, api_version: Optional[str] = None):
        if api_key is None or api_version is None:
            settings = get_settings()
            api_key = api_key or settings.stripe_secret
            api_version = api_version or settings.stripe_api_version

        self.api_key = api_key
        if not self.api_key:
            raise MissingStripeKeyError("BILLING_PORTAL_STRIPE_SECRET environment variable is required")

        self.api_version = api_version
        stripe.api_key = self.api_key
        stripe.api_version = self.api_version

    # ==================== PRICES ====================

    def list_prices(self) -> List[Dict[str, Any]]:
        """All prices of the account, following pagination."""
        prices = _plain_list(stripe.Price.list(limit=PRICE_PAGE_LIMIT).auto_paging_iter())
        logger.debug(f"Fetched {len(prices)} Stripe prices")
        return prices

    # ==================== CUSTOMERS ====================

    def customer_balance(self, customer_id: str) -> int:
        """Customer credit balance in the smallest currency unit (negative is credit)."""
        customer = to_plain(stripe.Customer.retrieve(customer_id))
        return customer.get("balance") or 0

    def default_payment_method_id(self, customer_id: str) -> Optional[str]:
        customer = to_plain(stripe.Customer.retrieve(
            customer_id,
            expand=["invoice_settings.default_payment_method"]
        ))
        default = (customer.get("invoice_settings") or {}).get("default_payment_method")
        if default is None:
            return None
        return default if isinstance(default, str) else default.get("id")

    def list_payment_methods(
        self,
        customer_id: str,
        type: str = "card",
        limit: int = PAYMENT_METHOD_LIMIT
    ) -> List[Dict[str, Any]]:
        result = stripe.PaymentMethod.list(customer=customer_id, type=type, limit=limit)
        return _plain_list(result.data)

    # ==================== INVOICES ====================

    def list_invoices(self, customer_id: str, **params: Any) -> List[Dict[str, Any]]:
        """
        One page of the customer's invoices.

        Args:
            customer_id: Stripe customer ID
            **params: Extra list parameters (status, limit, starting_after, expand...)
        """
        result = stripe.Invoice.list(customer=customer_id, **params)
        invoices = _plain_list(result.data)
        logger.debug(f"Fetched {len(invoices)} invoices for {customer_id} ({params.get('status', 'any')})")
        return invoices

    def retrieve_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return to_plain(stripe.Invoice.retrieve(invoice_id))

    def upcoming_invoice(self, customer_id: str, subscription_id: str) -> Optional[Dict[str, Any]]:
        """
        Preview the next invoice of a subscription.

        Returns None when Stripe has nothing to bill next.
        """
        try:
            invoice = stripe.Invoice.create_preview(
                customer=customer_id,
                subscription=subscription_id
            )
        except stripe.InvalidRequestError as e:
            logger.debug(f"No upcoming invoice for subscription {subscription_id}: {e}")
            return None
        return to_plain(invoice)

    # ==================== SUBSCRIPTIONS ====================

    def get_subscription(self, subscription_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
        """Retrieve subscription details from Stripe."""
        params: Dict[str, Any] = {}
        if expand:
            params["expand"] = expand
        return to_plain(stripe.Subscription.retrieve(subscription_id, **params))

    def latest_invoice(self, subscription_id: str) -> Optional[Dict[str, Any]]:
        subscription = self.get_subscription(subscription_id, expand=["latest_invoice"])
        invoice = subscription.get("latest_invoice")
        if invoice is None or isinstance(invoice, str):
            return None
        return invoice
