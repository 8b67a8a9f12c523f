"""
Billing state shared with the billing dashboard.

FrontendState.current() assembles everything the dashboard renders for one
billable: branding, the plan catalog, the current subscription and its
state, payment methods, balance and invoices. Values that need extra Stripe
round trips are deferred (see billing.lazy) and only fetched when the
payload is serialized, or, for balance and invoices, when the dashboard
asks for them in a partial reload.
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from billing.context import PortalRequest
from billing.countries import all_countries
from billing.formatting import format_amount, format_date, from_timestamp
from billing.lazy import lazy
from billing.pagination import Cursor, CursorPage, cursor_paginate
from billing.plans import active_plans, attach_prices, configured_plans, find_plan
from billing.stripe_client import StripeClient
from config.constants import (
    CARD_EXPIRATION_FORMAT, CHECKOUT_STARTED, CUSTOM_HEX_BRAND_COLOR,
    OPEN_INVOICE_LIMIT, PAID_INVOICES_PER_PAGE,
    ROUTE_DASHBOARD, ROUTE_INVOICE_DOWNLOAD, ROUTE_TERMS,
    STATE_ACTIVE, STATE_GRACE_PERIOD, STATE_NONE, STATE_PAST_DUE, STATE_PENDING,
)
from config.settings import Settings, get_settings
from core.models import Billable, Plan, Subscription, SubscriptionStatus

# Open invoices of such subscriptions are not shown
HIDDEN_INVOICE_SUBSCRIPTION_STATUSES = frozenset({
    SubscriptionStatus.CANCELED.value,
    SubscriptionStatus.INCOMPLETE.value,
})


def _invoice_subscription(invoice) -> Optional[Any]:
    """
    The (expanded) subscription an invoice belongs to.

    Newer API versions nest it under parent.subscription_details.
    """
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription") or invoice.get("subscription")


class FrontendState:
    """Assembles the billing dashboard payload."""

    def __init__(self, stripe_client: StripeClient, settings: Optional[Settings] = None):
        self.stripe = stripe_client
        self.settings = settings or get_settings()

    def current(self, billable_type: str, billable: Billable, request: PortalRequest) -> Dict[str, Any]:
        """
        Get the data that should be shared with the frontend.

        Args:
            billable_type: Configured billable type ("user", "team"...)
            billable: The entity whose billing is displayed
            request: Current request (user, query string, routes)

        Returns:
            Payload whose deferred values are resolved by billing.lazy.resolve_props()

        Raises:
            UnknownBillableTypeError: If billable_type is not configured
            PriceNotFoundError: If a configured price is missing in Stripe
        """
        settings = self.settings
        billable_settings = settings.billable(billable_type)

        subscription = billable.subscription()

        # Filter out incomplete subscriptions for now...
        if subscription is not None and subscription.incomplete():
            subscription = None

        plans = self.get_plans(billable_type)

        plan = None
        if subscription is not None and (subscription.active() or subscription.past_due()):
            plan = find_plan(plans, subscription.stripe_price)

        user = request.user
        features = settings.features
        generic_trial_ends_at = billable.generic_trial_ends_at()

        logger.debug(f"Building billing state for {billable_type} {billable.id}")

        return {
            "appLogo": self.logo(),
            "appName": settings.app_name,

            "balance": lazy(lambda: self.balance(billable)),

            "invoices": lazy(lambda: self.invoices(billable_type, billable, request)),

            "billable": billable.to_dict(),
            "billableId": str(billable.id),
            "billableName": billable.name,
            "billableType": billable_type,
            "billingAddressRequired": features.billing_address_collection and features.billing_address_required,
            "brandColor": self.brand_color(),
            "pmType": billable.pm_type,
            "pmExpirationDate": billable.pm_expiration,
            "pmLastFour": billable.pm_last_four,
            "cashierPath": settings.cashier_path,
            "collectionMethod": lambda: self.collection_method(subscription),
            "collectsVat": features.eu_vat_collection,
            "collectsBillingAddress": features.billing_address_collection,
            "countries": all_countries(),
            "dashboardUrl": self.dashboard_url(request),
            "defaultInterval": billable_settings.default_interval,
            "genericTrialEndsAt": self._date(generic_trial_ends_at) if generic_trial_ends_at else None,
            "lastPayment": lambda: self.last_payment(subscription),
            "message": request.input("message", ""),
            "monthlyPlans": [p.to_dict() for p in active_plans(plans, "monthly")],
            "nextPayment": lambda: self.next_payment(billable, subscription),
            "paymentMethod": "card" if billable.pm_last_four else None,
            "paymentMethods": lambda: self.payment_methods(billable),
            "plan": plan.to_dict() if plan else None,
            "seatName": billable_settings.seat_name,
            "sendsInvoicesToCustomAddresses": features.invoice_emails_custom_addresses,
            "sparkPath": settings.portal_path,
            "state": self.state(subscription, request),
            "stripeKey": settings.stripe_key,
            "stripeVersion": settings.stripe_api_version,
            "termsUrl": self.terms_url(request),
            "trialEndsAt": self._date(subscription.trial_ends_at) if subscription and subscription.on_trial() else None,
            "userAvatar": user.profile_photo_url,
            "userName": user.name,
            "yearlyPlans": [p.to_dict() for p in active_plans(plans, "yearly")],
        }

    # ==================== BRANDING ====================

    def logo(self) -> Optional[str]:
        """
        Get the logo configured for the billing portal.

        A path to an existing file (typically an SVG) is inlined.
        """
        logo = self.settings.brand.logo

        if logo:
            path = Path(logo).expanduser()
            if path.is_file():
                return path.read_text(encoding="utf-8")

        return logo

    def brand_color(self) -> str:
        color = self.settings.brand.color
        return CUSTOM_HEX_BRAND_COLOR if color.startswith("#") else color

    def dashboard_url(self, request: PortalRequest) -> str:
        if self.settings.dashboard_url:
            return self.settings.dashboard_url

        routes = request.routes
        return routes.url_for(ROUTE_DASHBOARD) if routes.has(ROUTE_DASHBOARD) else "/"

    def terms_url(self, request: PortalRequest) -> Optional[str]:
        if self.settings.terms_url:
            return self.settings.terms_url

        routes = request.routes
        return routes.url_for(ROUTE_TERMS) if routes.has(ROUTE_TERMS) else None

    # ==================== PLANS & STATE ====================

    def get_plans(self, billable_type: str) -> List[Plan]:
        """Get the plans of a billable type with their Stripe prices."""
        plans = configured_plans(self.settings.billable(billable_type))
        if not plans:
            return []
        return attach_prices(plans, self.stripe.list_prices())

    def state(self, subscription: Optional[Subscription], request: PortalRequest) -> str:
        """Get the current subscription state."""
        if subscription is None and request.input("checkout") == CHECKOUT_STARTED:
            return STATE_PENDING

        if subscription is not None and subscription.on_grace_period():
            return STATE_GRACE_PERIOD

        if subscription is not None and subscription.active():
            return STATE_ACTIVE

        if subscription is not None and subscription.past_due():
            return STATE_PAST_DUE

        return STATE_NONE

    # ==================== DEFERRED VALUES ====================

    async def balance(self, billable: Billable) -> Dict[str, Any]:
        raw = 0
        if billable.has_stripe_id():
            raw = await asyncio.to_thread(self.stripe.customer_balance, billable.stripe_id)

        return {
            "formatted": format_amount(raw, self.settings.currency).lstrip("-"),
            "raw": raw,
        }

    async def invoices(self, billable_type: str, billable: Billable, request: PortalRequest) -> Dict[str, Any]:
        open_invoices, paid_invoices = await asyncio.gather(
            asyncio.to_thread(self.open_invoices, billable_type, billable, request),
            asyncio.to_thread(self.paid_invoices, billable_type, billable, request),
        )
        return {
            "open": open_invoices,
            "paid": paid_invoices.to_dict(),
        }

    async def collection_method(self, subscription: Optional[Subscription]) -> Optional[str]:
        if subscription is None:
            return None

        stripe_subscription = await asyncio.to_thread(self.stripe.get_subscription, subscription.stripe_id)
        return stripe_subscription.get("collection_method")

    async def last_payment(self, subscription: Optional[Subscription]) -> Optional[Dict[str, str]]:
        if subscription is None:
            return None

        invoice = await asyncio.to_thread(self.stripe.latest_invoice, subscription.stripe_id)
        if invoice is None:
            return None

        return {
            "amount": format_amount(invoice["total"], invoice["currency"]),
            "date": self._date(from_timestamp(invoice["created"])),
        }

    async def next_payment(
        self,
        billable: Billable,
        subscription: Optional[Subscription]
    ) -> Optional[Dict[str, str]]:
        # Canceled subscriptions have nothing left to bill
        if subscription is None or subscription.canceled() or not billable.has_stripe_id():
            return None

        invoice = await asyncio.to_thread(
            self.stripe.upcoming_invoice, billable.stripe_id, subscription.stripe_id
        )
        if invoice is None:
            return None

        return {
            "amount": format_amount(invoice.get("amount_due") or 0, invoice["currency"]),
            "date": self._date(from_timestamp(invoice["created"])),
        }

    async def payment_methods(self, billable: Billable) -> List[Dict[str, Any]]:
        """Get all of the card payment methods of the billable."""
        if not billable.has_stripe_id():
            return []

        default_id, methods = await asyncio.gather(
            asyncio.to_thread(self.stripe.default_payment_method_id, billable.stripe_id),
            asyncio.to_thread(self.stripe.list_payment_methods, billable.stripe_id),
        )

        rows = []
        for method in methods:
            card = method["card"]
            rows.append({
                "id": method["id"],
                "last4": card["last4"],
                "brand": card["brand"].capitalize(),
                "expiration": date(card["exp_year"], card["exp_month"], 1).strftime(CARD_EXPIRATION_FORMAT),
                "country": card.get("country"),
                "default": default_id is not None and method["id"] == default_id,
            })
        return rows

    # ==================== INVOICES ====================

    def open_invoices(self, billable_type: str, billable: Billable, request: PortalRequest) -> List[Dict[str, Any]]:
        """List all open invoices of the billable."""
        if not billable.has_stripe_id():
            return []

        invoices = self.stripe.list_invoices(
            billable.stripe_id,
            limit=OPEN_INVOICE_LIMIT,
            status="open",
            expand=["data.parent.subscription_details.subscription"],
        )

        rows = []
        for invoice in invoices:
            subscription = _invoice_subscription(invoice)
            # If the subscription is cancelled, we will filter out open invoices...
            if not isinstance(subscription, str) and subscription is not None \
                    and subscription.get("status") in HIDDEN_INVOICE_SUBSCRIPTION_STATUSES:
                continue
            rows.append(self._invoice_row(billable_type, billable, invoice, request))
        return rows

    def paid_invoices(self, billable_type: str, billable: Billable, request: PortalRequest) -> CursorPage:
        """Paginate all paid invoices of the billable."""
        cursor = Cursor.decode(request.input("cursor"))

        if not billable.has_stripe_id():
            return CursorPage(items=[], per_page=PAID_INVOICES_PER_PAGE, path=request.path, query=request.query)

        page = cursor_paginate(
            lambda **params: self.stripe.list_invoices(billable.stripe_id, status="paid", **params),
            per_page=PAID_INVOICES_PER_PAGE,
            cursor=cursor,
            path=request.path,
            query=request.query,
        )
        return page.through(lambda invoice: self._invoice_row(billable_type, billable, invoice, request))

    def _invoice_row(self, billable_type: str, billable: Billable, invoice, request: PortalRequest) -> Dict[str, Any]:
        return {
            "amount": format_amount(invoice["total"], invoice["currency"]),
            "date": self._date(from_timestamp(invoice["created"])),
            "id": invoice["id"],
            "invoice_url": request.routes.url_for(
                ROUTE_INVOICE_DOWNLOAD,
                billable_type=billable_type,
                billable_id=str(billable.id),
                invoice_id=invoice["id"],
            ),
            "status": invoice["status"],
        }

    def _date(self, value: date) -> str:
        return format_date(value, self.settings.date_format)
