"""
Shared fixtures: settings, billables and an in-memory Stripe stand-in.
"""

from datetime import datetime, timedelta, timezone

import pytest
import stripe

from billing.context import PortalRequest
from config.settings import (
    BillableSettings, BrandSettings, FeatureSettings, PlanSettings, Settings
)
from core.models import Billable, PortalUser, Subscription


class FakeRoutes:
    """Route resolver with a fixed set of named routes."""

    def __init__(self, names=("invoices.download",)):
        self.names = set(names)

    def has(self, name):
        return name in self.names

    def url_for(self, name, **params):
        if name not in self.names:
            raise LookupError(name)
        if name == "invoices.download":
            return f"https://app.test/billing/{params['billable_type']}/{params['billable_id']}/invoices/{params['invoice_id']}"
        return f"https://app.test/{name.replace('.', '/')}"


class FakeStripeClient:
    """
    Mimics billing.stripe_client.StripeClient with plain dicts.

    Invoices are kept newest first, like Stripe list endpoints.
    """

    def __init__(self):
        self.prices = []
        self.balance = 0
        self.payment_methods = []
        self.default_payment_method = None
        self.invoices = []
        self.subscriptions = {}
        self.latest_invoices = {}
        self.upcoming_invoices = {}
        self.calls = []

    def list_prices(self):
        self.calls.append(("list_prices",))
        return list(self.prices)

    def customer_balance(self, customer_id):
        self.calls.append(("customer_balance", customer_id))
        return self.balance

    def default_payment_method_id(self, customer_id):
        return self.default_payment_method

    def list_payment_methods(self, customer_id, type="card", limit=24):
        return list(self.payment_methods)

    def list_invoices(self, customer_id, **params):
        self.calls.append(("list_invoices", customer_id, params))
        status = params.get("status")
        items = [i for i in self.invoices if status is None or i["status"] == status]
        ids = [i["id"] for i in items]
        limit = params.get("limit", 10)

        if "starting_after" in params:
            return items[ids.index(params["starting_after"]) + 1:][:limit]
        if "ending_before" in params:
            return items[:ids.index(params["ending_before"])][-limit:]
        return items[:limit]

    def retrieve_invoice(self, invoice_id):
        for invoice in self.invoices:
            if invoice["id"] == invoice_id:
                return invoice
        raise stripe.InvalidRequestError(f"No such invoice: '{invoice_id}'", "id")

    def upcoming_invoice(self, customer_id, subscription_id):
        return self.upcoming_invoices.get(subscription_id)

    def get_subscription(self, subscription_id, expand=None):
        self.calls.append(("get_subscription", subscription_id))
        return self.subscriptions[subscription_id]

    def latest_invoice(self, subscription_id):
        return self.latest_invoices.get(subscription_id)


def make_invoice(number, status="paid", total=1000, currency="usd",
                 created=1700000000, customer="cus_123", subscription=None):
    invoice = {
        "id": f"in_{number:03d}",
        "status": status,
        "total": total,
        "amount_due": total,
        "currency": currency,
        "created": created,
        "customer": customer,
        "invoice_pdf": f"https://pay.stripe.test/invoice/in_{number:03d}/pdf",
    }
    if subscription is not None:
        invoice["parent"] = {"subscription_details": {"subscription": subscription}}
    return invoice


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        app_name="Acme",
        stripe_key="pk_test_123",
        stripe_secret="sk_test_123",
        brand=BrandSettings(color="bg-indigo-600"),
        features=FeatureSettings(
            billing_address_collection=True,
            billing_address_required=True,
            eu_vat_collection=True,
        ),
        billables={
            "user": BillableSettings(
                default_interval="monthly",
                plans=[
                    PlanSettings(
                        name="Standard",
                        short_description="For small teams",
                        monthly_id="price_standard_monthly",
                        yearly_id="price_standard_yearly",
                        yearly_incentive="Save 10%",
                        features=["Feature A"],
                    ),
                    PlanSettings(
                        name="Legacy",
                        monthly_id="price_legacy_monthly",
                        archived=True,
                    ),
                ],
            ),
            "team": BillableSettings(default_interval="yearly", seat_name="member"),
        },
    )


@pytest.fixture
def stripe_client():
    client = FakeStripeClient()
    client.prices = [
        {"id": "price_standard_monthly", "unit_amount": 1000, "currency": "usd"},
        {"id": "price_standard_yearly", "unit_amount": 10850, "currency": "usd"},
        {"id": "price_legacy_monthly", "unit_amount": 500, "currency": "usd"},
        {"id": "price_unrelated", "unit_amount": 99, "currency": "eur"},
    ]
    return client


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def active_subscription(now):
    return Subscription(
        id=1,
        stripe_id="sub_123",
        stripe_status="active",
        stripe_price="price_standard_monthly",
        created_at=now - timedelta(days=30),
    )


@pytest.fixture
def billable(active_subscription):
    return Billable(
        id=42,
        name="Taylor",
        email="taylor@example.com",
        stripe_id="cus_123",
        pm_type="visa",
        pm_last_four="4242",
        pm_expiration="12/2030",
        subscriptions=[active_subscription],
    )


@pytest.fixture
def portal_request():
    return PortalRequest(
        user=PortalUser(name="Taylor", profile_photo_url="https://cdn.test/taylor.png"),
        path="/billing/user/42",
        routes=FakeRoutes(),
    )
