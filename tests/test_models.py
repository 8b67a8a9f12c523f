"""
Tests for core models.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.models import Billable, Plan, Subscription, SubscriptionStatus


def _subscription(status="active", **kwargs):
    return Subscription(stripe_id="sub_1", stripe_status=status, **kwargs)


def test_active_subscription():
    """Test a running subscription."""
    subscription = _subscription("active")

    assert subscription.active()
    assert not subscription.past_due()
    assert not subscription.incomplete()
    assert not subscription.canceled()
    assert not subscription.on_grace_period()


def test_trialing_counts_as_active():
    subscription = _subscription(
        "trialing",
        trial_ends_at=datetime.now(timezone.utc) + timedelta(days=5)
    )

    assert subscription.active()
    assert subscription.on_trial()


@pytest.mark.parametrize("status", ["incomplete", "incomplete_expired", "past_due", "unpaid"])
def test_inactive_statuses(status):
    assert not _subscription(status).active()


def test_grace_period():
    """Canceled with time left: still active, on grace period."""
    subscription = _subscription("active", ends_at=datetime.now(timezone.utc) + timedelta(days=3))

    assert subscription.canceled()
    assert subscription.on_grace_period()
    assert not subscription.ended()
    assert subscription.active()


def test_ended_subscription():
    subscription = _subscription("canceled", ends_at=datetime.now(timezone.utc) - timedelta(days=1))

    assert subscription.ended()
    assert not subscription.on_grace_period()
    assert not subscription.active()


def test_naive_datetimes_are_utc():
    subscription = _subscription("active", ends_at=datetime(2099, 1, 1))

    assert subscription.ends_at.tzinfo == timezone.utc
    assert subscription.on_grace_period()


def test_billable_picks_latest_default_subscription():
    """Test Billable.subscription() ordering and type filter."""
    now = datetime.now(timezone.utc)
    old = Subscription(stripe_id="sub_old", stripe_status="canceled", created_at=now - timedelta(days=60))
    new = Subscription(stripe_id="sub_new", stripe_status="active", created_at=now - timedelta(days=1))
    addon = Subscription(type="addon", stripe_id="sub_addon", stripe_status="active", created_at=now)

    billable = Billable(id=1, name="Acme", subscriptions=[old, new, addon])

    assert billable.subscription().stripe_id == "sub_new"
    assert billable.subscription("addon").stripe_id == "sub_addon"
    assert billable.subscription("missing") is None


def test_generic_trial():
    billable = Billable(id=1, name="Acme", trial_ends_at=datetime.now(timezone.utc) + timedelta(days=7))
    assert billable.on_generic_trial()
    assert billable.generic_trial_ends_at() == billable.trial_ends_at

    expired = Billable(id=1, name="Acme", trial_ends_at=datetime.now(timezone.utc) - timedelta(days=1))
    assert not expired.on_generic_trial()
    assert expired.generic_trial_ends_at() is None


def test_billable_to_dict_excludes_subscriptions():
    billable = Billable(
        id=7,
        name="Acme",
        stripe_id="cus_1",
        subscriptions=[_subscription()]
    )

    data = billable.to_dict()

    assert data["id"] == 7
    assert data["stripe_id"] == "cus_1"
    assert "subscriptions" not in data


def test_plan_serializes_camel_case():
    plan = Plan(id="price_1", name="Pro", interval="monthly", short_description="Best", raw_price=1000)

    data = plan.to_dict()

    assert data["shortDescription"] == "Best"
    assert data["rawPrice"] == 1000
    assert data["yearlyIncentive"] is None


def test_subscription_status_values():
    assert SubscriptionStatus("past_due") is SubscriptionStatus.PAST_DUE
