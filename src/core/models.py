"""
Core data models for the billing portal.

This module defines the Pydantic models shared by the billing state
assembler and the HTTP layer: billables, their locally known
subscriptions, the current user and the plan catalog entries.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SubscriptionStatus(str, Enum):
    """Stripe subscription statuses."""
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"


# Statuses that never count as active
INACTIVE_STATUSES = frozenset({
    SubscriptionStatus.INCOMPLETE,
    SubscriptionStatus.INCOMPLETE_EXPIRED,
    SubscriptionStatus.PAST_DUE,
    SubscriptionStatus.UNPAID,
})


class Subscription(BaseModel):
    """
    Local copy of a Stripe subscription owned by a billable.

    Mirrors the columns kept in sync by the Stripe webhooks: the status,
    the current price and the trial / cancellation dates.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = None
    type: str = "default"
    stripe_id: str
    stripe_status: SubscriptionStatus
    stripe_price: Optional[str] = None
    quantity: Optional[int] = 1
    trial_ends_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator('trial_ends_at', 'ends_at', 'created_at')
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    def incomplete(self) -> bool:
        return self.stripe_status == SubscriptionStatus.INCOMPLETE

    def past_due(self) -> bool:
        return self.stripe_status == SubscriptionStatus.PAST_DUE

    def canceled(self) -> bool:
        """Cancellation was requested (the subscription may still run)."""
        return self.ends_at is not None

    def on_grace_period(self) -> bool:
        """Canceled, but the paid period has not ended yet."""
        return self.ends_at is not None and self.ends_at > utcnow()

    def ended(self) -> bool:
        return self.canceled() and not self.on_grace_period()

    def active(self) -> bool:
        return not self.ended() and self.stripe_status not in INACTIVE_STATUSES

    def on_trial(self) -> bool:
        return self.trial_ends_at is not None and self.trial_ends_at > utcnow()


class Billable(BaseModel):
    """
    An entity (user, team...) associated with a Stripe customer.

    Payment method columns (pm_*) are the denormalized summary of the
    default card, as stored by the host application.
    """
    id: int | str
    name: str
    email: Optional[str] = None
    stripe_id: Optional[str] = None
    pm_type: Optional[str] = None
    pm_last_four: Optional[str] = None
    pm_expiration: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    subscriptions: List[Subscription] = Field(default_factory=list)

    @field_validator('trial_ends_at')
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    def has_stripe_id(self) -> bool:
        return bool(self.stripe_id)

    def subscription(self, type: str = "default") -> Optional[Subscription]:
        """Get the most recent subscription of the given type."""
        candidates = [s for s in self.subscriptions if s.type == type]
        if not candidates:
            return None
        return max(candidates, key=lambda s: s.created_at)

    def on_generic_trial(self) -> bool:
        """Trial granted without a subscription (e.g. at registration)."""
        return self.trial_ends_at is not None and self.trial_ends_at > utcnow()

    def generic_trial_ends_at(self) -> Optional[datetime]:
        return self.trial_ends_at if self.on_generic_trial() else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert billable to a JSON-safe dictionary (without subscriptions)."""
        return self.model_dump(mode="json", exclude={"subscriptions"})


class PortalUser(BaseModel):
    """The authenticated user looking at the portal."""
    name: str
    email: Optional[str] = None
    profile_photo_url: Optional[str] = None


class Plan(BaseModel):
    """
    A purchasable plan for one interval, enriched with its Stripe price.

    Serialized with camelCase keys for the dashboard.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    interval: Literal["monthly", "yearly"]
    short_description: str = ""
    features: List[str] = Field(default_factory=list)
    active: bool = True
    options: Dict[str, Any] = Field(default_factory=dict)
    yearly_incentive: Optional[str] = None
    trial_days: Optional[int] = None

    # Filled from the Stripe price
    raw_price: Optional[int] = None
    price: Optional[str] = None
    currency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
