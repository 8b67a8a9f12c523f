"""Plan catalog: configured plans enriched with their Stripe prices."""

from typing import Iterable, List, Optional

from loguru import logger

from billing.formatting import format_plan_price
from config.settings import BillableSettings
from core.exceptions import PriceNotFoundError
from core.models import Plan


def configured_plans(billable: BillableSettings) -> List[Plan]:
    """
    Expand the configured plans into one Plan per billing interval.

    Monthly plans come first, in configuration order, then yearly ones.
    """
    monthly, yearly = [], []

    for plan in billable.plans:
        common = dict(
            name=plan.name,
            short_description=plan.short_description,
            features=list(plan.features),
            active=not plan.archived,
            options=dict(plan.options),
            trial_days=billable.trial_days,
        )
        if plan.monthly_id:
            monthly.append(Plan(id=plan.monthly_id, interval="monthly", **common))
        if plan.yearly_id:
            yearly.append(Plan(id=plan.yearly_id, interval="yearly", yearly_incentive=plan.yearly_incentive, **common))

    return monthly + yearly


def attach_prices(plans: Iterable[Plan], prices: Iterable) -> List[Plan]:
    """
    Fill raw_price / price / currency of each plan from its Stripe price.

    Raises:
        PriceNotFoundError: If a plan's price does not exist in Stripe
    """
    by_id = {price["id"]: price for price in prices}
    priced = []

    for plan in plans:
        stripe_price = by_id.get(plan.id)
        if stripe_price is None:
            logger.error(f"Configured price {plan.id} ({plan.name}) is missing in Stripe")
            raise PriceNotFoundError(plan.id)

        unit_amount = stripe_price.get("unit_amount") or 0
        priced.append(plan.model_copy(update={
            "raw_price": unit_amount,
            "price": format_plan_price(unit_amount, stripe_price["currency"]),
            "currency": stripe_price["currency"],
        }))

    return priced


def find_plan(plans: Iterable[Plan], price_id: Optional[str]) -> Optional[Plan]:
    return next((plan for plan in plans if plan.id == price_id), None)


def active_plans(plans: Iterable[Plan], interval: str) -> List[Plan]:
    return [plan for plan in plans if plan.interval == interval and plan.active]
