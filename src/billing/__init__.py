"""Billing portal state: Stripe data assembled for the billing dashboard."""

from billing.stripe_client import StripeClient
from billing.frontend_state import FrontendState
from billing.context import PortalRequest, RouteResolver, NullRouteResolver
from billing.lazy import LazyProp, lazy, resolve_props

__all__ = [
    "StripeClient",
    "FrontendState",
    "PortalRequest",
    "RouteResolver",
    "NullRouteResolver",
    "LazyProp",
    "lazy",
    "resolve_props",
]
