"""
Core module for the billing portal.

Exports the billing models and exceptions for easy access.
"""

from core.models import (
    Billable,
    Subscription,
    SubscriptionStatus,
    PortalUser,
    Plan,
)

from core.exceptions import (
    BillingPortalError,
    ConfigurationError,
    MissingStripeKeyError,
    UnknownBillableTypeError,
    PaymentProviderError,
    PriceNotFoundError,
    PurgeError,
)

__all__ = [
    # Models
    'Billable',
    'Subscription',
    'SubscriptionStatus',
    'PortalUser',
    'Plan',
    # Exceptions
    'BillingPortalError',
    'ConfigurationError',
    'MissingStripeKeyError',
    'UnknownBillableTypeError',
    'PaymentProviderError',
    'PriceNotFoundError',
    'PurgeError',
]
