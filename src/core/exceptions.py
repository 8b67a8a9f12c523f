"""
Exceptions raised by the billing portal.

Everything derives from BillingPortalError so the API maps all of them
with a single handler; status_code is the HTTP status it responds with.
"""


class BillingPortalError(Exception):
    """Base exception of the billing portal."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ==================== Configuration Errors ====================

class ConfigurationError(BillingPortalError):
    """
    Error in system configuration.

    Raised when required configuration is missing or invalid.
    """
    pass


class MissingStripeKeyError(ConfigurationError):
    """Raised when the Stripe secret key is not configured."""
    pass


class UnknownBillableTypeError(ConfigurationError):
    """Raised when a billable type has no configuration."""
    pass


# ==================== Payment Provider Errors ====================

class PaymentProviderError(BillingPortalError):
    """
    Base error for payments provider issues.

    Raised when Stripe data does not match what the portal expects.
    """
    pass


class PriceNotFoundError(PaymentProviderError):
    """Raised when a configured plan price is missing from the Stripe account."""

    def __init__(self, price_id: str):
        super().__init__(
            f"Price [{price_id}] does not exist in your Stripe account.",
            {"price_id": price_id}
        )
        self.price_id = price_id


# ==================== Skeleton Errors ====================

class PurgeError(BillingPortalError):
    """Raised when the skeleton cannot be purged."""
    pass
