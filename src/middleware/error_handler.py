"""
Error tracking and exception handling for the billing portal API.

Integrates Sentry for production error aggregation and maps billing and
Stripe failures to JSON responses.
"""

import logging

import sentry_sdk
import stripe
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from core.exceptions import BillingPortalError


def init_sentry(
    dsn: str,
    environment: str,
    sample_rate: float = 0.1,
    debug: bool = False
) -> None:
    """
    Initialize Sentry with FastAPI integration.

    Args:
        dsn: Sentry DSN from dashboard
        environment: 'development' or 'production'
        sample_rate: Traces sample rate (1.0 for dev, 0.1 for prod)
        debug: Enable debug mode (verbose logging)
    """
    if not dsn:
        logger.warning("SENTRY_DSN not configured - error tracking disabled")
        return

    traces_sample_rate = 1.0 if environment == "development" else sample_rate

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        debug=debug,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR
            )
        ],
        before_send_transaction=lambda event, hint: None if event.get("transaction", "").startswith("/health") else event,
        before_send=_filter_sensitive_data
    )

    logger.info(f"Sentry initialized: environment={environment}, traces_sample_rate={traces_sample_rate}")


def _filter_sensitive_data(event, hint):
    """
    Filter sensitive data before sending to Sentry.

    Removes: Authorization headers, cookies, Stripe keys.
    """
    if "request" in event:
        event["request"]["headers"] = {
            k: v for k, v in event["request"].get("headers", {}).items()
            if k.lower() not in ["authorization", "cookie", "stripe-signature"]
        }

    if "extra" in event:
        for key in ["stripe_secret", "api_key", "secret", "token"]:
            event["extra"].pop(key, None)

    return event


async def billing_error_handler(request: Request, exc: BillingPortalError) -> JSONResponse:
    """Known billing failures (misconfiguration, missing prices)."""
    sentry_sdk.capture_exception(exc)
    logger.error(f"Billing error on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


async def stripe_error_handler(request: Request, exc: stripe.StripeError) -> JSONResponse:
    """Stripe is unreachable or refused the request."""
    sentry_sdk.capture_exception(exc)
    logger.error(
        f"Stripe error on {request.method} {request.url.path}: {exc}",
        extra={"stripe_request_id": getattr(exc, "request_id", None)}
    )

    return JSONResponse(
        status_code=502,
        content={"detail": "The payments provider could not be reached. Please try again later."}
    )


async def sentry_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler that captures errors in Sentry.

    Returns a generic error message to the user.
    """
    sentry_sdk.capture_exception(exc)

    logger.opt(exception=exc).error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}"
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "An error occurred. Our team has been notified."}
    )
