"""
FastAPI application for the billing portal.

Serves the billing dashboard payload and invoice downloads.
"""

import importlib
import time
from typing import Optional

import stripe
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# Import correlation ID middleware
from asgi_correlation_id import CorrelationIdMiddleware, correlation_id

from loguru import logger

from api.health import router as health_router
from api.portal import BillableResolver, router as portal_router
from billing.stripe_client import StripeClient
from config.logging_config import setup_structured_logging
from config.settings import Settings, get_settings
from core.exceptions import BillingPortalError, ConfigurationError
from middleware.error_handler import (
    init_sentry, billing_error_handler, stripe_error_handler, sentry_exception_handler
)


# ============================================================================
# Middleware
# ============================================================================

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # HSTS only for HTTPS (skip in development)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with correlation ID, method, path, status, latency."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Set by CorrelationIdMiddleware (taken from X-Request-ID or generated)
        with logger.contextualize(correlation_id=correlation_id.get() or "-"):
            response = await call_next(request)

            latency_ms = (time.time() - start_time) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({latency_ms:.1f} ms)"
            )

            return response


# ============================================================================
# Billable resolver
# ============================================================================

def load_resolver(path: str) -> BillableResolver:
    """
    Import a billable resolver from "package.module:attribute".

    Raises:
        ConfigurationError: If the path is malformed or cannot be imported
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(f"Invalid billable resolver [{path}], expected 'module:attribute'.")

    try:
        module = importlib.import_module(module_name)
        return getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load billable resolver [{path}].", {"error": str(e)}) from e


# ============================================================================
# Application Factory
# ============================================================================

def create_app(
    resolver: Optional[BillableResolver] = None,
    stripe_client: Optional[StripeClient] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        resolver: Coroutine loading (billable, user) for a request;
            defaults to the BILLING_PORTAL_BILLABLE_RESOLVER setting
        stripe_client: Stripe client to use (created on first request otherwise)
        settings: Settings override (tests)

    Returns:
        FastAPI application instance
    """
    explicit_settings = settings is not None
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Billing dashboard state backed by Stripe",
        version="1.0.0"
    )

    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    if resolver is None and settings.billable_resolver:
        resolver = load_resolver(settings.billable_resolver)
    app.state.billable_resolver = resolver
    app.state.stripe_client = stripe_client

    app.add_exception_handler(BillingPortalError, billing_error_handler)
    app.add_exception_handler(stripe.StripeError, stripe_error_handler)

    # Global exception handler for Sentry
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        return await sentry_exception_handler(request, exc)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Inertia", "X-Inertia-Partial-Data"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware, validator=None)

    @app.on_event("startup")
    async def startup_event():
        setup_structured_logging(level=settings.log_level)
        init_sentry(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment,
            sample_rate=settings.sentry_traces_sample_rate,
            debug=(settings.sentry_environment == "development")
        )
        if app.state.billable_resolver is None:
            logger.warning("No billable resolver configured - portal endpoints will fail")

    app.include_router(health_router, tags=["health"])
    app.include_router(portal_router, prefix=f"/{settings.portal_path}")

    return app
