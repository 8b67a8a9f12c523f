"""Billing portal API endpoints."""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from loguru import logger
from starlette.routing import NoMatchFound

from billing.context import PortalRequest
from billing.frontend_state import FrontendState
from billing.lazy import parse_partial_header, resolve_props
from billing.stripe_client import StripeClient
from config.constants import PARTIAL_DATA_HEADER, ROUTE_INVOICE_DOWNLOAD
from config.settings import Settings, get_settings
from core.exceptions import ConfigurationError
from core.models import Billable, PortalUser

# (request, billable_type, billable_id) -> (billable, current user), or None when not found / not allowed
BillableResolver = Callable[[Request, str, str], Awaitable[Optional[Tuple[Billable, PortalUser]]]]

router = APIRouter(tags=["billing"])


class StarletteRouteResolver:
    """Named routes of the running application."""

    def __init__(self, request: Request):
        self.request = request

    def has(self, name: str) -> bool:
        return any(getattr(route, "name", None) == name for route in self.request.app.routes)

    def url_for(self, name: str, **params: Any) -> str:
        try:
            return str(self.request.url_for(name, **params))
        except NoMatchFound as e:
            raise LookupError(f"Route [{name}] not defined.") from e


@dataclass
class PortalContext:
    billable_type: str
    billable: Billable
    user: PortalUser


def get_stripe_client(request: Request, settings: Settings = Depends(get_settings)) -> StripeClient:
    """Stripe client shared by the application, created on first use."""
    client = getattr(request.app.state, "stripe_client", None)
    if client is None:
        client = StripeClient(api_key=settings.stripe_secret, api_version=settings.stripe_api_version)
        request.app.state.stripe_client = client
    return client


async def get_portal_context(
    request: Request,
    billable_type: str,
    billable_id: str,
    settings: Settings = Depends(get_settings)
) -> PortalContext:
    """Resolve the billable of the URL through the application's resolver."""
    if billable_type not in settings.billables:
        raise HTTPException(status_code=404, detail="Unknown billable type")

    resolver: Optional[BillableResolver] = getattr(request.app.state, "billable_resolver", None)
    if resolver is None:
        raise ConfigurationError("No billable resolver configured (BILLING_PORTAL_BILLABLE_RESOLVER).")

    resolved = await resolver(request, billable_type, billable_id)
    if resolved is None:
        raise HTTPException(status_code=404, detail="Billable not found")

    billable, user = resolved
    return PortalContext(billable_type=billable_type, billable=billable, user=user)


@router.get("/{billable_type}/{billable_id}", name="billing.portal")
async def show_portal(
    request: Request,
    context: PortalContext = Depends(get_portal_context),
    stripe_client: StripeClient = Depends(get_stripe_client),
    settings: Settings = Depends(get_settings)
):
    """
    Billing dashboard payload.

    A partial reload lists the wanted keys in the X-Inertia-Partial-Data
    header; lazy keys (balance, invoices) are only sent that way.
    """
    portal_request = PortalRequest(
        user=context.user,
        path=request.url.path,
        query=dict(request.query_params),
        routes=StarletteRouteResolver(request),
    )

    state = FrontendState(stripe_client, settings)
    props = await asyncio.to_thread(state.current, context.billable_type, context.billable, portal_request)

    only = parse_partial_header(request.headers.get(PARTIAL_DATA_HEADER))
    return await resolve_props(props, only)


@router.get("/{billable_type}/{billable_id}/invoices/{invoice_id}", name=ROUTE_INVOICE_DOWNLOAD)
async def download_invoice(
    invoice_id: str,
    context: PortalContext = Depends(get_portal_context),
    stripe_client: StripeClient = Depends(get_stripe_client)
):
    """Redirect to the Stripe hosted PDF of one of the billable's invoices."""
    billable = context.billable
    if not billable.has_stripe_id():
        raise HTTPException(status_code=404, detail="Invoice not found")

    try:
        invoice = await asyncio.to_thread(stripe_client.retrieve_invoice, invoice_id)
    except stripe.InvalidRequestError:
        raise HTTPException(status_code=404, detail="Invoice not found")

    if invoice.get("customer") != billable.stripe_id:
        logger.warning(f"Invoice {invoice_id} requested for foreign billable {context.billable_type} {billable.id}")
        raise HTTPException(status_code=404, detail="Invoice not found")

    pdf_url = invoice.get("invoice_pdf")
    if not pdf_url:
        raise HTTPException(status_code=404, detail="Invoice PDF not available yet")

    return RedirectResponse(pdf_url, status_code=302)
