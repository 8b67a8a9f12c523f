"""
Health check endpoint for the billing portal.

Provides system health status for load balancers and monitoring.
"""

from fastapi import APIRouter, Depends

from config.settings import Settings, get_settings

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Stripe itself is not called; only whether it is configured is reported.
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "stripe": "configured" if settings.stripe_secret else "missing",
        "billables": sorted(settings.billables),
    }
