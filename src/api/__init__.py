"""
API module for the billing portal.

Provides the FastAPI application and routes serving the billing dashboard.
"""

from api.app import create_app

__all__ = ['create_app']
