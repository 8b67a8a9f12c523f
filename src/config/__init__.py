"""
Configuration module for the billing portal.

Provides settings, constants, and logging configuration.
"""

from config.settings import (
    get_settings,
    reload_settings,
    Settings,
    BillableSettings,
    PlanSettings,
    BrandSettings,
    FeatureSettings,
)
from config.logging_config import setup_structured_logging, get_logger

__all__ = [
    # Settings
    'get_settings',
    'reload_settings',
    'Settings',
    'BillableSettings',
    'PlanSettings',
    'BrandSettings',
    'FeatureSettings',
    # Logging
    'setup_structured_logging',
    'get_logger',
]
