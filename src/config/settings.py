"""
Configuration management for the billing portal.

All configuration comes from environment variables or .env file.
Nested values use a double underscore, e.g. BILLING_PORTAL_BRAND__COLOR.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal, Optional
from functools import lru_cache

from core.exceptions import UnknownBillableTypeError
from config.constants import (
    DEFAULT_BRAND_COLOR, DEFAULT_DATE_FORMAT, STRIPE_API_VERSION
)


class PlanSettings(BaseModel):
    """A plan as configured for one billable type."""
    name: str
    short_description: str = ""
    monthly_id: Optional[str] = None
    yearly_id: Optional[str] = None
    yearly_incentive: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    archived: bool = False
    options: dict = Field(default_factory=dict)

    @model_validator(mode='after')
    def require_a_price(self):
        """A plan is useless without at least one Stripe price."""
        if not self.monthly_id and not self.yearly_id:
            raise ValueError(f"Plan '{self.name}' needs a monthly_id or a yearly_id")
        return self


class BillableSettings(BaseModel):
    """Per billable type settings (e.g. "user", "team")."""
    default_interval: Literal["monthly", "yearly"] = "monthly"
    seat_name: Optional[str] = None
    trial_days: Optional[int] = None
    plans: list[PlanSettings] = Field(default_factory=list)


class BrandSettings(BaseModel):
    logo: Optional[str] = None
    color: str = DEFAULT_BRAND_COLOR


class FeatureSettings(BaseModel):
    """Optional portal features."""
    billing_address_collection: bool = False
    billing_address_required: bool = False
    eu_vat_collection: bool = False
    invoice_emails_custom_addresses: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BILLING_PORTAL_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Billing Portal"

    # Stripe
    stripe_key: str = ""        # publishable key, shipped to the frontend
    stripe_secret: str = ""
    stripe_api_version: str = STRIPE_API_VERSION
    currency: str = "usd"

    # Paths
    cashier_path: str = "stripe"
    portal_path: str = "billing"

    # Presentation
    date_format: str = DEFAULT_DATE_FORMAT
    dashboard_url: Optional[str] = None
    terms_url: Optional[str] = None
    brand: BrandSettings = Field(default_factory=BrandSettings)
    features: FeatureSettings = Field(default_factory=FeatureSettings)

    # Billable types and their plan catalogs
    billables: dict[str, BillableSettings] = Field(default_factory=dict)

    # "module:attribute" of the coroutine that loads a billable for a request
    billable_resolver: Optional[str] = None

    # Sentry
    sentry_dsn: str = ""
    sentry_environment: str = "development"
    sentry_traces_sample_rate: float = 0.1

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    log_level: str = "INFO"

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.lower()

    @field_validator('portal_path', 'cashier_path')
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return v.strip("/")

    def billable(self, billable_type: str) -> BillableSettings:
        """
        Get the settings of a billable type.

        Raises:
            UnknownBillableTypeError: If the type is not configured
        """
        if billable_type not in self.billables:
            raise UnknownBillableTypeError(
                f"Billable type [{billable_type}] is not configured.",
                {"configured": sorted(self.billables)}
            )
        return self.billables[billable_type]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from environment."""
    get_settings.cache_clear()
    return get_settings()
