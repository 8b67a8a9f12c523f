"""
Constants and configuration values for the billing portal.

Defines defaults, Stripe parameters and the skeleton layout.
"""

from typing import Final

# Stripe
STRIPE_API_VERSION: Final[str] = "2025-03-31.basil"
PRICE_PAGE_LIMIT: Final[int] = 100
OPEN_INVOICE_LIMIT: Final[int] = 100
PAID_INVOICES_PER_PAGE: Final[int] = 10
PAYMENT_METHOD_LIMIT: Final[int] = 24

# Currencies without a minor unit (https://stripe.com/docs/currencies#zero-decimal)
ZERO_DECIMAL_CURRENCIES: Final[frozenset] = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})

# Symbols as rendered by the "en" locale
CURRENCY_SYMBOLS: Final[dict] = {
    "usd": "$",
    "eur": "€",
    "gbp": "£",
    "jpy": "¥",
    "cny": "CN¥",
    "inr": "₹",
    "krw": "₩",
    "cad": "CA$",
    "aud": "A$",
    "nzd": "NZ$",
    "hkd": "HK$",
    "mxn": "MX$",
    "brl": "R$",
    "ils": "₪",
    "vnd": "₫",
    "twd": "NT$",
    "php": "₱",
    "xaf": "FCFA",
    "xof": "F CFA",
}

# Presentation
DEFAULT_BRAND_COLOR: Final[str] = "bg-gray-800"
CUSTOM_HEX_BRAND_COLOR: Final[str] = "bg-custom-hex"
DEFAULT_DATE_FORMAT: Final[str] = "%B %-d, %Y"   # January 5, 2025
CARD_EXPIRATION_FORMAT: Final[str] = "%b %Y"      # Jan 2027

# Subscription states
STATE_NONE: Final[str] = "none"
STATE_PENDING: Final[str] = "pending"
STATE_ACTIVE: Final[str] = "active"
STATE_PAST_DUE: Final[str] = "past_due"
STATE_GRACE_PERIOD: Final[str] = "onGracePeriod"
CHECKOUT_STARTED: Final[str] = "subscription_started"

# Route names resolved by the host application
ROUTE_INVOICE_DOWNLOAD: Final[str] = "invoices.download"
ROUTE_DASHBOARD: Final[str] = "dashboard"
ROUTE_TERMS: Final[str] = "terms.show"

# Partial reload header (comma separated list of payload keys)
PARTIAL_DATA_HEADER: Final[str] = "X-Inertia-Partial-Data"

# Skeleton layout
SKELETON_CONFIG_FILE: Final[str] = "testbench.yaml"
SKELETON_ENV_FILE: Final[str] = ".env"
SKELETON_DATABASE: Final[str] = "database/database.sqlite"
SKELETON_GENERATED_FILES: Final[tuple] = (
    "routes/testbench-*",
    "storage/app/public/*",
    "storage/app/*",
    "storage/framework/sessions/*",
)
SKELETON_KEEP_FILES: Final[tuple] = (".gitkeep", ".gitignore")

# Caches cleared before a purge: (label, patterns)
SKELETON_CACHES: Final[tuple] = (
    ("Configuration cache", ("bootstrap/cache/config.*",)),
    ("Cached events", ("bootstrap/cache/events.*",)),
    ("Route cache", ("bootstrap/cache/routes*.*",)),
    ("Compiled views", ("storage/framework/views/*",)),
)

EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
