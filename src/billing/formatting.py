"""Amount and date formatting for the billing dashboard."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from config.constants import CURRENCY_SYMBOLS, ZERO_DECIMAL_CURRENCIES


def format_amount(amount: int, currency: str) -> str:
    """
    Format an amount given in the currency's smallest unit.

    Examples:
        format_amount(1000, "usd")  -> "$10.00"
        format_amount(-550, "eur")  -> "-€5.50"
        format_amount(1000, "jpy")  -> "¥1,000"
        format_amount(1000, "chf")  -> "CHF 10.00"
    """
    code = currency.lower()
    negative = amount < 0
    amount = abs(int(amount))

    if code in ZERO_DECIMAL_CURRENCIES:
        number = f"{amount:,}"
    else:
        number = f"{Decimal(amount) / 100:,.2f}"

    symbol = CURRENCY_SYMBOLS.get(code)
    formatted = f"{symbol}{number}" if symbol else f"{code.upper()} {number}"

    return f"-{formatted}" if negative else formatted


def format_plan_price(amount: int, currency: str) -> str:
    """Format a plan price, dropping an empty fractional part ("$10.00" -> "$10")."""
    price = format_amount(amount, currency)

    if price.endswith(".00"):
        price = price[:-3]

    if price.endswith(".0"):
        price = price[:-2]

    return price


def format_date(value: date, fmt: str) -> str:
    """
    strftime with portable support for "%-d" (day without padding).
    """
    if "%-d" in fmt:
        fmt = fmt.replace("%-d", str(value.day))
    return value.strftime(fmt)


def from_timestamp(timestamp: Optional[int]) -> Optional[datetime]:
    """Stripe timestamps are seconds since the epoch, UTC."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)
