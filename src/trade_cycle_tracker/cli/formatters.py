"""Display formatting for durations, timestamps, and USD/token amounts."""

from datetime import UTC, datetime
from decimal import Decimal


def format_duration(seconds: int | None) -> str:
    """
    Format a duration as e.g. ``'2d 3h 15m'``.

    Seconds are only shown for durations shorter than a day.

    Parameters
    ----------
    seconds : int | None
        Duration in seconds

    Returns
    -------
    str
        Human-readable duration

    """
    seconds = int(seconds or 0)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours % 24 > 0:
        parts.append(f"{hours % 24}h")
    if minutes % 60 > 0:
        parts.append(f"{minutes % 60}m")
    if seconds % 60 > 0 and days == 0:
        parts.append(f"{seconds % 60}s")

    return " ".join(parts) if parts else "0s"


def format_time(timestamp: int) -> str:
    """Format a Unix timestamp (seconds) as a UTC date and time."""
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%b %d, %Y %I:%M %p")


def format_value(amount: Decimal) -> str:
    """Format a USD amount as ``$1,234.56`` or ``-$1,234.56``."""
    formatted = f"{abs(amount):,.2f}"
    return f"-${formatted}" if amount < 0 else f"${formatted}"


def format_token_amount(amount: Decimal, decimals: int = 2) -> str:
    """
    Format a token amount with thousands separators.

    Parameters
    ----------
    amount : Decimal
        Token amount
    decimals : int
        Number of decimal places

    Returns
    -------
    str
        ``'0'`` for zero, scientific notation below 0.01

    """
    if amount == 0:
        return "0"
    if abs(amount) < Decimal("0.01"):
        return f"{amount:.2e}"
    return f"{amount:,.{decimals}f}"


def format_percentage(value: Decimal) -> str:
    """Format a percentage with an explicit sign, e.g. ``'+12.50%'``."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def format_price(price: Decimal) -> str:
    """
    Format a token price in USD, keeping the precision small prices need.

    Parameters
    ----------
    price : Decimal
        Price per token in USD

    Returns
    -------
    str
        ``'$0'`` for zero, scientific notation below $0.000001, 8 decimals
        below $0.01, 6 below $1, and 2 to 6 decimals otherwise

    """
    if price == 0:
        return "$0"
    if price < Decimal("0.000001"):
        return f"${price:.6e}"
    if price < Decimal("0.01"):
        return f"${price:.8f}"
    if price < 1:
        return f"${price:.6f}"

    whole, fraction = f"{price:,.6f}".split(".")
    return f"${whole}.{fraction.rstrip('0').ljust(2, '0')}"


def format_market_cap(market_cap: Decimal) -> str:
    """Format a USD market cap with a K/M/B/T suffix, e.g. ``'$1.50M'``."""
    for divisor, suffix in (
        (Decimal("1e12"), "T"),
        (Decimal("1e9"), "B"),
        (Decimal("1e6"), "M"),
        (Decimal("1e3"), "K"),
    ):
        if market_cap >= divisor:
            return f"${market_cap / divisor:.2f}{suffix}"
    return f"${market_cap:.2f}"
