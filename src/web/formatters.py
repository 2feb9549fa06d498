"""Display formatting for API payloads (US locale)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal


def format_price(value: Decimal | float | int | None) -> str:
    """Format as US currency: 1234.5 -> "$1,234.50"."""
    if value is None:
        return "-"
    d = Decimal(str(value))
    return f"${d:,.2f}"


def format_date(value: date | None) -> str:
    """Format as MM/DD/YYYY."""
    if value is None:
        return "-"
    return value.strftime("%m/%d/%Y")


def format_time_saved(minutes: int) -> str:
    """Format minutes as "Xh Ym", or "Ym" under an hour."""
    hours, mins = divmod(max(minutes, 0), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
