"""
Display helpers for money and reconciliation status.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from src.config import get_settings
from src.models.reconciliation import ReconciliationStatus


Number = Union[Decimal, int, float, str]


def _symbol(symbol: Optional[str]) -> str:
    return symbol if symbol is not None else get_settings().app.currency_symbol


def format_decimal(value: Number, decimals: int = 2) -> str:
    """Thousands separators and a fixed number of decimals: 1234.5 -> "1,234.50"."""
    amount = Decimal(str(value))
    exponent = Decimal(1).scaleb(-decimals)
    amount = amount.quantize(exponent, rounding=ROUND_HALF_UP)
    return f"{amount:,.{decimals}f}"


def format_currency(value: Number = 0, symbol: Optional[str] = None) -> str:
    """Whole pesos: 5200.5 -> "₱5,201", -30 -> "-₱30"."""
    amount = Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{_symbol(symbol)}{abs(amount):,.0f}"


def format_variance(value: Number, symbol: Optional[str] = None) -> str:
    """Always signed, to the centavo: 200 -> "+₱200.00", -0.5 -> "-₱0.50"."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else "+"
    return f"{sign}{_symbol(symbol)}{format_decimal(abs(amount))}"


def status_label(status: Union[ReconciliationStatus, str]) -> str:
    try:
        return ReconciliationStatus(status).label
    except ValueError:
        return str(status).replace("_", " ").title()
