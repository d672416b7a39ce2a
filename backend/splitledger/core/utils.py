"""
Utility functions for the application.
"""
from typing import Any, Dict, Union
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def round_money(amount: Number) -> Decimal:
    """
    Round an amount to 2 decimal places, half-up.

    Floats are converted through str so that 0.1 stays 0.1 instead of its
    binary approximation.
    """
    if isinstance(amount, float):
        amount = str(amount)
    if not isinstance(amount, Decimal):
        amount = Decimal(amount)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(part: Decimal, total: Decimal) -> Decimal:
    """Share of total as a rounded percentage (0-100)."""
    if total == 0:
        return Decimal("0.00")
    return round_money(part / total * 100)


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
