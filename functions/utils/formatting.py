"""Number and currency formatting shared by the pipeline and the renderers."""

import math
from typing import Optional, Union

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (round(80.5) == 80); eligibility
    and cost ranges need 80.5 -> 81.
    """
    return int(math.floor(value + 0.5))


def format_currency(amount: Optional[Number]) -> str:
    """Format a dollar amount: 6200 -> "$6,200", 45.5 -> "$45.50"."""
    if amount is None:
        return "$0"
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def format_percent(value: Optional[Number]) -> str:
    if value is None:
        return "N/A"
    return f"{round_half_up(value)}%"
