"""Money / rounding helpers.

Centralized so line items, totals and recorded orders use identical
rounding and display semantics.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    if not math.isfinite(value):
        return float(value)
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    """Render an amount without a trailing ``.00`` (1000 -> '1,000', 12.5 -> '12.50')."""
    value = round2(value)
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,.2f}"
