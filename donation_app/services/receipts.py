"""Receipt id helpers.

Receipt ids look like ``SDP/C0001/25-26``: prefix, payment-method code plus a
sequence number, and the financial year. The financial year runs from
August 1st to July 31st; sequences restart every financial year and are kept
separately per method code.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from donation_app.models.constants import PAYMENT_METHOD_CODES

UNKNOWN_METHOD_CODE = "X"
FINANCIAL_YEAR_START_MONTH = 8


def financial_year(today: Optional[date] = None) -> str:
    today = today or date.today()
    start = today.year if today.month >= FINANCIAL_YEAR_START_MONTH else today.year - 1
    return f"{str(start)[-2:]}-{str(start + 1)[-2:]}"


def method_code(method: str) -> str:
    return PAYMENT_METHOD_CODES.get(method, UNKNOWN_METHOD_CODE)


def format_receipt_id(prefix: str, code: str, number: int, fy: str) -> str:
    return f"{prefix}/{code}{number:04d}/{fy}"


__all__ = ["financial_year", "method_code", "format_receipt_id"]
