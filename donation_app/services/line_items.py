"""Line-item resolver.

Turns a (category, donor input) pair into the item's payable amount, weight
and packet contribution, applying the rules of the category's kind:

- standard: amount and weight scale with quantity; amount is not editable.
- service: quantity only scales the *minimum* amount; the donor types the
  amount and it is validated against that minimum. No weight or packets.
- dynamic: quantity is pinned to 1; the donor types the amount. Weight is
  not computed per item (the order-level floor handles it).

Quantity input is kept as typed while editing (blank stays blank) and is
coerced to a positive integer by :func:`commit_quantity`, the "blur" step.
All computations use the coerced value, so derived fields never depend on a
half-typed quantity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from donation_app.models.category import Category, CategoryKind
from .money import format_amount, round2


INVALID_AMOUNT = "Please enter a valid amount"
MAX_QUANTITY = 10_000
MAX_AMOUNT = 10_000_000_000


@dataclass
class LineItem:
    category: Optional[Category] = None
    quantity: Optional[int] = 1
    amount: float = 0.0
    weight_grams: float = 0.0
    packet_count: int = 0
    minimum_amount: float = 0.0
    validation_error: Optional[str] = None
    amount_invalid: bool = False

    @property
    def category_id(self) -> Optional[str]:
        return self.category.id if self.category else None

    @property
    def kind(self) -> Optional[CategoryKind]:
        return self.category.kind if self.category else None

    @property
    def effective_quantity(self) -> int:
        if self.category is not None and self.category.is_dynamic:
            return 1
        return coerce_quantity(self.quantity)

    @property
    def amount_editable(self) -> bool:
        return self.kind in (CategoryKind.SERVICE, CategoryKind.DYNAMIC)

    @property
    def quantity_editable(self) -> bool:
        return self.kind in (CategoryKind.STANDARD, CategoryKind.SERVICE)


def parse_quantity(raw: Any) -> Optional[int]:
    """Parse typed quantity input; blank, non-numeric or huge gives None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        qty = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            qty = int(text)
        except ValueError:
            try:
                qty = int(float(text))
            except (ValueError, OverflowError):
                return None
    return qty if qty <= MAX_QUANTITY else None


def coerce_quantity(raw: Any) -> int:
    qty = parse_quantity(raw)
    return qty if qty is not None and qty >= 1 else 1


def parse_amount(raw: Any) -> Optional[float]:
    """Parse typed amount input; blank gives 0, non-finite or out-of-range gives None."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        if not text:
            return 0.0
        try:
            value = float(text)
        except ValueError:
            return 0.0
    return value if math.isfinite(value) and abs(value) <= MAX_AMOUNT else None


def minimum_error(category: Category, minimum: float) -> str:
    return f"Minimum amount for {category.name} is {format_amount(minimum)}"


def resolve(item: LineItem) -> LineItem:
    """Recompute every derived field of ``item`` from its inputs (in place)."""
    category = item.category
    item.validation_error = None
    if category is None:
        item.amount = 0.0
        item.weight_grams = 0.0
        item.packet_count = 0
        item.minimum_amount = 0.0
        return item

    if category.kind is CategoryKind.STANDARD:
        qty = item.effective_quantity
        item.amount = round2(category.unit_rate * qty)
        item.weight_grams = category.unit_weight_grams * qty
        item.packet_count = qty if category.unit_is_packet else 0
        item.minimum_amount = item.amount
        return item

    if category.kind is CategoryKind.SERVICE:
        item.minimum_amount = round2(category.unit_rate * item.effective_quantity)
    else:
        item.quantity = 1
        item.minimum_amount = round2(category.min_amount)
    item.weight_grams = 0.0
    item.packet_count = 0

    if item.amount_invalid:
        item.validation_error = INVALID_AMOUNT
    elif item.amount < 0:
        item.validation_error = "Amount cannot be negative"
    elif 0 < item.amount < item.minimum_amount:
        item.validation_error = minimum_error(category, item.minimum_amount)
    return item


def select_category(item: LineItem, category: Category) -> LineItem:
    """Switch the item's category, resetting everything to that kind's defaults."""
    item.category = category
    item.quantity = 1
    item.amount = round2(category.unit_rate)
    item.amount_invalid = False
    return resolve(item)


def clear_category(item: LineItem) -> LineItem:
    item.category = None
    item.quantity = 1
    item.amount_invalid = False
    return resolve(item)


def set_quantity(item: LineItem, raw: Any) -> LineItem:
    if item.category is not None and item.category.is_dynamic:
        item.quantity = 1
        return resolve(item)
    item.quantity = parse_quantity(raw)
    return resolve(item)


def commit_quantity(item: LineItem) -> LineItem:
    item.quantity = item.effective_quantity
    return resolve(item)


def set_amount(item: LineItem, raw: Any) -> LineItem:
    """Store a donor-typed amount; ignored for categories with a fixed amount."""
    if not item.amount_editable:
        return resolve(item)
    value = parse_amount(raw)
    item.amount_invalid = value is None
    item.amount = 0.0 if value is None else round2(value)
    return resolve(item)


__all__ = [
    "LineItem",
    "parse_quantity",
    "coerce_quantity",
    "parse_amount",
    "resolve",
    "select_category",
    "clear_category",
    "set_quantity",
    "commit_quantity",
    "set_amount",
]
