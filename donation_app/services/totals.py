"""Order totalizer.

Folds the line items and the courier charge into :class:`OrderTotals`. The
function is pure and is called after every edit; nothing is cached between
calls.

Weight floor: the smallest positive ``min_value_grams`` among *all* dynamic
categories in the catalog (not only the selected ones) is the least weight a
non-empty order is fulfilled with. An order with zero raw weight stays at
zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from donation_app.models.category import Category
from .line_items import LineItem
from .money import round2


@dataclass(frozen=True)
class OrderTotals:
    total_amount: float = 0.0
    raw_weight_grams: float = 0.0
    total_weight_grams: float = 0.0
    total_packet_count: int = 0
    courier_charge: float = 0.0
    net_payable: float = 0.0

    @property
    def weight_rounded_up_by(self) -> float:
        return self.total_weight_grams - self.raw_weight_grams

    def as_dict(self) -> dict:
        return {
            "total_amount": self.total_amount,
            "raw_weight_grams": self.raw_weight_grams,
            "total_weight_grams": self.total_weight_grams,
            "weight_rounded_up_by": self.weight_rounded_up_by,
            "total_packet_count": self.total_packet_count,
            "courier_charge": self.courier_charge,
            "net_payable": self.net_payable,
        }


def min_weight_floor(catalog: Iterable[Category]) -> float:
    thresholds = [
        c.dynamic.min_value_grams
        for c in catalog
        if c.is_dynamic and c.dynamic.min_value_grams > 0
    ]
    return min(thresholds) if thresholds else 0.0


def apply_weight_floor(raw_weight: float, floor: float) -> float:
    if raw_weight == 0 or raw_weight >= floor:
        return raw_weight
    return floor


def compute_totals(
    items: Iterable[LineItem],
    catalog: Iterable[Category],
    courier_charge: float,
) -> OrderTotals:
    items = list(items)
    total_amount = round2(sum(item.amount or 0 for item in items))
    raw_weight = sum(item.weight_grams or 0 for item in items)
    packets = sum(item.packet_count or 0 for item in items)
    final_weight = apply_weight_floor(raw_weight, min_weight_floor(catalog))
    courier_charge = round2(courier_charge)
    return OrderTotals(
        total_amount=total_amount,
        raw_weight_grams=raw_weight,
        total_weight_grams=final_weight,
        total_packet_count=packets,
        courier_charge=courier_charge,
        net_payable=round2(total_amount + courier_charge),
    )


def rounded_up_note(totals: OrderTotals) -> str | None:
    """Post-payment note shown when the weight floor raised the order weight."""
    extra = totals.weight_rounded_up_by
    if extra <= 0:
        return None
    return (
        f"Your Mahaprasad was rounded up by {extra:g} g to the minimum "
        f"fulfillment weight of {totals.total_weight_grams:g} g."
    )


__all__ = [
    "OrderTotals",
    "min_weight_floor",
    "apply_weight_floor",
    "compute_totals",
    "rounded_up_note",
]
