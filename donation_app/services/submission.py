"""Submission gate for donation orders.

The gate is a three-state machine:

    EDITING --evaluate()--> READY | BLOCKED
    READY / BLOCKED --any edit--> EDITING

Only READY allows an order to be handed to the order sink. Blocking reasons
are collected together so the donor sees every problem at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from donation_app.models.constants import (
    DONATED_AS_CHILD,
    DONATED_AS_SPOUSE,
    FULFILLMENT_COURIER,
)
from .line_items import INVALID_AMOUNT, LineItem
from .totals import OrderTotals


class GateState(str, Enum):
    EDITING = "editing"
    READY = "ready"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class SubmissionCheck:
    state: GateState
    reasons: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.state is GateState.READY


def blocking_reasons(
    *,
    items: Iterable[LineItem],
    totals: OrderTotals,
    fulfillment: str,
    courier_address: Optional[str],
    donated_as: str,
    donated_for: Optional[str],
    child_form_open: bool,
    relation_name: Optional[str],
) -> List[str]:
    items = list(items)
    reasons: List[str] = []
    for index, item in enumerate(items, start=1):
        if item.validation_error:
            reasons.append(f"Item {index}: {item.validation_error}")
    if any(item.category is None for item in items):
        reasons.append("Please select a category for all items")
    if donated_as == DONATED_AS_CHILD:
        if not donated_for:
            reasons.append("Please select the child you are donating for")
        for index, item in enumerate(items, start=1):
            if item.category is not None and not item.category.is_dynamic:
                reasons.append(
                    f"Item {index}: {item.category.name} is not available when donating for a child"
                )
    if child_form_open:
        reasons.append("Please save or close the child profile form first")
    if fulfillment == FULFILLMENT_COURIER and not (courier_address or "").strip():
        reasons.append("Please provide a courier address")
    if not math.isfinite(totals.net_payable):
        reasons.append(INVALID_AMOUNT)
    elif totals.net_payable <= 0:
        reasons.append("Donation amount must be greater than zero")
    if donated_as == DONATED_AS_SPOUSE and not (relation_name or "").strip():
        reasons.append("Please provide the spouse's name")
    return reasons


class SubmissionGate:
    def __init__(self) -> None:
        self.state = GateState.EDITING
        self.reasons: List[str] = []

    def mark_edited(self) -> None:
        self.state = GateState.EDITING
        self.reasons = []

    def evaluate(self, reasons: List[str]) -> SubmissionCheck:
        self.reasons = list(reasons)
        self.state = GateState.BLOCKED if reasons else GateState.READY
        return SubmissionCheck(self.state, list(self.reasons))


__all__ = ["GateState", "SubmissionCheck", "SubmissionGate", "blocking_reasons"]
