"""Donation session: the edit loop behind the "make a donation" flow.

A session owns the donor's in-progress line items, fulfillment choice,
address and relationship fields. Every mutating call re-resolves the edited
item, recomputes the order totals from scratch and moves the submission gate
back to EDITING. ``submit`` evaluates the gate and only hands a finalized
:class:`DonationOrder` to the order sink when the gate is READY.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from donation_app.core.errors import (
    CategoryNotAllowedError,
    DonationError,
    DuplicateCategoryError,
    LastItemError,
    SubmissionBlockedError,
    SubmissionInFlightError,
)
from donation_app.models.category import Category
from donation_app.models.constants import (
    DONATED_AS_CHILD,
    DONATED_AS_SELF,
    DONATED_AS_SPOUSE,
    FULFILLMENT_COURIER,
    FULFILLMENT_SELF_COLLECT,
    FULFILLMENTS,
)
from . import line_items
from .catalog import SessionCatalog
from .line_items import LineItem
from .orders import DonationOrder, OrderLine, OrderSink, SubmissionResult
from .region import RegionClassification, classify_address, courier_charge_for
from .submission import SubmissionCheck, SubmissionGate, blocking_reasons
from .totals import OrderTotals, compute_totals

logger = logging.getLogger("donation_app.session")

DEFAULT_SELF_COLLECT_LABEL = "Will collect from Durga Sthan"


class DonationSession:
    def __init__(
        self,
        catalog: SessionCatalog,
        donor_id: str,
        self_collect_label: str = DEFAULT_SELF_COLLECT_LABEL,
    ):
        self.catalog = catalog.load()
        self.donor_id = donor_id
        self.self_collect_label = self_collect_label
        self.items: List[LineItem] = [LineItem()]
        self.fulfillment = FULFILLMENT_SELF_COLLECT
        self.courier_address = ""
        self.donated_as = DONATED_AS_SELF
        self.donated_for: Optional[str] = None
        self.donated_for_name: Optional[str] = None
        self.relation_name = ""
        self.child_form_open = False
        self.method = "Online"
        self.remarks = ""
        self.gate = SubmissionGate()
        self.submitting = False
        self.closed = False
        self.totals = OrderTotals()
        self.classification: RegionClassification = classify_address("")
        self._recompute()

    # Internal --------------------------------------------------
    def _recompute(self) -> None:
        self.classification = classify_address(self.courier_address)
        charge = courier_charge_for(
            self.fulfillment,
            self.courier_address,
            self.catalog.charges,
            classification=self.classification,
        )
        self.totals = compute_totals(self.items, self.catalog.categories, charge)
        self.gate.mark_edited()

    def _item(self, index: int) -> LineItem:
        self._ensure_open()
        if not 0 <= index < len(self.items):
            raise DonationError(f"No donation item at position {index + 1}")
        return self.items[index]

    def _ensure_open(self) -> None:
        if self.closed:
            raise DonationError("This donation session has been closed")

    def _allowed(self, category: Category) -> bool:
        return self.donated_as != DONATED_AS_CHILD or category.is_dynamic

    # Items -----------------------------------------------------
    def add_item(self) -> int:
        self._ensure_open()
        self.items.append(LineItem())
        self._recompute()
        return len(self.items) - 1

    def remove_item(self, index: int) -> None:
        self._item(index)
        if len(self.items) <= 1:
            raise LastItemError("A donation needs at least one item")
        del self.items[index]
        self._recompute()

    def available_categories(self, index: int) -> List[Category]:
        """Categories selectable for item ``index`` (excludes other items' picks)."""
        taken = {
            item.category_id
            for i, item in enumerate(self.items)
            if i != index and item.category_id is not None
        }
        return [
            c for c in self.catalog.categories if c.id not in taken and self._allowed(c)
        ]

    def choose_category(self, index: int, category_id: str) -> LineItem:
        item = self._item(index)
        category = self.catalog.get(category_id)
        if not self._allowed(category):
            raise CategoryNotAllowedError(
                f"{category.name} is not available when donating for a child"
            )
        for i, other in enumerate(self.items):
            if i != index and other.category_id == category.id:
                raise DuplicateCategoryError(
                    f"{category.name} is already part of this donation (item {i + 1})"
                )
        line_items.select_category(item, category)
        self._recompute()
        return item

    def set_quantity(self, index: int, raw: Any) -> LineItem:
        item = self._item(index)
        line_items.set_quantity(item, raw)
        self._recompute()
        return item

    def commit_quantity(self, index: int) -> LineItem:
        item = self._item(index)
        line_items.commit_quantity(item)
        self._recompute()
        return item

    def set_amount(self, index: int, raw: Any) -> LineItem:
        item = self._item(index)
        line_items.set_amount(item, raw)
        self._recompute()
        return item

    # Fulfillment -----------------------------------------------
    def set_fulfillment(self, fulfillment: str) -> None:
        self._ensure_open()
        if fulfillment not in FULFILLMENTS:
            raise DonationError(f"Unsupported fulfillment '{fulfillment}'")
        self.fulfillment = fulfillment
        self._recompute()

    def set_courier_address(self, address: Optional[str]) -> None:
        self._ensure_open()
        self.courier_address = address or ""
        self._recompute()

    # Donor relationship ----------------------------------------
    def donate_as_self(self) -> None:
        self._ensure_open()
        self.donated_as = DONATED_AS_SELF
        self.donated_for = None
        self.donated_for_name = None
        self.relation_name = ""
        self._recompute()

    def donate_for_child(
        self, child_id: Optional[str] = None, child_name: Optional[str] = None
    ) -> None:
        self._ensure_open()
        self.donated_as = DONATED_AS_CHILD
        self.donated_for = str(child_id) if child_id else None
        self.donated_for_name = child_name if child_id else None
        self.relation_name = ""
        self._recompute()

    def donate_as_spouse(self, relation_name: Optional[str] = None) -> None:
        self._ensure_open()
        self.donated_as = DONATED_AS_SPOUSE
        self.donated_for = None
        self.donated_for_name = None
        self.relation_name = relation_name or ""
        self._recompute()

    def set_relation_name(self, relation_name: Optional[str]) -> None:
        self._ensure_open()
        self.relation_name = relation_name or ""
        self._recompute()

    def open_child_form(self) -> None:
        self._ensure_open()
        self.child_form_open = True
        self._recompute()

    def close_child_form(self) -> None:
        self._ensure_open()
        self.child_form_open = False
        self._recompute()

    def set_payment(self, method: str, remarks: Optional[str] = None) -> None:
        self._ensure_open()
        self.method = method
        self.remarks = remarks or ""
        self._recompute()

    # Submission ------------------------------------------------
    def check(self) -> SubmissionCheck:
        reasons = blocking_reasons(
            items=self.items,
            totals=self.totals,
            fulfillment=self.fulfillment,
            courier_address=self.courier_address,
            donated_as=self.donated_as,
            donated_for=self.donated_for,
            child_form_open=self.child_form_open,
            relation_name=self.relation_name,
        )
        return self.gate.evaluate(reasons)

    def build_order(self) -> DonationOrder:
        lines = tuple(
            OrderLine(
                category_id=item.category.id,
                category=item.category.name,
                number=item.effective_quantity,
                amount=item.amount,
                is_packet=item.category.unit_is_packet,
                packet_count=item.packet_count,
                weight_grams=item.weight_grams,
            )
            for item in self.items
            if item.category is not None
        )
        if self.fulfillment == FULFILLMENT_COURIER:
            address = self.courier_address.strip()
        else:
            address = self.self_collect_label
        return DonationOrder(
            donor_id=self.donor_id,
            donated_as=self.donated_as,
            fulfillment=self.fulfillment,
            postal_address=address,
            method=self.method,
            totals=self.totals,
            lines=lines,
            donated_for=self.donated_for,
            donated_for_name=self.donated_for_name,
            relation_name=self.relation_name.strip(),
            remarks=self.remarks,
        )

    def submit(self, sink: OrderSink) -> SubmissionResult:
        self._ensure_open()
        if self.submitting:
            raise SubmissionInFlightError("A submission is already in progress")
        check = self.check()
        if not check.ready:
            logger.info(
                "submission blocked: %s",
                check.reasons,
                extra={"gate_state": check.state.value, "net_payable": self.totals.net_payable},
            )
            raise SubmissionBlockedError(check.reasons)
        order = self.build_order()
        self.submitting = True
        try:
            result = sink.submit(order)
        finally:
            self.submitting = False
        if not result.accepted:
            logger.warning("order rejected: %s", result.reason, extra={"method": order.method})
        return result

    def close(self) -> None:
        """Discard all in-progress state; the catalog is dropped with it."""
        self.catalog.invalidate()
        self.items = []
        self.closed = True


__all__ = ["DonationSession", "DEFAULT_SELF_COLLECT_LABEL"]
