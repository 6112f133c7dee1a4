"""Finalized donation orders and the sink that accepts them.

The sink is the boundary to payment: it records the order and answers with
an accept/reject outcome plus an opaque handle. Online orders are stored as
``pending`` with a handle the payment step can refer to; cash orders are
complete at once and get a receipt id immediately.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple

from donation_app.core.config import Settings
from donation_app.db.dal import Database
from donation_app.models.constants import PAYMENT_METHODS
from .receipts import method_code
from .totals import OrderTotals

logger = logging.getLogger("donation_app.orders")


@dataclass(frozen=True)
class OrderLine:
    category_id: str
    category: str
    number: int
    amount: float
    is_packet: bool
    packet_count: int
    weight_grams: float


@dataclass(frozen=True)
class DonationOrder:
    donor_id: str
    donated_as: str
    fulfillment: str
    postal_address: str
    method: str
    totals: OrderTotals
    lines: Tuple[OrderLine, ...] = field(default_factory=tuple)
    donated_for: Optional[str] = None
    donated_for_name: Optional[str] = None
    relation_name: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class SubmissionResult:
    accepted: bool
    handle: Optional[str] = None
    donation_id: Optional[int] = None
    receipt_id: Optional[str] = None
    payment_required: bool = False
    reason: Optional[str] = None

    @classmethod
    def rejected(cls, reason: str) -> "SubmissionResult":
        return cls(accepted=False, reason=reason)


class OrderSink(ABC):
    @abstractmethod
    def submit(self, order: DonationOrder) -> SubmissionResult:
        raise NotImplementedError


class SqliteOrderSink(OrderSink):
    def __init__(self, db: Database, settings: Settings):
        self._db = db
        self._settings = settings

    def submit(self, order: DonationOrder) -> SubmissionResult:  # type: ignore[override]
        if order.method not in PAYMENT_METHODS:
            return SubmissionResult.rejected("Invalid payment method")
        if order.totals.net_payable <= 0:
            return SubmissionResult.rejected("Amount must be greater than 0")

        is_cash = order.method == "Cash"
        handle = None if is_cash else f"order_{uuid.uuid4().hex[:16]}"
        record = {
            "donor_id": order.donor_id,
            "donated_as": order.donated_as,
            "donated_for": order.donated_for or None,
            "relation_name": order.relation_name,
            "fulfillment": order.fulfillment,
            "postal_address": order.postal_address,
            "method": order.method,
            "remarks": order.remarks,
            "total_amount": order.totals.total_amount,
            "courier_charge": order.totals.courier_charge,
            "amount": order.totals.net_payable,
            "raw_weight_grams": order.totals.raw_weight_grams,
            "total_weight_grams": order.totals.total_weight_grams,
            "packet_count": order.totals.total_packet_count,
            "order_handle": handle,
            "payment_status": "completed" if is_cash else "pending",
        }
        items = [
            {
                "category": line.category,
                "number": line.number,
                "amount": line.amount,
                "is_packet": line.is_packet,
                "packet_count": line.packet_count,
                "weight_grams": line.weight_grams,
            }
            for line in order.lines
        ]
        receipt = (self._settings.receipt_prefix, method_code(order.method)) if is_cash else None
        try:
            donation_id, receipt_id = self._db.insert_donation(record, items, receipt=receipt)
        except sqlite3.Error:
            logger.exception("failed to record donation for donor %s", order.donor_id)
            return SubmissionResult.rejected("Failed to create order")
        logger.info(
            "recorded donation (%s)",
            record["payment_status"],
            extra={
                "donation_id": donation_id,
                "method": order.method,
                "net_payable": order.totals.net_payable,
            },
        )
        return SubmissionResult(
            accepted=True,
            handle=handle,
            donation_id=donation_id,
            receipt_id=receipt_id,
            payment_required=not is_cash,
        )


__all__ = [
    "OrderLine",
    "DonationOrder",
    "SubmissionResult",
    "OrderSink",
    "SqliteOrderSink",
]
