from __future__ import annotations

import logging

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from donation_app.core.config import Settings
from donation_app.core.errors import OrderRejectedError
from donation_app.core.logging import donor_context
from donation_app.db.dal import Database
from donation_app.models.constants import (
    DONATED_AS_CHILD,
    DONATED_AS_SPOUSE,
    FULFILLMENT_COURIER,
)
from donation_app.models.donation import (
    DonationDraftIn,
    DonationItemOut,
    DonationOrderIn,
    DonationOut,
    DonationSummaryOut,
    OrderCreatedOut,
    QuoteOut,
    RegionOut,
    ResolvedItemOut,
    TotalsOut,
)
from donation_app.services.catalog import SessionCatalog
from donation_app.services.donation_session import DonationSession
from donation_app.services.orders import OrderSink
from donation_app.services.totals import OrderTotals, rounded_up_note
from .deps import get_app_settings, get_db, get_order_sink, get_session_catalog

"""Donation quote & order endpoints.

Both endpoints replay the submitted form through a fresh DonationSession,
so a quote and an order for the same draft always compute the same totals.

    - POST /donations/quote   -> resolved items, totals, gate state (never 4xx for blockers)
    - POST /donations/orders  -> 201 order created | 422 submission_blocked | 502 order_rejected
    - GET  /donations/{id}    -> recorded donation with items
    - GET  /donors/{donor_id}/donations -> a donor's donation history, newest first
"""

router = APIRouter(prefix="/donations", tags=["donations"])
donor_router = APIRouter(prefix="/donors/{donor_id}/donations", tags=["donations"])
logger = logging.getLogger("donation_app.donations")


# Helpers ----------------------------------------------------------


def _apply_draft(
    session: DonationSession, draft: DonationDraftIn, db: Database, commit: bool
) -> None:
    if draft.donated_as == DONATED_AS_CHILD:
        child_name = None
        if draft.donated_for:
            row = None
            if draft.donated_for.isdigit():
                row = db.get_dependent(draft.donor_id, int(draft.donated_for))
            if row is None:
                raise HTTPException(status_code=404, detail="dependent not found")
            child_name = row["fullname"]
        session.donate_for_child(draft.donated_for, child_name)
    elif draft.donated_as == DONATED_AS_SPOUSE:
        session.donate_as_spouse(draft.relation_name)

    for index, item in enumerate(draft.items):
        if index > 0:
            session.add_item()
        if item.category_id:
            session.choose_category(index, item.category_id)
        if item.quantity is not None:
            session.set_quantity(index, item.quantity)
        if commit:
            session.commit_quantity(index)
        if item.amount is not None:
            session.set_amount(index, item.amount)

    session.set_fulfillment(draft.fulfillment)
    session.set_courier_address(draft.courier_address)
    if draft.child_form_open:
        session.open_child_form()


def _totals_out(totals: OrderTotals) -> TotalsOut:
    return TotalsOut(**totals.as_dict())


def _quote_out(session: DonationSession, currency: str) -> QuoteOut:
    check = session.check()
    items = [
        ResolvedItemOut(
            category_id=item.category_id,
            category=item.category.name if item.category else None,
            kind=item.kind.value if item.kind else None,
            quantity=item.quantity,
            amount=item.amount,
            minimum_amount=item.minimum_amount,
            weight_grams=item.weight_grams,
            packet_count=item.packet_count,
            validation_error=item.validation_error,
            amount_editable=item.amount_editable,
            quantity_editable=item.quantity_editable,
        )
        for item in session.items
    ]
    region = None
    if session.fulfillment == FULFILLMENT_COURIER and session.courier_address.strip():
        region = RegionOut(
            outcome=session.classification.outcome,
            courier_eligible=session.classification.courier_eligible,
            notice=session.classification.notice,
        )
    return QuoteOut(
        items=items,
        totals=_totals_out(session.totals),
        region=region,
        state=check.state.value,
        reasons=check.reasons,
        notices=list(session.catalog.notices),
        currency=currency,
    )


# Routes -----------------------------------------------------------
@router.post("/quote", response_model=QuoteOut, summary="Price a donation draft")
async def quote_donation(
    payload: DonationDraftIn,
    catalog: SessionCatalog = Depends(get_session_catalog),
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
):
    with donor_context(payload.donor_id):
        session = DonationSession(catalog, payload.donor_id, settings.self_collect_label)
        try:
            _apply_draft(session, payload, db, commit=False)
            return _quote_out(session, settings.currency)
        finally:
            session.close()


@router.post(
    "/orders",
    response_model=OrderCreatedOut,
    status_code=201,
    summary="Validate a donation and create its order",
)
async def create_order(
    payload: DonationOrderIn,
    catalog: SessionCatalog = Depends(get_session_catalog),
    sink: OrderSink = Depends(get_order_sink),
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
):
    with donor_context(payload.donor_id):
        session = DonationSession(catalog, payload.donor_id, settings.self_collect_label)
        try:
            _apply_draft(session, payload, db, commit=True)
            session.set_payment(payload.method, payload.remarks)
            result = session.submit(sink)
            if not result.accepted:
                raise OrderRejectedError(result.reason or "order rejected", source="order_sink")
            return OrderCreatedOut(
                donation_id=result.donation_id,
                handle=result.handle,
                receipt_id=result.receipt_id,
                payment_required=result.payment_required,
                totals=_totals_out(session.totals),
                note=rounded_up_note(session.totals),
            )
        finally:
            session.close()


@router.get("/{donation_id}", response_model=DonationOut, summary="Fetch a donation")
async def get_donation(donation_id: int, db: Database = Depends(get_db)):
    row = db.get_donation(donation_id)
    if not row:
        raise HTTPException(status_code=404, detail="donation not found")
    totals = OrderTotals(
        total_amount=row["total_amount"],
        raw_weight_grams=row["raw_weight_grams"],
        total_weight_grams=row["total_weight_grams"],
        total_packet_count=row["packet_count"],
        courier_charge=row["courier_charge"],
        net_payable=row["amount"],
    )
    items = [
        DonationItemOut(
            category=i["category"],
            number=i["number"],
            amount=i["amount"],
            is_packet=bool(i["is_packet"]),
            packet_count=i["packet_count"],
            weight_grams=i["weight_grams"],
        )
        for i in row.pop("items")
    ]
    note = rounded_up_note(totals) if row["payment_status"] == "completed" else None
    fields = {k: v for k, v in row.items() if k in DonationOut.model_fields}
    return DonationOut(**fields, items=items, note=note)


@donor_router.get("/", response_model=List[DonationSummaryOut], summary="List a donor's donations")
async def list_donor_donations(donor_id: str, db: Database = Depends(get_db)):
    return [
        DonationSummaryOut(**{k: v for k, v in row.items() if k in DonationSummaryOut.model_fields})
        for row in db.list_donations(donor_id)
    ]
