"""Tests for the donation session edit loop and the submission gate."""

from __future__ import annotations

import pytest

from donation_app.core.errors import (
    CategoryNotAllowedError,
    DonationError,
    DuplicateCategoryError,
    LastItemError,
    SubmissionBlockedError,
    SubmissionInFlightError,
    UnknownCategoryError,
)
from donation_app.models.constants import FULFILLMENT_COURIER
from donation_app.services.donation_session import DonationSession
from donation_app.services.orders import OrderSink, SubmissionResult
from donation_app.services.submission import GateState, SubmissionGate


@pytest.fixture
def session(catalog):
    return DonationSession(catalog, donor_id="donor-1", self_collect_label="Collect at temple")


class TestSubmissionGate:
    def test_starts_editing(self):
        assert SubmissionGate().state is GateState.EDITING

    def test_evaluate_and_edit_cycle(self):
        gate = SubmissionGate()
        assert gate.evaluate([]).ready
        assert gate.state is GateState.READY
        gate.mark_edited()
        assert gate.state is GateState.EDITING
        check = gate.evaluate(["Please provide a courier address"])
        assert check.state is GateState.BLOCKED
        assert check.reasons == ["Please provide a courier address"]


class TestItems:
    def test_new_session_has_one_blank_item(self, session):
        assert len(session.items) == 1
        assert session.items[0].category is None
        assert "Please select a category for all items" in session.check().reasons

    def test_duplicate_category_rejected(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.add_item()
        with pytest.raises(DuplicateCategoryError):
            session.choose_category(1, prasad.id)
        assert prasad.id not in {c.id for c in session.available_categories(1)}

    def test_unknown_category(self, session):
        with pytest.raises(UnknownCategoryError):
            session.choose_category(0, "999")

    def test_cannot_remove_last_item(self, session):
        with pytest.raises(LastItemError):
            session.remove_item(0)

    def test_remove_item_recomputes_totals(self, session, prasad, chunri):
        session.choose_category(0, prasad.id)
        session.add_item()
        session.choose_category(1, chunri.id)
        assert session.totals.total_amount == 351
        session.remove_item(0)
        assert session.totals.total_amount == 251

    def test_every_edit_resets_gate(self, session, prasad):
        session.choose_category(0, prasad.id)
        assert session.check().ready
        session.set_quantity(0, 2)
        assert session.gate.state is GateState.EDITING


class TestFulfillment:
    def test_courier_charge_follows_address(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.set_fulfillment(FULFILLMENT_COURIER)
        session.set_courier_address("Boring Road, Patna, Bihar, India")
        assert session.totals.courier_charge == 200
        assert session.totals.net_payable == 300

    def test_ineligible_address_is_notice_not_blocker(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.set_fulfillment(FULFILLMENT_COURIER)
        session.set_courier_address("Manpur, Gaya, Bihar")
        assert not session.classification.courier_eligible
        assert session.totals.courier_charge == 0
        assert session.check().ready

    def test_unsupported_fulfillment(self, session):
        with pytest.raises(DonationError):
            session.set_fulfillment("drone")


class TestRelationship:
    def test_child_mode_only_allows_dynamic(self, session, prasad, voluntary):
        session.donate_for_child("5", "Asha")
        assert [c.id for c in session.available_categories(0)] == [voluntary.id]
        with pytest.raises(CategoryNotAllowedError):
            session.choose_category(0, prasad.id)

    def test_existing_standard_item_blocks_child_donation(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.donate_for_child("5", "Asha")
        reasons = session.check().reasons
        assert any("not available when donating for a child" in r for r in reasons)

    def test_child_must_be_selected(self, session, voluntary):
        session.donate_for_child()
        session.choose_category(0, voluntary.id)
        assert "Please select the child you are donating for" in session.check().reasons

    def test_open_child_form_blocks(self, session, voluntary):
        session.donate_for_child("5", "Asha")
        session.choose_category(0, voluntary.id)
        session.open_child_form()
        assert not session.check().ready
        session.close_child_form()
        assert session.check().ready

    def test_spouse_needs_name(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.donate_as_spouse()
        assert "Please provide the spouse's name" in session.check().reasons
        session.set_relation_name("Sita Devi")
        assert session.check().ready

    def test_back_to_self_clears_relation(self, session, prasad):
        session.choose_category(0, prasad.id)
        session.donate_as_spouse("Sita Devi")
        session.donate_as_self()
        assert session.relation_name == ""
        assert session.build_order().donated_as == "self"


class TestSubmit:
    def test_courier_without_address_never_reaches_sink(self, session, sink, prasad):
        session.choose_category(0, prasad.id)
        session.set_fulfillment(FULFILLMENT_COURIER)
        with pytest.raises(SubmissionBlockedError) as excinfo:
            session.submit(sink)
        assert "Please provide a courier address" in excinfo.value.reasons
        assert session.gate.state is GateState.BLOCKED
        assert sink.orders == []

    def test_ready_order_is_handed_to_sink(self, session, sink, prasad):
        session.choose_category(0, prasad.id)
        session.set_quantity(0, 2)
        result = session.submit(sink)
        assert result.accepted
        order = sink.orders[0]
        assert order.postal_address == "Collect at temple"
        assert order.totals.net_payable == 200
        assert order.lines[0].number == 2

    def test_reentrant_submit_is_refused(self, session, prasad):
        class ReentrantSink(OrderSink):
            def submit(self, order):
                with pytest.raises(SubmissionInFlightError):
                    session.submit(self)
                return SubmissionResult(accepted=True, handle="order_x", donation_id=3)

        session.choose_category(0, prasad.id)
        assert session.submit(ReentrantSink()).accepted
        assert not session.submitting

    def test_rejected_order_is_returned(self, session, prasad):
        from conftest import RecordingSink

        session.choose_category(0, prasad.id)
        result = session.submit(RecordingSink(accept=False))
        assert not result.accepted
        assert result.reason == "Failed to create order"

    def test_nan_amount_blocks_and_never_reaches_sink(self, session, sink, puja_service):
        session.choose_category(0, puja_service.id)
        session.set_amount(0, "nan")
        check = session.check()
        assert not check.ready
        assert "Item 1: Please enter a valid amount" in check.reasons
        assert "Donation amount must be greater than zero" in check.reasons
        with pytest.raises(SubmissionBlockedError):
            session.submit(sink)
        assert sink.orders == []

    def test_zero_amount_blocks(self, session, puja_service):
        session.choose_category(0, puja_service.id)
        session.set_amount(0, 0)
        assert "Donation amount must be greater than zero" in session.check().reasons


class TestClose:
    def test_close_discards_state(self, session, catalog, prasad):
        session.choose_category(0, prasad.id)
        session.close()
        assert not catalog.loaded
        with pytest.raises(DonationError):
            session.add_item()
