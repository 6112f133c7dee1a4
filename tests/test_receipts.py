"""Tests for receipt id helpers and receipt numbering."""

from __future__ import annotations

from datetime import date

from donation_app.services.receipts import financial_year, format_receipt_id, method_code


class TestFinancialYear:
    def test_starts_in_august(self):
        assert financial_year(date(2025, 8, 1)) == "25-26"
        assert financial_year(date(2025, 7, 31)) == "24-25"

    def test_century_rollover(self):
        assert financial_year(date(2099, 12, 1)) == "99-00"


class TestReceiptId:
    def test_format(self):
        assert format_receipt_id("SDP", "C", 1, "25-26") == "SDP/C0001/25-26"

    def test_method_codes(self):
        assert method_code("Cash") == "C"
        assert method_code("Online") == "O"
        assert method_code("Cheque") == "X"

    def test_numbers_increase_per_method_and_year(self, db):
        record = {
            "donor_id": "donor-1",
            "fulfillment": "self_collect",
            "postal_address": "Collect at temple",
            "method": "Cash",
            "total_amount": 100,
            "amount": 100,
            "payment_status": "completed",
        }
        day = date(2025, 9, 1)
        _, first = db.insert_donation(record, [], receipt=("SDP", "C"), today=day)
        _, second = db.insert_donation(record, [], receipt=("SDP", "C"), today=day)
        _, next_year = db.insert_donation(
            record, [], receipt=("SDP", "C"), today=date(2026, 8, 2)
        )
        assert first == "SDP/C0001/25-26"
        assert second == "SDP/C0002/25-26"
        assert next_year == "SDP/C0001/26-27"
