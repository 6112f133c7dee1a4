"""HTTP tests for the donation API."""

from __future__ import annotations

import re

from conftest import execute_sql

RECEIPT_RE = re.compile(r"^SDP/C\d{4}/\d{2}-\d{2}$")


def _draft(**overrides):
    body = {"donor_id": "donor-1", "items": [{"category_id": "1", "quantity": 3}]}
    body.update(overrides)
    return body


class TestReference:
    def test_health(self, client):
        resp = client.get("/health", headers={"x-request-id": "abc123"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.headers["X-Request-ID"] == "abc123"

    def test_categories(self, client):
        data = client.get("/categories").json()
        assert [c["name"] for c in data["categories"]] == [
            "Mahaprasad",
            "Chunri Prasad",
            "Puja Service",
            "Voluntary Donation",
        ]
        kinds = {c["name"]: c["kind"] for c in data["categories"]}
        assert kinds["Puja Service"] == "service"
        assert kinds["Voluntary Donation"] == "dynamic"
        assert data["notices"] == []

    def test_categories_for_child(self, client):
        data = client.get("/categories", params={"donated_as": "child"}).json()
        assert [c["name"] for c in data["categories"]] == ["Voluntary Donation"]

    def test_categories_bad_filter(self, client):
        resp = client.get("/categories", params={"donated_as": "cousin"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "http_error"

    def test_courier_charges(self, client):
        data = client.get("/courier-charges").json()
        amounts = {c["region"]: c["amount"] for c in data["courier_charges"]}
        assert amounts["in_gaya_outside_manpur"] == 100
        assert amounts["outside_india"] == 1500

    def test_unknown_route(self, client):
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


class TestQuote:
    def test_standard_quote(self, client):
        resp = client.post("/donations/quote", json=_draft())
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "ready"
        assert data["totals"]["total_amount"] == 303
        assert data["totals"]["total_weight_grams"] == 750
        assert data["totals"]["net_payable"] == 303
        assert data["region"] is None

    def test_courier_quote(self, client):
        resp = client.post(
            "/donations/quote",
            json=_draft(fulfillment="courier", courier_address="123 MG Road, Gaya, Bihar, India"),
        )
        data = resp.json()
        assert data["region"]["outcome"] == "in_gaya_outside_manpur"
        assert data["region"]["courier_eligible"] is True
        assert data["totals"]["courier_charge"] == 100
        assert data["totals"]["net_payable"] == 403

    def test_charge_table_edits_apply(self, client, db):
        body = _draft(fulfillment="courier", courier_address="123 MG Road, Gaya, Bihar, India")
        execute_sql(
            db.db_path,
            "UPDATE courier_charges SET amount = ? WHERE region = ?",
            (150, "in_gaya_outside_manpur"),
        )
        assert client.post("/donations/quote", json=body).json()["totals"]["courier_charge"] == 150
        execute_sql(
            db.db_path, "DELETE FROM courier_charges WHERE region = ?", ("in_gaya_outside_manpur",)
        )
        data = client.post("/donations/quote", json=body).json()
        assert data["totals"]["courier_charge"] == 0
        assert data["currency"] == "INR"

    def test_blocked_quote_still_200(self, client):
        resp = client.post("/donations/quote", json=_draft(fulfillment="courier"))
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "blocked"
        assert "Please provide a courier address" in data["reasons"]

    def test_service_minimum_reported(self, client):
        body = _draft(items=[{"category_id": "3", "quantity": 2, "amount": 800}])
        data = client.post("/donations/quote", json=body).json()
        item = data["items"][0]
        assert item["minimum_amount"] == 1002
        assert item["validation_error"] == "Minimum amount for Puja Service is 1,002"
        assert data["state"] == "blocked"

    def test_blank_quantity_kept_in_quote(self, client):
        body = _draft(items=[{"category_id": "1", "quantity": ""}])
        data = client.post("/donations/quote", json=body).json()
        assert data["items"][0]["quantity"] is None
        assert data["totals"]["total_amount"] == 101

    def test_non_finite_amount_quote_is_blocked(self, client):
        for raw in ("nan", "inf", "1e999"):
            body = _draft(items=[{"category_id": "3", "amount": raw}])
            resp = client.post("/donations/quote", json=body)
            assert resp.status_code == 200
            data = resp.json()
            assert data["state"] == "blocked"
            assert data["items"][0]["validation_error"] == "Please enter a valid amount"
            assert data["totals"]["net_payable"] == 0

    def test_duplicate_category(self, client):
        body = _draft(items=[{"category_id": "1"}, {"category_id": "1"}])
        resp = client.post("/donations/quote", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "duplicate_category"

    def test_unknown_category(self, client):
        resp = client.post("/donations/quote", json=_draft(items=[{"category_id": "99"}]))
        assert resp.status_code == 400
        assert resp.json()["error"] == "unknown_category"

    def test_empty_items_rejected(self, client):
        resp = client.post("/donations/quote", json=_draft(items=[]))
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"


class TestOrders:
    def test_cash_order_completes_with_receipt(self, client):
        body = _draft(method="Cash", items=[{"category_id": "1", "quantity": 1}])
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 201
        data = resp.json()
        assert RECEIPT_RE.match(data["receipt_id"])
        assert data["payment_required"] is False
        assert data["handle"] is None
        # 250 g is below the 300 g floor of the seeded dynamic category
        assert data["totals"]["total_weight_grams"] == 300
        assert "50 g" in data["note"]

        donation = client.get(f"/donations/{data['donation_id']}").json()
        assert donation["payment_status"] == "completed"
        assert donation["postal_address"] == "Will collect from Durga Sthan"
        assert donation["items"][0]["category"] == "Mahaprasad"
        assert donation["note"] is not None

        history = client.get("/donors/donor-1/donations/").json()
        assert [d["receipt_id"] for d in history] == [data["receipt_id"]]
        assert client.get("/donors/donor-2/donations/").json() == []

    def test_online_order_pending(self, client):
        body = _draft(
            fulfillment="courier",
            courier_address="Boring Road, Patna, Bihar, India",
        )
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 201
        data = resp.json()
        assert data["handle"].startswith("order_")
        assert data["receipt_id"] is None
        assert data["payment_required"] is True
        assert data["totals"]["net_payable"] == 503

        donation = client.get(f"/donations/{data['donation_id']}").json()
        assert donation["payment_status"] == "pending"
        assert donation["postal_address"] == "Boring Road, Patna, Bihar, India"
        assert donation["note"] is None

    def test_blank_quantity_committed_on_order(self, client):
        body = _draft(method="Cash", items=[{"category_id": "2", "quantity": ""}])
        data = client.post("/donations/orders", json=body).json()
        donation = client.get(f"/donations/{data['donation_id']}").json()
        assert donation["items"][0]["number"] == 1
        assert donation["packet_count"] == 1

    def test_blocked_order(self, client, db):
        resp = client.post("/donations/orders", json=_draft(fulfillment="courier"))
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "submission_blocked"
        assert "Please provide a courier address" in data["detail"]
        assert db.list_donations("donor-1") == []
        assert client.get("/donors/donor-1/donations/").json() == []

    def test_nan_amount_order_is_blocked(self, client, db):
        body = _draft(method="Cash", items=[{"category_id": "3", "amount": "nan"}])
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 422
        assert "Item 1: Please enter a valid amount" in resp.json()["detail"]
        assert client.get("/donors/donor-1/donations/").json() == []

    def test_invalid_method(self, client):
        resp = client.post("/donations/orders", json=_draft(method="Barter"))
        assert resp.status_code == 422

    def test_child_order_needs_known_dependent(self, client):
        body = _draft(
            donated_as="child",
            donated_for="42",
            items=[{"category_id": "4", "amount": 500}],
        )
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 404

    def test_child_order(self, client):
        child = client.post(
            "/donors/donor-1/dependents/",
            json={"fullname": "Asha Kumari", "gender": "female", "dob": "2016-05-01"},
        ).json()
        body = _draft(
            method="Cash",
            donated_as="child",
            donated_for=str(child["id"]),
            items=[{"category_id": "4", "amount": 500}],
        )
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 201
        donation = client.get(f"/donations/{resp.json()['donation_id']}").json()
        assert donation["donated_as"] == "child"
        assert donation["donated_for"] == child["id"]
        assert donation["total_weight_grams"] == 0

    def test_child_order_with_standard_item_blocked(self, client):
        child = client.post(
            "/donors/donor-1/dependents/",
            json={"fullname": "Asha Kumari", "gender": "female", "dob": "2016-05-01"},
        ).json()
        body = _draft(donated_as="child", donated_for=str(child["id"]))
        resp = client.post("/donations/orders", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "category_not_allowed"

    def test_spouse_order_needs_name(self, client):
        resp = client.post("/donations/orders", json=_draft(donated_as="spouse"))
        assert resp.status_code == 422
        assert "Please provide the spouse's name" in resp.json()["detail"]

    def test_unknown_donation(self, client):
        resp = client.get("/donations/9999")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "donation not found"


class TestDependents:
    def test_crud(self, client):
        base = "/donors/donor-1/dependents/"
        created = client.post(
            base, json={"fullname": " Ravi ", "gender": "Male", "dob": "2012-01-15"}
        )
        assert created.status_code == 201
        child = created.json()
        assert child["fullname"] == "Ravi"
        assert child["gender"] == "male"
        assert child["is_complete"] is False

        listed = client.get(base).json()
        assert [c["id"] for c in listed] == [child["id"]]
        assert client.get("/donors/someone-else/dependents/").json() == []

        updated = client.put(f"{base}{child['id']}", json={"mother": "Sunita"})
        assert updated.status_code == 200
        assert updated.json()["is_complete"] is True

        assert client.delete(f"{base}{child['id']}").status_code == 200
        assert client.delete(f"{base}{child['id']}").status_code == 404

    def test_update_missing(self, client):
        resp = client.put("/donors/donor-1/dependents/77", json={"mother": "Sunita"})
        assert resp.status_code == 404

    def test_future_dob_rejected(self, client):
        resp = client.post(
            "/donors/donor-1/dependents/",
            json={"fullname": "Baby", "gender": "female", "dob": "2999-01-01"},
        )
        assert resp.status_code == 422

    def test_empty_update_rejected(self, client):
        resp = client.put("/donors/donor-1/dependents/1", json={})
        assert resp.status_code == 422
