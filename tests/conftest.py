"""Pytest configuration and fixtures."""

from __future__ import annotations

import sqlite3
from typing import List

import pytest
from fastapi.testclient import TestClient

from donation_app.core.config import Settings
from donation_app.core.errors import CollaboratorError
from donation_app.db.dal import Database
from donation_app.main import create_app
from donation_app.models.category import Category
from donation_app.models.constants import Region
from donation_app.models.courier import CourierChargeEntry
from donation_app.services.catalog import SessionCatalog
from donation_app.services.orders import DonationOrder, OrderSink, SubmissionResult
from donation_app.services.sources.base import CategorySource, CourierChargeSource


class StaticCategorySource(CategorySource):
    name = "static"

    def __init__(self, categories: List[Category]):
        self.categories = categories
        self.calls = 0

    def list_categories(self) -> List[Category]:
        self.calls += 1
        return list(self.categories)


class StaticChargeSource(CourierChargeSource):
    name = "static"

    def __init__(self, charges: List[CourierChargeEntry]):
        self.charges = charges
        self.calls = 0

    def list_charges(self) -> List[CourierChargeEntry]:
        self.calls += 1
        return list(self.charges)


class FailingCategorySource(CategorySource):
    name = "failing"

    def list_categories(self) -> List[Category]:
        raise CollaboratorError("backend unreachable", source="categories")


class FailingChargeSource(CourierChargeSource):
    name = "failing"

    def list_charges(self) -> List[CourierChargeEntry]:
        raise CollaboratorError("backend unreachable", source="courier_charges")


class RecordingSink(OrderSink):
    """Order sink double that remembers every order handed to it."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.orders: List[DonationOrder] = []

    def submit(self, order: DonationOrder) -> SubmissionResult:
        self.orders.append(order)
        if not self.accept:
            return SubmissionResult.rejected("Failed to create order")
        return SubmissionResult(accepted=True, handle="order_test", donation_id=1, payment_required=True)


def execute_sql(db_path, sql, params=()):
    """Run one write statement directly, for reference data edits made outside the app."""
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.execute(sql, params)
        conn.commit()
        return cur.rowcount
    finally:
        conn.close()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database."""
    return Settings(db_path=tmp_path / "test.sqlite3", debug=False)


@pytest.fixture
def app(settings):
    return create_app(settings_override=settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app, settings):
    """Database handle for the seeded app database."""
    return Database(settings.db_path)


@pytest.fixture
def prasad():
    return Category(id="1", name="Mahaprasad", unit_rate=100, unit_weight_grams=250)


@pytest.fixture
def chunri():
    return Category(id="2", name="Chunri Prasad", unit_rate=251, unit_is_packet=True)


@pytest.fixture
def puja_service():
    return Category(id="3", name="Puja Service", unit_rate=500, unit_is_packet=True)


@pytest.fixture
def voluntary():
    return Category(
        id="4",
        name="Voluntary Donation",
        unit_rate=100,
        dynamic={"is_dynamic": True, "min_value_grams": 500},
        min_amount=51,
    )


@pytest.fixture
def charges():
    return [
        CourierChargeEntry(region=Region.IN_GAYA_OUTSIDE_MANPUR, amount=100),
        CourierChargeEntry(region=Region.IN_BIHAR_OUTSIDE_GAYA, amount=200),
        CourierChargeEntry(region=Region.IN_INDIA_OUTSIDE_BIHAR, amount=400),
        CourierChargeEntry(region=Region.OUTSIDE_INDIA, amount=1500),
    ]


@pytest.fixture
def categories(prasad, chunri, puja_service, voluntary):
    return [prasad, chunri, puja_service, voluntary]


@pytest.fixture
def catalog(categories, charges):
    return SessionCatalog(StaticCategorySource(categories), StaticChargeSource(charges))


@pytest.fixture
def sink():
    return RecordingSink()
