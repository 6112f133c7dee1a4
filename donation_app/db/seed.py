"""Seeding helpers for reference data.

`seed_reference_data` ensures a baseline catalog of donation categories and
the courier charge table exist. Existing rows are left untouched (insert or
ignore) so this can be safely re-run; admins own the values afterwards.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Mapping, Sequence

from donation_app.models.category import CategoryIn
from donation_app.models.constants import Region
from .dal import Database
from .schema import init_db

logger = logging.getLogger("donation_app.seed")

DEFAULT_CATEGORIES: Sequence[CategoryIn] = (
    CategoryIn(name="Mahaprasad", unit_rate=101, unit_weight_grams=250),
    CategoryIn(name="Chunri Prasad", unit_rate=251, unit_weight_grams=0, unit_is_packet=True),
    CategoryIn(name="Puja Service", unit_rate=501, unit_weight_grams=0, unit_is_packet=True),
    CategoryIn(
        name="Voluntary Donation",
        unit_rate=100,
        unit_weight_grams=300,
        dynamic={"is_dynamic": True, "min_value_grams": 300},
        description="Any amount; Mahaprasad is sent by weight",
    ),
)

DEFAULT_COURIER_CHARGES: Mapping[str, float] = {
    Region.IN_GAYA_OUTSIDE_MANPUR.value: 100.0,
    Region.IN_BIHAR_OUTSIDE_GAYA.value: 200.0,
    Region.IN_INDIA_OUTSIDE_BIHAR.value: 400.0,
    Region.OUTSIDE_INDIA.value: 1500.0,
}


def seed_reference_data(
    db_path: Path,
    categories: Sequence[CategoryIn] = DEFAULT_CATEGORIES,
    courier_charges: Mapping[str, float] | None = None,
) -> None:
    init_db(db_path)  # ensure tables exist
    db = Database(db_path)
    added = 0
    for position, category in enumerate(categories):
        if db.insert_category(category, position=position, ignore_existing=True):
            added += 1
    charges = DEFAULT_COURIER_CHARGES if courier_charges is None else courier_charges
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        for region, amount in charges.items():
            # Do not modify existing charges (admin controlled)
            cur.execute(
                "INSERT OR IGNORE INTO courier_charges (region, amount) VALUES (?, ?)",
                (region, float(amount)),
            )
        conn.commit()
    logger.info("seeded reference data: %d new categories", added)
