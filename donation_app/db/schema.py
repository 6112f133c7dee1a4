"""Database schema DDL definitions and initialization utilities.

Tables:
  - categories: donation categories offered to donors (reference data)
  - courier_charges: one charge per courier region tier (reference data)
  - dependents: child dependents a donor may donate for
  - donations: recorded donation orders with their computed totals
  - donation_items: resolved line items of a donation
  - receipt_counters: last issued receipt sequence per method code & financial year
  - metadata: key/value store (schema version etc.)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CATEGORIES_DDL = f"""
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    unit_rate REAL NOT NULL DEFAULT 0,
    unit_weight_grams REAL NOT NULL DEFAULT 0,
    unit_is_packet INTEGER NOT NULL DEFAULT 0,
    is_dynamic INTEGER NOT NULL DEFAULT 0,
    min_value_grams REAL NOT NULL DEFAULT 0,
    min_amount REAL NOT NULL DEFAULT 0,
    description TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    position INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

COURIER_CHARGES_DDL = f"""
CREATE TABLE IF NOT EXISTS courier_charges (
    region TEXT PRIMARY KEY CHECK (region IN (
        'in_gaya_outside_manpur',
        'in_bihar_outside_gaya',
        'in_india_outside_bihar',
        'outside_india'
    )),
    amount REAL NOT NULL CHECK (amount >= 0),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DEPENDENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS dependents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    donor_id TEXT NOT NULL,
    fullname TEXT NOT NULL,
    gender TEXT NOT NULL CHECK (gender IN ('male','female','other')),
    dob TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    mother TEXT NOT NULL DEFAULT '',
    is_complete INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DONATIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS donations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    donor_id TEXT NOT NULL,
    donated_as TEXT NOT NULL DEFAULT 'self' CHECK (donated_as IN ('self','child','spouse')),
    donated_for INTEGER,
    relation_name TEXT NOT NULL DEFAULT '',
    fulfillment TEXT NOT NULL CHECK (fulfillment IN ('self_collect','courier')),
    postal_address TEXT NOT NULL,
    method TEXT NOT NULL, -- 'Cash' | 'Online'
    remarks TEXT NOT NULL DEFAULT '',
    total_amount REAL NOT NULL,
    courier_charge REAL NOT NULL DEFAULT 0,
    amount REAL NOT NULL, -- net payable
    raw_weight_grams REAL NOT NULL DEFAULT 0,
    total_weight_grams REAL NOT NULL DEFAULT 0,
    packet_count INTEGER NOT NULL DEFAULT 0,
    order_handle TEXT UNIQUE,
    receipt_id TEXT UNIQUE,
    payment_status TEXT NOT NULL DEFAULT 'pending' CHECK (payment_status IN ('pending','completed','failed')),
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (donated_for) REFERENCES dependents(id) ON DELETE SET NULL
);
"""

DONATION_ITEMS_DDL = """
CREATE TABLE IF NOT EXISTS donation_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    donation_id INTEGER NOT NULL,
    category TEXT NOT NULL,
    number INTEGER NOT NULL,
    amount REAL NOT NULL,
    is_packet INTEGER NOT NULL DEFAULT 0,
    packet_count INTEGER NOT NULL DEFAULT 0,
    weight_grams REAL NOT NULL DEFAULT 0,
    FOREIGN KEY (donation_id) REFERENCES donations(id) ON DELETE CASCADE
);
"""

RECEIPT_COUNTERS_DDL = """
CREATE TABLE IF NOT EXISTS receipt_counters (
    method_code TEXT NOT NULL,
    financial_year TEXT NOT NULL, -- 'YY-YY'
    last_number INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (method_code, financial_year)
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DEPENDENTS_DONOR_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_dependents_donor ON dependents(donor_id);"
)
DONATIONS_DONOR_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_donations_donor ON donations(donor_id, created_at);"
)
DONATION_ITEMS_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_donation_items_donation ON donation_items(donation_id);"
)

DDL_ORDER: Sequence[str] = (
    CATEGORIES_DDL,
    COURIER_CHARGES_DDL,
    DEPENDENTS_DDL,
    DONATIONS_DDL,
    DONATION_ITEMS_DDL,
    RECEIPT_COUNTERS_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        for ddl in (
            DEPENDENTS_DONOR_INDEX_DDL,
            DONATIONS_DONOR_INDEX_DDL,
            DONATION_ITEMS_INDEX_DDL,
        ):
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
