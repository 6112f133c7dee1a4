"""Data Access Layer utilities.

Responsibilities
----------------
- Read reference data (categories, courier charges) and let seeding code
  insert it.
- CRUD for a donor's child dependents.
- Record donation orders together with their line items, issuing receipt
  numbers atomically in the same transaction.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from donation_app.models.category import CategoryIn
from donation_app.models.dependent import DependentIn, DependentUpdate
from donation_app.services.receipts import financial_year, format_receipt_id

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    # ------------------------------------------------------------------
    # Reference data
    def list_categories(self, active_only: bool = True) -> List[Dict[str, Any]]:
        query = "SELECT * FROM categories"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY position ASC, id ASC"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(query)
            return [dict(r) for r in cur.fetchall()]

    def insert_category(
        self, category: CategoryIn, position: int = 0, ignore_existing: bool = False
    ) -> Optional[int]:
        """Insert a category; returns its id, or None when skipped as existing."""
        verb = "INSERT OR IGNORE" if ignore_existing else "INSERT"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                {verb} INTO categories (
                    name, unit_rate, unit_weight_grams, unit_is_packet,
                    is_dynamic, min_value_grams, min_amount, description, position
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    category.name,
                    category.unit_rate,
                    category.unit_weight_grams,
                    int(category.unit_is_packet),
                    int(category.dynamic.is_dynamic),
                    category.dynamic.min_value_grams,
                    category.min_amount,
                    category.description or "",
                    position,
                ),
            )
            if cur.rowcount == 0:
                return None
            return int(cur.lastrowid)

    def list_courier_charges(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT region, amount FROM courier_charges ORDER BY region")
            return [dict(r) for r in cur.fetchall()]

    # ------------------------------------------------------------------
    # Dependents (children a donor may donate for)
    def list_dependents(self, donor_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM dependents WHERE donor_id = ? ORDER BY id ASC",
                (donor_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def get_dependent(self, donor_id: str, dependent_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM dependents WHERE id = ? AND donor_id = ?",
                (dependent_id, donor_id),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def create_dependent(self, donor_id: str, dependent: DependentIn) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO dependents (donor_id, fullname, gender, dob, mother, is_complete)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    donor_id,
                    dependent.fullname,
                    dependent.gender,
                    dependent.dob.isoformat(),
                    dependent.mother,
                    int(bool(dependent.mother)),
                ),
            )
            return int(cur.lastrowid)

    def update_dependent(
        self, donor_id: str, dependent_id: int, changes: DependentUpdate
    ) -> bool:
        fields: List[str] = []
        params: List[Any] = []
        for name in ("fullname", "gender", "mother"):
            value = getattr(changes, name)
            if value is not None:
                fields.append(f"{name} = ?")
                params.append(value)
        if changes.dob is not None:
            fields.append("dob = ?")
            params.append(changes.dob.isoformat())
        if changes.mother is not None:
            fields.append("is_complete = ?")
            params.append(int(bool(changes.mother)))
        fields.append(f"updated_at = ({UTC_NOW_SQL})")
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE dependents SET {', '.join(fields)} WHERE id = ? AND donor_id = ?",
                (*params, dependent_id, donor_id),
            )
            return cur.rowcount > 0

    def delete_dependent(self, donor_id: str, dependent_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM dependents WHERE id = ? AND donor_id = ?",
                (dependent_id, donor_id),
            )
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Donations
    def _next_receipt_number(
        self, cur: sqlite3.Cursor, method_code: str, fy: str
    ) -> int:
        cur.execute(
            """
            INSERT INTO receipt_counters (method_code, financial_year, last_number)
            VALUES (?, ?, 1)
            ON CONFLICT(method_code, financial_year)
            DO UPDATE SET last_number = last_number + 1
            """,
            (method_code, fy),
        )
        cur.execute(
            "SELECT last_number FROM receipt_counters WHERE method_code = ? AND financial_year = ?",
            (method_code, fy),
        )
        return int(cur.fetchone()[0])

    def insert_donation(
        self,
        donation: Dict[str, Any],
        items: Sequence[Dict[str, Any]],
        receipt: Optional[Tuple[str, str]] = None,
        today: Optional[date] = None,
    ) -> Tuple[int, Optional[str]]:
        """Insert a donation with its items in one transaction.

        ``receipt`` is ``(prefix, method_code)``; when given, the next receipt
        number for the current financial year is issued and stored. Returns
        ``(donation_id, receipt_id)``.
        """
        columns = list(donation.keys())
        with self._connect() as conn:
            cur = conn.cursor()
            receipt_id: Optional[str] = None
            if receipt is not None:
                prefix, code = receipt
                fy = financial_year(today)
                number = self._next_receipt_number(cur, code, fy)
                receipt_id = format_receipt_id(prefix, code, number, fy)
                columns.append("receipt_id")
            values = [donation[c] for c in donation.keys()]
            if receipt_id is not None:
                values.append(receipt_id)
            cur.execute(
                f"INSERT INTO donations ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )
            donation_id = int(cur.lastrowid)
            cur.executemany(
                """
                INSERT INTO donation_items (
                    donation_id, category, number, amount, is_packet, packet_count, weight_grams
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        donation_id,
                        item["category"],
                        item["number"],
                        item["amount"],
                        int(item["is_packet"]),
                        item["packet_count"],
                        item["weight_grams"],
                    )
                    for item in items
                ],
            )
            return donation_id, receipt_id

    def get_donation(self, donation_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM donations WHERE id = ?", (donation_id,))
            row = cur.fetchone()
            if not row:
                return None
            record = dict(row)
            cur.execute(
                "SELECT * FROM donation_items WHERE donation_id = ? ORDER BY id ASC",
                (donation_id,),
            )
            record["items"] = [dict(r) for r in cur.fetchall()]
            return record

    def list_donations(self, donor_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM donations WHERE donor_id = ? ORDER BY created_at DESC, id DESC",
                (donor_id,),
            )
            return [dict(r) for r in cur.fetchall()]
