from __future__ import annotations

"""Concrete reference data sources and factory.

'sqlite' reads the local tables; 'http' reads the donor-site backend
(``/api/user/categories`` and ``/api/user/courier-charges``) and maps its
camelCase records onto our models.
"""
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from donation_app.core.config import Settings
from donation_app.core.errors import CollaboratorError
from donation_app.db.dal import Database
from donation_app.models.category import Category
from donation_app.models.courier import CourierChargeEntry
from donation_app.services.http_client import HttpError, get_json
from .base import CategorySource, CourierChargeSource

logger = logging.getLogger("donation_app.sources")


class SqliteCategorySource(CategorySource):
    name = "sqlite"

    def __init__(self, db: Database):
        self._db = db

    def list_categories(self) -> List[Category]:  # type: ignore[override]
        try:
            rows = self._db.list_categories(active_only=True)
        except sqlite3.Error as e:
            raise CollaboratorError(str(e), source="categories") from e
        return [Category.from_row(r) for r in rows]


class SqliteCourierChargeSource(CourierChargeSource):
    name = "sqlite"

    def __init__(self, db: Database):
        self._db = db

    def list_charges(self) -> List[CourierChargeEntry]:  # type: ignore[override]
        try:
            rows = self._db.list_courier_charges()
        except sqlite3.Error as e:
            raise CollaboratorError(str(e), source="courier_charges") from e
        return [CourierChargeEntry(**r) for r in rows]


def _category_from_remote(record: Dict[str, Any]) -> Category:
    dynamic = record.get("dynamic") or {}
    return Category(
        id=str(record.get("_id") or record.get("id")),
        name=record.get("categoryName") or record.get("name") or "",
        unit_rate=record.get("rate") or 0,
        unit_weight_grams=record.get("weight") or 0,
        unit_is_packet=bool(record.get("packet")),
        dynamic={
            "is_dynamic": bool(dynamic.get("isDynamic")),
            "min_value_grams": dynamic.get("minvalue") or 0,
        },
        min_amount=record.get("minAmount") or 0,
        description=record.get("description") or "",
        is_active=record.get("isActive", True),
    )


class _RemoteSource:
    def __init__(self, base_url: str, token: Optional[str], timeout: float):
        self._base_url = base_url.rstrip("/")
        self._headers = {"utoken": token} if token else {}
        self._timeout = timeout

    def _fetch(self, path: str, source: str) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            data = get_json(url, headers=self._headers, timeout=self._timeout)
        except HttpError as e:
            raise CollaboratorError(str(e), source=source) from e
        if data.get("success") is False:
            raise CollaboratorError(
                data.get("message") or f"{source} request rejected", source=source
            )
        return data


class HttpCategorySource(_RemoteSource, CategorySource):
    name = "http"

    def list_categories(self) -> List[Category]:  # type: ignore[override]
        data = self._fetch("/api/user/categories", "categories")
        categories: List[Category] = []
        for record in data.get("categories") or []:
            try:
                category = _category_from_remote(record)
            except ValidationError:
                logger.warning("skipping malformed category record %r", record.get("_id"))
                continue
            if category.is_active:
                categories.append(category)
        return categories


class HttpCourierChargeSource(_RemoteSource, CourierChargeSource):
    name = "http"

    def list_charges(self) -> List[CourierChargeEntry]:  # type: ignore[override]
        data = self._fetch("/api/user/courier-charges", "courier_charges")
        entries: Dict[str, CourierChargeEntry] = {}
        for record in data.get("courierCharges") or []:
            try:
                entry = CourierChargeEntry(region=record.get("region"), amount=record.get("amount"))
            except ValidationError:
                logger.warning("skipping malformed courier charge %r", record)
                continue
            # one entry per region; first (newest) wins
            entries.setdefault(entry.region.value, entry)
        return list(entries.values())


_SOURCE_REGISTRY = {
    "sqlite": lambda settings, db: (SqliteCategorySource(db), SqliteCourierChargeSource(db)),
    "http": lambda settings, db: (
        HttpCategorySource(
            str(settings.catalog_base_url), settings.catalog_api_token, settings.http_timeout_seconds
        ),
        HttpCourierChargeSource(
            str(settings.catalog_base_url), settings.catalog_api_token, settings.http_timeout_seconds
        ),
    ),
}


def make_reference_sources(
    settings: Settings, db: Database
) -> Tuple[CategorySource, CourierChargeSource]:
    factory = _SOURCE_REGISTRY.get(settings.catalog_source)
    if not factory:
        raise ValueError(f"Unknown catalog source '{settings.catalog_source}'")
    return factory(settings, db)
