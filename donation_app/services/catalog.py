from __future__ import annotations

import logging
from typing import Dict, List, Optional

from donation_app.core.errors import CollaboratorError, UnknownCategoryError
from donation_app.models.category import Category
from donation_app.models.courier import CourierChargeEntry
from .sources.base import CategorySource, CourierChargeSource

"""Per-session reference data cache.

Purpose:
    Hold the category catalog and courier charge table for one donation
    session. Both are read through from their sources on first access (or an
    explicit load()) and kept until invalidate(); the session that owns the
    cache invalidates it when it closes.

Failure handling:
    A source failure never propagates out of load(). The affected list is
    left empty (no categories to pick / zero courier charge) and a generic
    notice is recorded in `notices` so callers can tell the donor.
"""

logger = logging.getLogger("donation_app.catalog")

CATALOG_UNAVAILABLE = "Donation categories could not be loaded. Please try again later."
CHARGES_UNAVAILABLE = "Courier charges could not be loaded; courier fees are not shown."


class SessionCatalog:
    def __init__(
        self,
        category_source: CategorySource,
        charge_source: CourierChargeSource,
    ):
        self._category_source = category_source
        self._charge_source = charge_source
        self._categories: Optional[List[Category]] = None
        self._charges: Optional[List[CourierChargeEntry]] = None
        self._by_id: Dict[str, Category] = {}
        self.notices: List[str] = []

    # Lifecycle -------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self._categories is not None and self._charges is not None

    def load(self) -> "SessionCatalog":
        if self._categories is None:
            self._categories = self._load_categories()
            self._by_id = {c.id: c for c in self._categories}
        if self._charges is None:
            self._charges = self._load_charges()
        return self

    def invalidate(self) -> None:
        self._categories = None
        self._charges = None
        self._by_id = {}
        self.notices = []

    def _load_categories(self) -> List[Category]:
        try:
            categories = self._category_source.list_categories()
        except CollaboratorError as e:
            logger.warning("category source '%s' failed: %s", self._category_source.name, e)
            self.notices.append(CATALOG_UNAVAILABLE)
            return []
        logger.debug("loaded %d categories from %s", len(categories), self._category_source.name)
        return categories

    def _load_charges(self) -> List[CourierChargeEntry]:
        try:
            charges = self._charge_source.list_charges()
        except CollaboratorError as e:
            logger.warning("courier charge source '%s' failed: %s", self._charge_source.name, e)
            self.notices.append(CHARGES_UNAVAILABLE)
            return []
        return charges

    # Read API --------------------------------------------------
    @property
    def categories(self) -> List[Category]:
        self.load()
        return list(self._categories or [])

    @property
    def charges(self) -> List[CourierChargeEntry]:
        self.load()
        return list(self._charges or [])

    def get(self, category_id: str) -> Category:
        self.load()
        category = self._by_id.get(str(category_id))
        if category is None:
            raise UnknownCategoryError(f"Unknown donation category '{category_id}'")
        return category

    def dynamic_categories(self) -> List[Category]:
        return [c for c in self.categories if c.is_dynamic]
