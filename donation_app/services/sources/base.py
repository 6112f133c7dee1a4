from __future__ import annotations

"""Reference data source abstraction.

The donation engine only reads categories and courier charges; where they
come from (local SQLite tables, the donor-site backend over HTTP) is a
deployment choice made through settings.catalog_source.
"""
from abc import ABC, abstractmethod
from typing import List

from donation_app.models.category import Category
from donation_app.models.courier import CourierChargeEntry


class CategorySource(ABC):
    name: str = "unknown"

    @abstractmethod
    def list_categories(self) -> List[Category]:
        """Return active categories in display order.

        Raises CollaboratorError when the source cannot be read.
        """
        raise NotImplementedError


class CourierChargeSource(ABC):
    name: str = "unknown"

    @abstractmethod
    def list_charges(self) -> List[CourierChargeEntry]:
        """Return the courier charge table (at most one entry per region)."""
        raise NotImplementedError
