"""Pydantic domain models for the donation service."""

from .constants import (
    DONATED_AS,
    FULFILLMENTS,
    PAYMENT_METHODS,
    REGIONS,
    Region,
)  # re-export
from .category import Category, CategoryIn, CategoryKind, DynamicSpec
from .courier import CourierChargeEntry
from .dependent import DependentIn, DependentOut, DependentUpdate
from .donation import DonationDraftIn, DonationOrderIn, QuoteOut

__all__ = [
    "DONATED_AS",
    "FULFILLMENTS",
    "PAYMENT_METHODS",
    "REGIONS",
    "Region",
    "Category",
    "CategoryIn",
    "CategoryKind",
    "DynamicSpec",
    "CourierChargeEntry",
    "DependentIn",
    "DependentOut",
    "DependentUpdate",
    "DonationDraftIn",
    "DonationOrderIn",
    "QuoteOut",
]
