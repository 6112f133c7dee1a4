"""Domain constants and enumerations for validation."""

from enum import Enum
from typing import Set


class Region(str, Enum):
    """Courier pricing tiers, nested from most to least local."""

    IN_GAYA_OUTSIDE_MANPUR = "in_gaya_outside_manpur"
    IN_BIHAR_OUTSIDE_GAYA = "in_bihar_outside_gaya"
    IN_INDIA_OUTSIDE_BIHAR = "in_india_outside_bihar"
    OUTSIDE_INDIA = "outside_india"


REGIONS: Set[str] = {r.value for r in Region}

FULFILLMENT_SELF_COLLECT = "self_collect"
FULFILLMENT_COURIER = "courier"
FULFILLMENTS: Set[str] = {FULFILLMENT_SELF_COLLECT, FULFILLMENT_COURIER}

DONATED_AS_SELF = "self"
DONATED_AS_CHILD = "child"
DONATED_AS_SPOUSE = "spouse"
DONATED_AS: Set[str] = {DONATED_AS_SELF, DONATED_AS_CHILD, DONATED_AS_SPOUSE}

# Method -> single-letter code used in receipt ids
PAYMENT_METHOD_CODES = {
    "Cash": "C",
    "Online": "O",
    "QR Code": "Q",
}
PAYMENT_METHODS: Set[str] = {"Cash", "Online"}

PAYMENT_STATUSES: Set[str] = {"pending", "completed", "failed"}

GENDERS: Set[str] = {"male", "female", "other"}
