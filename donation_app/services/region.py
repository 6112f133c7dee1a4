"""Address region classification and courier charge lookup.

A single keyword scan over the lower-cased address yields both the courier
pricing tier and the courier-eligibility flag, so the charge and the
"please collect in person" notice can never disagree.

Tiers, first match wins (most specific first):

    manpur + gaya + bihar + india -> local (no courier fee)
    gaya + bihar + india          -> in_gaya_outside_manpur
    bihar + india                 -> in_bihar_outside_gaya
    india                         -> in_india_outside_bihar
    anything else                 -> outside_india

Addresses mentioning manpur, gaya and bihar are not eligible for courier
delivery at all; the donor is asked to collect in person. That is a notice,
not a submission blocker, but no courier charge is levied for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from donation_app.models.constants import FULFILLMENT_COURIER, Region
from donation_app.models.courier import CourierChargeEntry

LOCAL = "local"

INELIGIBLE_NOTICE = (
    "Courier delivery is not available for addresses in Manpur, Gaya. "
    "Please collect your Mahaprasad in person."
)
COURIER_PROMISE = "Your Mahaprasad will be sent by courier to the address provided."


@dataclass(frozen=True)
class RegionClassification:
    tier: Optional[Region]
    courier_eligible: bool

    @property
    def is_local(self) -> bool:
        return self.tier is None

    @property
    def outcome(self) -> str:
        return LOCAL if self.tier is None else self.tier.value

    @property
    def notice(self) -> str:
        return COURIER_PROMISE if self.courier_eligible else INELIGIBLE_NOTICE


def classify_address(address: Optional[str]) -> RegionClassification:
    text = (address or "").lower()
    manpur = "manpur" in text
    gaya = "gaya" in text
    bihar = "bihar" in text
    india = "india" in text

    eligible = not (manpur and gaya and bihar)
    if manpur and gaya and bihar and india:
        return RegionClassification(tier=None, courier_eligible=eligible)
    if gaya and bihar and india:
        tier = Region.IN_GAYA_OUTSIDE_MANPUR
    elif bihar and india:
        tier = Region.IN_BIHAR_OUTSIDE_GAYA
    elif india:
        tier = Region.IN_INDIA_OUTSIDE_BIHAR
    else:
        tier = Region.OUTSIDE_INDIA
    return RegionClassification(tier=tier, courier_eligible=eligible)


def lookup_charge(tier: Optional[Region], charges: Iterable[CourierChargeEntry]) -> float:
    if tier is None:
        return 0.0
    for entry in charges:
        if entry.region == tier:
            return float(entry.amount)
    return 0.0


def courier_charge_for(
    fulfillment: str,
    address: Optional[str],
    charges: Iterable[CourierChargeEntry],
    classification: Optional[RegionClassification] = None,
) -> float:
    """Courier surcharge for the order; zero whenever no courier fee applies."""
    charges = list(charges)
    if fulfillment != FULFILLMENT_COURIER or not (address or "").strip() or not charges:
        return 0.0
    result = classification or classify_address(address)
    if not result.courier_eligible:
        return 0.0
    return lookup_charge(result.tier, charges)


__all__ = [
    "LOCAL",
    "RegionClassification",
    "classify_address",
    "lookup_charge",
    "courier_charge_for",
]
