from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .constants import DONATED_AS, FULFILLMENTS, PAYMENT_METHODS, PAYMENT_STATUSES


class DraftItemIn(BaseModel):
    """One line of the donation form, as typed by the donor.

    ``quantity`` and ``amount`` are raw inputs: blank strings are allowed and
    are interpreted by the line-item rules, not rejected here.
    """

    category_id: Optional[str] = None
    quantity: Optional[Union[int, str]] = 1
    amount: Optional[Union[float, str]] = None


class DonationDraftIn(BaseModel):
    donor_id: str
    items: List[DraftItemIn] = Field(..., min_length=1)
    fulfillment: str = "self_collect"
    courier_address: str = ""
    donated_as: str = "self"
    donated_for: Optional[str] = None
    relation_name: str = ""
    child_form_open: bool = False

    @field_validator("donor_id")
    @classmethod
    def _donor_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("donor_id cannot be empty")
        return value.strip()

    @field_validator("fulfillment")
    @classmethod
    def _valid_fulfillment(cls, value: str) -> str:
        if value not in FULFILLMENTS:
            raise ValueError("unsupported fulfillment")
        return value

    @field_validator("donated_as")
    @classmethod
    def _valid_donated_as(cls, value: str) -> str:
        if value not in DONATED_AS:
            raise ValueError("unsupported donated_as")
        return value


class DonationOrderIn(DonationDraftIn):
    method: str = "Online"
    remarks: str = ""

    @field_validator("method")
    @classmethod
    def _valid_method(cls, value: str) -> str:
        if value not in PAYMENT_METHODS:
            raise ValueError("unsupported payment method")
        return value


class ResolvedItemOut(BaseModel):
    category_id: Optional[str]
    category: Optional[str]
    kind: Optional[str]
    quantity: Optional[int]
    amount: float
    minimum_amount: float
    weight_grams: float
    packet_count: int
    validation_error: Optional[str]
    amount_editable: bool
    quantity_editable: bool


class TotalsOut(BaseModel):
    total_amount: float
    raw_weight_grams: float
    total_weight_grams: float
    weight_rounded_up_by: float
    total_packet_count: int
    courier_charge: float
    net_payable: float


class RegionOut(BaseModel):
    outcome: str
    courier_eligible: bool
    notice: str


class QuoteOut(BaseModel):
    items: List[ResolvedItemOut]
    totals: TotalsOut
    region: Optional[RegionOut]
    state: str
    reasons: List[str]
    notices: List[str] = []
    currency: str = "INR"


class OrderCreatedOut(BaseModel):
    donation_id: int
    handle: Optional[str]
    receipt_id: Optional[str]
    payment_required: bool
    totals: TotalsOut
    note: Optional[str] = None


class DonationItemOut(BaseModel):
    category: str
    number: int
    amount: float
    is_packet: bool
    packet_count: int
    weight_grams: float


class DonationSummaryOut(BaseModel):
    id: int
    donated_as: str
    fulfillment: str
    method: str
    amount: float
    receipt_id: Optional[str]
    payment_status: str
    created_at: datetime


class DonationOut(BaseModel):
    id: int
    donor_id: str
    donated_as: str
    donated_for: Optional[int]
    relation_name: str
    fulfillment: str
    postal_address: str
    method: str
    remarks: str
    total_amount: float
    courier_charge: float
    amount: float
    raw_weight_grams: float
    total_weight_grams: float
    packet_count: int
    receipt_id: Optional[str]
    payment_status: str
    items: List[DonationItemOut]
    note: Optional[str] = None
    created_at: datetime

    @field_validator("payment_status")
    @classmethod
    def _valid_status(cls, value: str) -> str:
        if value not in PAYMENT_STATUSES:
            raise ValueError("unsupported payment status")
        return value
