from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CategoryKind(str, Enum):
    STANDARD = "standard"
    SERVICE = "service"
    DYNAMIC = "dynamic"


class DynamicSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_dynamic: bool = False
    min_value_grams: float = Field(0, ge=0)


def resolve_kind(name: str, dynamic: DynamicSpec) -> CategoryKind:
    """Dynamic flag wins, then a "service" name, else standard."""
    if dynamic.is_dynamic:
        return CategoryKind.DYNAMIC
    if "service" in (name or "").lower():
        return CategoryKind.SERVICE
    return CategoryKind.STANDARD


class Category(BaseModel):
    """Donation category as offered to donors.

    ``kind`` is derived once from the source fields when the record is built;
    callers never pass it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unit_rate: float = Field(0, ge=0)
    unit_weight_grams: float = Field(0, ge=0)
    unit_is_packet: bool = False
    dynamic: DynamicSpec = Field(default_factory=DynamicSpec)
    min_amount: float = Field(0, ge=0)
    description: str = ""
    is_active: bool = True
    kind: CategoryKind = CategoryKind.STANDARD

    @model_validator(mode="before")
    @classmethod
    def _derive_kind(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            dyn = values.get("dynamic") or {}
            if not isinstance(dyn, DynamicSpec):
                dyn = DynamicSpec(**dyn)
            values["dynamic"] = dyn
            values["kind"] = resolve_kind(values.get("name", ""), dyn)
        return values

    @property
    def is_dynamic(self) -> bool:
        return self.kind is CategoryKind.DYNAMIC

    @property
    def is_service(self) -> bool:
        return self.kind is CategoryKind.SERVICE

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Category":
        return cls(
            id=str(row["id"]),
            name=row["name"],
            unit_rate=row["unit_rate"],
            unit_weight_grams=row["unit_weight_grams"],
            unit_is_packet=bool(row["unit_is_packet"]),
            dynamic={
                "is_dynamic": bool(row["is_dynamic"]),
                "min_value_grams": row["min_value_grams"],
            },
            min_amount=row.get("min_amount") or 0,
            description=row.get("description") or "",
            is_active=bool(row.get("is_active", 1)),
        )


class CategoryIn(BaseModel):
    """Inbound category definition (seed data / admin imports)."""

    name: str
    unit_rate: float = Field(..., gt=0)
    unit_weight_grams: float = Field(0, ge=0)
    unit_is_packet: bool = False
    dynamic: DynamicSpec = Field(default_factory=DynamicSpec)
    min_amount: float = Field(0, ge=0)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("category name cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def _weight_or_packet(self) -> "CategoryIn":
        if not (self.unit_weight_grams or self.unit_is_packet):
            raise ValueError("category needs a unit weight or must be packet based")
        if not self.dynamic.is_dynamic and self.dynamic.min_value_grams:
            # minimum weight is only kept for dynamic categories
            self.dynamic = DynamicSpec(is_dynamic=False, min_value_grams=0)
        return self
