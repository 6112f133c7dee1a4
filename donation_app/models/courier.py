from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .constants import Region


class CourierChargeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: Region
    amount: float = Field(..., ge=0)
