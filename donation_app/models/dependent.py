from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .constants import GENDERS


def _clean_name(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("fullname cannot be empty")
    return value.strip()


def _valid_gender(value: str) -> str:
    value = value.lower()
    if value not in GENDERS:
        raise ValueError("unsupported gender")
    return value


def _dob_not_future(value: date) -> date:
    if value > date.today():
        raise ValueError("dob cannot be in the future")
    return value


class DependentIn(BaseModel):
    fullname: str
    gender: str
    dob: date
    mother: str = ""

    @field_validator("fullname")
    @classmethod
    def _fullname(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("gender")
    @classmethod
    def _gender(cls, value: str) -> str:
        return _valid_gender(value)

    @field_validator("dob")
    @classmethod
    def _dob(cls, value: date) -> date:
        return _dob_not_future(value)


class DependentUpdate(BaseModel):
    fullname: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    mother: Optional[str] = None

    @field_validator("fullname")
    @classmethod
    def _fullname(cls, value: Optional[str]) -> Optional[str]:
        return _clean_name(value) if value is not None else None

    @field_validator("gender")
    @classmethod
    def _gender(cls, value: Optional[str]) -> Optional[str]:
        return _valid_gender(value) if value is not None else None

    @field_validator("dob")
    @classmethod
    def _dob(cls, value: Optional[date]) -> Optional[date]:
        return _dob_not_future(value) if value is not None else None

    @model_validator(mode="after")
    def _at_least_one(self) -> "DependentUpdate":
        if not any(
            getattr(self, f) is not None for f in ("fullname", "gender", "dob", "mother")
        ):
            raise ValueError("at least one field must be provided")
        return self


class DependentOut(DependentIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    donor_id: str
    is_complete: bool
    created_at: datetime
    updated_at: datetime
