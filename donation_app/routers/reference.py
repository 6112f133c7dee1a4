from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from donation_app.models.category import Category
from donation_app.models.constants import DONATED_AS, DONATED_AS_CHILD
from donation_app.models.courier import CourierChargeEntry
from donation_app.services.catalog import SessionCatalog
from .deps import get_session_catalog

"""Read-only reference data for the donation form.

Endpoints:
    - GET /categories        -> active categories (?donated_as=child -> dynamic only)
    - GET /courier-charges   -> courier charge table
"""

router = APIRouter(tags=["reference"])


class CategoryListOut(BaseModel):
    categories: List[Category]
    notices: List[str] = []


class CourierChargeListOut(BaseModel):
    courier_charges: List[CourierChargeEntry]
    notices: List[str] = []


@router.get("/categories", response_model=CategoryListOut, summary="List donation categories")
async def list_categories(
    donated_as: Optional[str] = Query(None, description="self | child | spouse"),
    catalog: SessionCatalog = Depends(get_session_catalog),
):
    if donated_as is not None and donated_as not in DONATED_AS:
        raise HTTPException(status_code=400, detail="unsupported donated_as")
    categories = catalog.categories
    if donated_as == DONATED_AS_CHILD:
        categories = [c for c in categories if c.is_dynamic]
    return CategoryListOut(categories=categories, notices=catalog.notices)


@router.get(
    "/courier-charges", response_model=CourierChargeListOut, summary="List courier charges"
)
async def list_courier_charges(catalog: SessionCatalog = Depends(get_session_catalog)):
    return CourierChargeListOut(courier_charges=catalog.charges, notices=catalog.notices)
