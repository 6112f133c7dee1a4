from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from donation_app.db.dal import Database
from donation_app.models.dependent import DependentIn, DependentOut, DependentUpdate
from .deps import get_db

router = APIRouter(prefix="/donors/{donor_id}/dependents", tags=["dependents"])


def _row_to_dependent_out(row: dict) -> DependentOut:
    return DependentOut(
        id=row["id"],
        donor_id=row["donor_id"],
        fullname=row["fullname"],
        gender=row["gender"],
        dob=datetime.strptime(row["dob"], "%Y-%m-%d").date(),
        mother=row["mother"],
        is_complete=bool(row["is_complete"]),
        created_at=datetime.fromisoformat(row["created_at"].replace("Z", "")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "")),
    )


@router.get("/", response_model=List[DependentOut], summary="List a donor's children")
async def list_dependents(donor_id: str, db: Database = Depends(get_db)):
    return [_row_to_dependent_out(r) for r in db.list_dependents(donor_id)]


@router.post(
    "/", response_model=DependentOut, status_code=201, summary="Add a child dependent"
)
async def create_dependent(
    donor_id: str, payload: DependentIn, db: Database = Depends(get_db)
):
    dependent_id = db.create_dependent(donor_id, payload)
    row = db.get_dependent(donor_id, dependent_id)
    if not row:
        raise HTTPException(status_code=500, detail="failed to persist dependent")
    return _row_to_dependent_out(row)


@router.put(
    "/{dependent_id}", response_model=DependentOut, summary="Edit a child dependent"
)
async def update_dependent(
    donor_id: str,
    dependent_id: int,
    payload: DependentUpdate,
    db: Database = Depends(get_db),
):
    if not db.update_dependent(donor_id, dependent_id, payload):
        raise HTTPException(status_code=404, detail="dependent not found")
    row = db.get_dependent(donor_id, dependent_id)
    return _row_to_dependent_out(row)


@router.delete("/{dependent_id}", summary="Remove a child dependent")
async def delete_dependent(
    donor_id: str, dependent_id: int, db: Database = Depends(get_db)
):
    if not db.delete_dependent(donor_id, dependent_id):
        raise HTTPException(status_code=404, detail="dependent not found")
    return {"status": "deleted", "id": dependent_id}
