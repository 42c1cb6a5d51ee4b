# app/api/api_church.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..schemas.church import ChurchProfile
from ..utils.errors import NotFoundError

router = APIRouter(
    # Note: NO prefix here, because main.py already does `prefix="/api/v1/churches"`
    tags=["Churches"],
)


@router.get("/", response_model=List[ChurchProfile])
def list_churches(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Public church directory, ordered by name."""
    return crud.church.list(db, skip=skip, limit=limit)


@router.get("/{church_id}", response_model=ChurchProfile)
def read_church(church_id: int, db: Session = Depends(get_db)):
    church = crud.church.get(db, church_id)
    if church is None:
        raise NotFoundError("Church not found")
    return church
