# app/api/api_equipment.py

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud, models
from ..models.equipment import EquipmentCategory
from ..schemas.equipment import (
    EquipmentCreate,
    EquipmentFilters,
    EquipmentResponse,
    EquipmentUpdate,
)
from ..schemas.booking import MessageResponse
from .dependencies import get_current_church

router = APIRouter(
    # Note: NO prefix here, because main.py already does `prefix="/api/v1/equipment"`
    tags=["Equipment"],
)


@router.get("/", response_model=List[EquipmentResponse])
def list_equipment(
    category: Optional[EquipmentCategory] = None,
    max_price: Optional[Decimal] = Query(None, ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List bookable equipment, newest first (public)."""
    filters = EquipmentFilters(category=category, max_price=max_price)
    return crud.equipment.list_available(db, filters, skip=skip, limit=limit)


@router.get("/mine", response_model=List[EquipmentResponse])
def list_my_equipment(
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    return crud.equipment.list_for_owner(db, current_church.id)


@router.get("/{equipment_id}", response_model=EquipmentResponse)
def read_equipment(equipment_id: int, db: Session = Depends(get_db)):
    return crud.equipment.get_or_404(db, equipment_id)


@router.post("/", response_model=EquipmentResponse, status_code=status.HTTP_201_CREATED)
def create_equipment(
    equipment_in: EquipmentCreate,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    return crud.equipment.create(db, current_church.id, equipment_in.model_dump())


@router.put("/{equipment_id}", response_model=EquipmentResponse)
def update_equipment(
    equipment_id: int,
    equipment_in: EquipmentUpdate,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    return crud.equipment.update(
        db, current_church.id, equipment_id, equipment_in.model_dump(exclude_unset=True)
    )


@router.delete("/{equipment_id}", response_model=MessageResponse)
def delete_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    if crud.equipment.delete(db, current_church.id, equipment_id):
        return MessageResponse(message="Equipment deleted successfully")
    return MessageResponse(message="Equipment has bookings and was disabled instead")
