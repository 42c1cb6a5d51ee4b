# app/api/api_venue.py

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud, models
from ..schemas.venue import VenueCreate, VenueFilters, VenueResponse, VenueUpdate
from ..schemas.booking import MessageResponse
from .dependencies import get_current_church

router = APIRouter(
    # Note: NO prefix here, because main.py already does `prefix="/api/v1/venues"`
    tags=["Venues"],
)


@router.get("/", response_model=List[VenueResponse])
def list_venues(
    city: Optional[str] = None,
    province: Optional[str] = None,
    min_capacity: Optional[int] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List bookable venues, newest first (public)."""
    filters = VenueFilters(
        city=city, province=province, min_capacity=min_capacity, max_price=max_price
    )
    return crud.venue.list_available(db, filters, skip=skip, limit=limit)


@router.get("/mine", response_model=List[VenueResponse])
def list_my_venues(
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    """Every venue the current church has listed, including disabled ones."""
    return crud.venue.list_for_owner(db, current_church.id)


@router.get("/{venue_id}", response_model=VenueResponse)
def read_venue(venue_id: int, db: Session = Depends(get_db)):
    return crud.venue.get_or_404(db, venue_id)


@router.post("/", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
def create_venue(
    venue_in: VenueCreate,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    return crud.venue.create(db, current_church.id, venue_in.model_dump())


@router.put("/{venue_id}", response_model=VenueResponse)
def update_venue(
    venue_id: int,
    venue_in: VenueUpdate,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    return crud.venue.update(
        db, current_church.id, venue_id, venue_in.model_dump(exclude_unset=True)
    )


@router.delete("/{venue_id}", response_model=MessageResponse)
def delete_venue(
    venue_id: int,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
):
    """Delete a venue; venues with bookings are disabled instead."""
    if crud.venue.delete(db, current_church.id, venue_id):
        return MessageResponse(message="Venue deleted successfully")
    return MessageResponse(message="Venue has bookings and was disabled instead")
