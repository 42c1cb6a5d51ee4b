# backend/app/api/api_booking.py

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud, models
from ..schemas.booking import (
    BookingCreate,
    BookingCreated,
    BookingResponse,
    BookingStatusUpdate,
    MessageResponse,
)
from ..services import booking_engine
from ..utils.errors import ForbiddenError, NotFoundError
from .dependencies import get_current_church

router = APIRouter(tags=["bookings"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)
# ‣ Note: no prefix here.  main.py already does:
#     app.include_router(router, prefix="/api/v1/bookings", …)


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    *,
    db: Session = Depends(get_db),
    booking_in: BookingCreate,
    current_church: models.Church = Depends(get_current_church),
) -> Any:
    """Request a venue, equipment, or a venue with equipment add-ons.

    The booking starts out ``pending`` until the owning church decides.
    """
    booking = booking_engine.create_booking(db, booking_in, current_church.id)
    return BookingCreated(id=booking.id)


@router.get("/", response_model=List[BookingResponse])
def read_my_bookings(
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> Any:
    """Bookings the current church has made, newest first."""
    return crud.booking.get_bookings_by_booker(db, current_church.id, skip=skip, limit=limit)


@router.get("/my-listings", response_model=List[BookingResponse])
def read_bookings_on_my_listings(
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> Any:
    """Bookings made against the current church's venues and equipment."""
    return crud.booking.get_bookings_by_owner(db, current_church.id, skip=skip, limit=limit)


@router.get("/{booking_id}", response_model=BookingResponse)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
) -> Any:
    booking = crud.booking.get_booking(db, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    # Visible to the booker and to any church whose listing is on it
    owners = {booking.owner_church_id}
    owners.update(item.equipment.church_id for item in booking.equipment_items if item.equipment)
    if current_church.id != booking.church_id and current_church.id not in owners:
        raise ForbiddenError("Not authorized")
    return booking


@router.put("/{booking_id}/status", response_model=MessageResponse)
def update_booking_status(
    booking_id: int,
    status_update: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_church: models.Church = Depends(get_current_church),
) -> Any:
    """Approve or reject a booking on one of the current church's listings."""
    booking_engine.update_booking_status(db, booking_id, status_update.status, current_church.id)
    return MessageResponse(message="Booking status updated successfully")
