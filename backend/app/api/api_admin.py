from __future__ import annotations

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud, models
from ..models.booking_status import BookingStatus
from ..schemas.booking import AdminStats, BookingResponse, BookingStatusUpdate, MessageResponse
from ..services import booking_engine
from ..utils.errors import ValidationError
from .dependencies import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

# Decisions on pending bookings belong to the owning church
ADMIN_STATUSES = {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}


def _count(db: Session, model) -> int:
    return db.query(func.count(model.id)).scalar() or 0


@router.get("/stats", response_model=AdminStats)
def read_stats(
    db: Session = Depends(get_db),
    admin: models.Church = Depends(get_current_admin),
) -> Any:
    return AdminStats(
        churches=_count(db, models.Church),
        venues=_count(db, models.Venue),
        equipment=_count(db, models.Equipment),
        bookings=_count(db, models.Booking),
        pending_bookings=crud.booking.count_by_status(db, BookingStatus.PENDING),
    )


@router.get("/bookings", response_model=List[BookingResponse])
def list_all_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.Church = Depends(get_current_admin),
) -> Any:
    return crud.booking.get_all_bookings(db, skip=skip, limit=limit)


@router.put("/bookings/{booking_id}/status", response_model=MessageResponse)
def close_booking(
    booking_id: int,
    status_update: BookingStatusUpdate,
    db: Session = Depends(get_db),
    admin: models.Church = Depends(get_current_admin),
) -> Any:
    """Mark an approved booking completed or cancelled."""
    requested = (status_update.status or "").strip().lower()
    if requested not in ADMIN_STATUSES:
        raise ValidationError("Admins may only complete or cancel bookings", field="status")
    booking_engine.update_booking_status(db, booking_id, requested, admin.id, as_admin=True)
    logger.info("Admin %s set booking %s to %s", admin.id, booking_id, requested)
    return MessageResponse(message="Booking status updated successfully")


@router.delete("/venues/{venue_id}", response_model=MessageResponse)
def remove_venue(
    venue_id: int,
    db: Session = Depends(get_db),
    admin: models.Church = Depends(get_current_admin),
) -> Any:
    removed = crud.venue.delete(db, None, venue_id)
    logger.info("Admin %s removed venue %s (deleted=%s)", admin.id, venue_id, removed)
    if removed:
        return MessageResponse(message="Venue deleted successfully")
    return MessageResponse(message="Venue has bookings and was disabled instead")


@router.delete("/equipment/{equipment_id}", response_model=MessageResponse)
def remove_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    admin: models.Church = Depends(get_current_admin),
) -> Any:
    removed = crud.equipment.delete(db, None, equipment_id)
    logger.info("Admin %s removed equipment %s (deleted=%s)", admin.id, equipment_id, removed)
    if removed:
        return MessageResponse(message="Equipment deleted successfully")
    return MessageResponse(message="Equipment has bookings and was disabled instead")
