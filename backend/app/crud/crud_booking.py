from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from .. import models
from ..models.booking_status import ACTIVE_STATUSES, BookingStatus


def _with_relations(query):
    return query.options(
        joinedload(models.Booking.church),
        joinedload(models.Booking.venue),
        joinedload(models.Booking.equipment),
        selectinload(models.Booking.equipment_items).joinedload(models.BookingEquipment.equipment),
    )


def _overlapping(query, start: datetime, end: datetime):
    """Active bookings whose half-open window [start, end) meets the given one."""
    return query.filter(
        models.Booking.status.in_(ACTIVE_STATUSES),
        models.Booking.start_date < end,
        models.Booking.end_date > start,
    )


class CRUDBooking:
    def get_booking(self, db: Session, booking_id: int) -> Optional[models.Booking]:
        return (
            _with_relations(db.query(models.Booking))
            .filter(models.Booking.id == booking_id)
            .first()
        )

    def count_venue_overlaps(
        self, db: Session, venue_id: int, start: datetime, end: datetime
    ) -> int:
        query = db.query(func.count(models.Booking.id)).filter(models.Booking.venue_id == venue_id)
        return _overlapping(query, start, end).scalar() or 0

    def equipment_units_in_use(
        self, db: Session, equipment_id: int, start: datetime, end: datetime
    ) -> int:
        """Units of an equipment item held by active bookings overlapping the window.

        Counts direct equipment bookings (one unit each) plus the quantity
        of add-on line items on overlapping venue bookings.
        """
        direct = _overlapping(
            db.query(func.count(models.Booking.id)).filter(
                models.Booking.equipment_id == equipment_id
            ),
            start,
            end,
        ).scalar() or 0
        add_ons = _overlapping(
            db.query(func.coalesce(func.sum(models.BookingEquipment.quantity), 0))
            .join(models.Booking, models.BookingEquipment.booking_id == models.Booking.id)
            .filter(models.BookingEquipment.equipment_id == equipment_id),
            start,
            end,
        ).scalar() or 0
        return int(direct) + int(add_ons)

    def equipment_peak_units(self, db: Session, equipment_id: int, since: datetime) -> int:
        """Most units of an item held at any single moment by active bookings ending after ``since``."""
        active = (
            models.Booking.status.in_(ACTIVE_STATUSES),
            models.Booking.end_date > since,
        )
        direct = (
            db.query(models.Booking.start_date, models.Booking.end_date)
            .filter(models.Booking.equipment_id == equipment_id, *active)
            .all()
        )
        add_ons = (
            db.query(models.Booking.start_date, models.Booking.end_date, models.BookingEquipment.quantity)
            .join(models.Booking, models.BookingEquipment.booking_id == models.Booking.id)
            .filter(models.BookingEquipment.equipment_id == equipment_id, *active)
            .all()
        )
        changes = []
        for start, end in direct:
            changes += [(start, 1), (end, -1)]
        for start, end, quantity in add_ons:
            changes += [(start, quantity or 1), (end, -(quantity or 1))]
        # Releases sort before claims at the same instant; windows are half-open
        changes.sort()
        peak = held = 0
        for _, delta in changes:
            held += delta
            peak = max(peak, held)
        return peak

    def get_bookings_by_booker(
        self, db: Session, church_id: int, skip: int = 0, limit: int = 100
    ) -> List[models.Booking]:
        return (
            _with_relations(db.query(models.Booking))
            .filter(models.Booking.church_id == church_id)
            .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_bookings_by_owner(
        self, db: Session, church_id: int, skip: int = 0, limit: int = 100
    ) -> List[models.Booking]:
        """Bookings on the church's venues, equipment or equipment add-ons."""
        add_on_booking_ids = (
            db.query(models.BookingEquipment.booking_id)
            .join(models.Equipment, models.BookingEquipment.equipment_id == models.Equipment.id)
            .filter(models.Equipment.church_id == church_id)
        )
        return (
            _with_relations(db.query(models.Booking))
            .outerjoin(models.Venue, models.Booking.venue_id == models.Venue.id)
            .outerjoin(models.Equipment, models.Booking.equipment_id == models.Equipment.id)
            .filter(
                or_(
                    models.Venue.church_id == church_id,
                    models.Equipment.church_id == church_id,
                    models.Booking.id.in_(add_on_booking_ids),
                )
            )
            .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all_bookings(self, db: Session, skip: int = 0, limit: int = 100) -> List[models.Booking]:
        return (
            _with_relations(db.query(models.Booking))
            .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_status(self, db: Session, status: BookingStatus) -> int:
        return db.query(func.count(models.Booking.id)).filter(models.Booking.status == status).scalar() or 0


booking = CRUDBooking()
