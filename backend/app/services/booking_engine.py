"""Booking engine: request validation, conflict checks, pricing and the
status workflow.

``create_booking`` runs the availability check and the insert inside one
transaction (see ``app.database.run_in_transaction``). On SQLite that
transaction starts with ``BEGIN IMMEDIATE``; on server databases the target
rows are locked with ``SELECT ... FOR UPDATE``. Either way two overlapping
requests for the same venue cannot both pass the overlap check.

Notifications go out only after the commit and never affect the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from .. import crud, models
from ..core.config import business_now, settings
from ..database import run_in_transaction
from ..models import ALLOWED_TRANSITIONS, BookingStatus, BookingType, PriceOption
from ..notifications.intents import booking_lifecycle
from ..schemas.booking import BookingCreate
from ..utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .booking_pricing import compute_total_price

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    """A create request after structural and reference validation."""

    booking_type: BookingType
    start: datetime
    end: datetime
    price_option: PriceOption
    venue_id: Optional[int] = None
    equipment_id: Optional[int] = None
    equipment_ids: List[int] = field(default_factory=list)
    notes: Optional[str] = None


def parse_timestamp(value: Any, field_name: str, label: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive business-local time.

    Offset-aware values are converted to BUSINESS_TIMEZONE; naive values are
    taken to already be local.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required", field=field_name)
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError("Invalid date format", field=field_name)
    else:
        raise ValidationError("Invalid date format", field=field_name)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(settings.BUSINESS_TIMEZONE)).replace(tzinfo=None)
    return parsed


def _parse_enum(enum_cls, value: Any, field_name: str, message: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(message, field=field_name)


def validate_request(
    payload: BookingCreate | Mapping[str, Any], now: Optional[datetime] = None
) -> BookingRequest:
    """Structural, reference and business-hour validation (no database access)."""
    if not isinstance(payload, BookingCreate):
        payload = BookingCreate.model_validate(dict(payload))

    if payload.booking_type is None:
        raise ValidationError(
            "Booking type must be venue, equipment, or venue_with_equipment", field="booking_type"
        )
    booking_type = _parse_enum(
        BookingType,
        payload.booking_type,
        "booking_type",
        "Booking type must be venue, equipment, or venue_with_equipment",
    )
    start = parse_timestamp(payload.start_date, "start_date", "Start date")
    end = parse_timestamp(payload.end_date, "end_date", "End date")
    if end <= start:
        raise ValidationError("End date must be after start date", field="end_date")
    if start <= (now or business_now()):
        raise ValidationError("Start date must be in the future", field="start_date")

    price_option = PriceOption.HOURLY
    if payload.price_option is not None:
        price_option = _parse_enum(
            PriceOption,
            payload.price_option,
            "price_option",
            "Price option must be hourly, half_day, or full_day",
        )

    request = BookingRequest(
        booking_type=booking_type,
        start=start,
        end=end,
        price_option=price_option,
        notes=payload.notes or None,
    )
    if booking_type.involves_venue:
        if not payload.venue_id:
            raise ValidationError("Venue ID is required for venue bookings", field="venue_id")
        request.venue_id = payload.venue_id
    if booking_type == BookingType.EQUIPMENT:
        if not payload.equipment_id:
            raise ValidationError(
                "Equipment ID is required for equipment bookings", field="equipment_id"
            )
        request.equipment_id = payload.equipment_id
    if booking_type == BookingType.VENUE_WITH_EQUIPMENT:
        if not payload.equipment_ids:
            raise ValidationError(
                "At least one equipment item is required for venue with equipment bookings",
                field="equipment_ids",
            )
        # Repeated ids select the same add-on once
        request.equipment_ids = list(dict.fromkeys(payload.equipment_ids))

    if booking_type.involves_venue:
        check_operating_hours(start, end)
    return request


def check_operating_hours(start: datetime, end: datetime) -> None:
    """Venues open at BUSINESS_OPEN_HOUR and close at BUSINESS_CLOSE_HOUR.

    A booking may start at any time in [open, close) and end at any time in
    [open, close]; ending exactly at closing time is allowed.
    """
    opens, closes = settings.BUSINESS_OPEN_HOUR, settings.BUSINESS_CLOSE_HOUR
    window = f"{opens:02d}:00 and {closes:02d}:00"
    if start.hour < opens or start.hour >= closes:
        raise ValidationError(
            f"Booking is outside operating hours: venues are only available between {window} daily",
            field="start_date",
        )
    past_closing = end.hour == closes and (end.minute or end.second or end.microsecond)
    if end.hour < opens or end.hour > closes or past_closing:
        raise ValidationError(
            f"Booking is outside operating hours: venues are only available until {closes:02d}:00 daily",
            field="end_date",
        )


def _lock_venue(db: Session, venue_id: int) -> models.Venue:
    venue = (
        db.query(models.Venue)
        .filter(models.Venue.id == venue_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if venue is None:
        raise NotFoundError("Venue not found")
    if not venue.is_available:
        raise ConflictError("Venue is not available for booking")
    return venue


def _lock_equipment(db: Session, equipment_ids: List[int]) -> List[models.Equipment]:
    """Fetch and lock equipment rows in id order, preserving request order."""
    rows = (
        db.query(models.Equipment)
        .filter(models.Equipment.id.in_(equipment_ids))
        .order_by(models.Equipment.id)
        .with_for_update()
        .populate_existing()
        .all()
    )
    by_id = {row.id: row for row in rows}
    items = []
    for equipment_id in equipment_ids:
        item = by_id.get(equipment_id)
        if item is None:
            raise NotFoundError(
                "Equipment not found" if len(equipment_ids) == 1 else f"Equipment {equipment_id} not found"
            )
        if not item.is_available:
            raise ConflictError(f"Equipment '{item.name}' is not available for booking")
        items.append(item)
    return items


def _check_equipment_units(db: Session, items: List[models.Equipment], start: datetime, end: datetime) -> None:
    for item in items:
        in_use = crud.booking.equipment_units_in_use(db, item.id, start, end)
        if in_use >= (item.quantity or 1):
            logger.info(
                "Equipment %s fully booked: %s of %s units in use", item.id, in_use, item.quantity
            )
            if len(items) == 1:
                raise ConflictError("Equipment is fully booked for the selected dates")
            raise ConflictError(f"Equipment '{item.name}' is fully booked for the selected dates")


def create_booking(
    db: Session,
    booking_in: BookingCreate | Mapping[str, Any],
    booker_id: int,
    now: Optional[datetime] = None,
) -> models.Booking:
    """Validate, price and persist a booking request, then notify both churches.

    The engine does not de-duplicate identical submissions; two identical
    equipment requests consume two units.
    """
    request = validate_request(booking_in, now=now)

    def _work(session: Session) -> models.Booking:
        venue = None
        equipment = None
        add_ons: List[models.Equipment] = []

        if request.booking_type.involves_venue:
            venue = _lock_venue(session, request.venue_id)
            if crud.booking.count_venue_overlaps(session, venue.id, request.start, request.end) > 0:
                raise ConflictError("Venue is already booked for the selected dates")
        if request.booking_type == BookingType.EQUIPMENT:
            (equipment,) = _lock_equipment(session, [request.equipment_id])
            _check_equipment_units(session, [equipment], request.start, request.end)
        if request.booking_type == BookingType.VENUE_WITH_EQUIPMENT:
            add_ons = _lock_equipment(session, request.equipment_ids)
            _check_equipment_units(session, add_ons, request.start, request.end)

        total_price = compute_total_price(
            request.booking_type,
            request.start,
            request.end,
            request.price_option,
            venue=venue,
            equipment=equipment,
            add_ons=add_ons,
        )
        booking = models.Booking(
            church_id=booker_id,
            venue_id=venue.id if venue is not None else None,
            equipment_id=equipment.id if equipment is not None else None,
            booking_type=request.booking_type,
            start_date=request.start,
            end_date=request.end,
            price_option=request.price_option,
            total_price=total_price,
            status=BookingStatus.PENDING,
            notes=request.notes,
        )
        booking.equipment_items = [
            models.BookingEquipment(equipment_id=item.id, quantity=1) for item in add_ons
        ]
        session.add(booking)
        session.flush()
        return booking

    try:
        booking = run_in_transaction(db, _work)
    except (ConflictError, NotFoundError) as exc:
        logger.info("Booking request by church %s rejected: %s", booker_id, exc.message)
        raise
    logger.info(
        "Church %s created %s booking %s total=%s",
        booker_id,
        booking.booking_type.value,
        booking.id,
        booking.total_price,
    )
    _notify_created(db, booking, booker_id)
    return booking


def _notify_created(db: Session, booking: models.Booking, booker_id: int) -> None:
    try:
        booker = crud.church.get(db, booker_id)
        if booker is None:
            logger.error("Booker %s vanished before notification of booking %s", booker_id, booking.id)
            return
        owner_id = booking.owner_church_id
        owner = crud.church.get(db, owner_id) if owner_id is not None else None
        booking_lifecycle.send_booking_request_notifications(booking, booker, owner)
    except Exception as exc:
        logger.error("Failed to send notifications for booking %s: %s", booking.id, exc)


def update_booking_status(
    db: Session,
    booking_id: int,
    new_status: Any,
    acting_church_id: Optional[int],
    *,
    as_admin: bool = False,
) -> models.Booking:
    """Move a booking along its status machine.

    Only the church that owns the booked venue (or equipment) may act;
    ``as_admin`` lifts that restriction for administrators. Illegal edges,
    including terminal states, raise ``ConflictError``.
    """

    def _work(session: Session) -> models.Booking:
        booking = (
            session.query(models.Booking)
            .filter(models.Booking.id == booking_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if booking is None:
            raise NotFoundError("Booking not found")
        if not as_admin and booking.owner_church_id != acting_church_id:
            logger.warning(
                "Church %s tried to change status of booking %s owned by %s",
                acting_church_id,
                booking_id,
                booking.owner_church_id,
            )
            raise ForbiddenError("Not authorized")
        if new_status is None:
            raise ValidationError("Invalid status", field="status")
        target = _parse_enum(BookingStatus, new_status, "status", "Invalid status")
        current = booking.status
        if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
            raise ConflictError(
                f"Cannot change booking status from {current.value} to {target.value}"
            )
        booking.status = target
        return booking

    booking = run_in_transaction(db, _work)
    try:
        booking_lifecycle.send_booking_decision_notification(booking)
    except Exception as exc:
        logger.error("Failed to send status notification for booking %s: %s", booking.id, exc)
    return booking
