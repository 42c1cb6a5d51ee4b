from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from app import models
from app.core.config import settings
from app.models import BookingStatus
from app.notifications import gateway
from app.notifications.gateway import NotificationEvent

logger = logging.getLogger(__name__)


def _format_money(amount: Decimal | None) -> str:
    return f"{settings.DEFAULT_CURRENCY} {Decimal(amount or 0):,.2f}"


def booking_details(booking: models.Booking) -> dict[str, Any]:
    """Snapshot the fields every booking e-mail shows.

    Plain values only, so the payload stays valid after the session closes.
    """
    return {
        "booking_id": booking.id,
        "item_name": booking.item_name or "Item",
        "start_date": booking.start_date.isoformat(sep=" ", timespec="minutes"),
        "end_date": booking.end_date.isoformat(sep=" ", timespec="minutes"),
        "price_option": booking.price_option.value if booking.price_option else None,
        "total_price": _format_money(booking.total_price),
        "notes": booking.notes,
    }


def send_booking_request_notifications(
    booking: models.Booking,
    booker: models.Church,
    owner: Optional[models.Church],
) -> None:
    """Tell the booker their request is in and the owner that one arrived."""
    details = booking_details(booking)
    gateway.notify(
        NotificationEvent.BOOKING_REQUESTED,
        {**details, "recipient_email": booker.email, "recipient_name": booker.name},
    )
    if owner is None:
        logger.error("Booking %s has no resolvable owner; owner not notified", booking.id)
        return
    gateway.notify(
        NotificationEvent.BOOKING_RECEIVED,
        {
            **details,
            "recipient_email": owner.email,
            "recipient_name": owner.name,
            "booker_name": booker.name,
            "booker_email": booker.email,
        },
    )


def send_booking_decision_notification(booking: models.Booking) -> None:
    """Notify the booker of an approval or rejection; other statuses are silent."""
    if booking.status == BookingStatus.APPROVED:
        event = NotificationEvent.BOOKING_APPROVED
    elif booking.status == BookingStatus.REJECTED:
        event = NotificationEvent.BOOKING_REJECTED
    else:
        return
    booker = booking.church
    gateway.notify(
        event,
        {**booking_details(booking), "recipient_email": booker.email, "recipient_name": booker.name},
    )


def send_welcome_notification(church: models.Church) -> None:
    gateway.notify(
        NotificationEvent.CHURCH_REGISTERED,
        {"recipient_email": church.email, "recipient_name": church.name},
    )
