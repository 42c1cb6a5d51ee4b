"""Outbound notifications for booking lifecycle events.

``notify`` is fire-and-forget: it hands the event to the background worker
and returns immediately. Delivery failures are retried by the worker and
then logged; they never reach the caller.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping

from ..utils import background_worker
from ..utils.email import send_email

logger = logging.getLogger(__name__)


class NotificationEvent(str, enum.Enum):
    BOOKING_REQUESTED = "booking.requested"  # to the booker
    BOOKING_RECEIVED = "booking.received"  # to the listing owner
    BOOKING_APPROVED = "booking.approved"
    BOOKING_REJECTED = "booking.rejected"
    CHURCH_REGISTERED = "church.registered"


_SUBJECTS = {
    NotificationEvent.BOOKING_REQUESTED: "Booking request submitted: {item_name}",
    NotificationEvent.BOOKING_RECEIVED: "New booking request for {item_name}",
    NotificationEvent.BOOKING_APPROVED: "Booking approved: {item_name}",
    NotificationEvent.BOOKING_REJECTED: "Booking declined: {item_name}",
    NotificationEvent.CHURCH_REGISTERED: "Welcome to Church Venue, {recipient_name}",
}

_INTROS = {
    NotificationEvent.BOOKING_REQUESTED: (
        "Your booking request has been submitted and is waiting for the owner's response."
    ),
    NotificationEvent.BOOKING_RECEIVED: (
        "{booker_name} ({booker_email}) has requested to book your listing."
    ),
    NotificationEvent.BOOKING_APPROVED: "Good news! Your booking has been approved.",
    NotificationEvent.BOOKING_REJECTED: (
        "Unfortunately your booking request was declined by the owner."
    ),
    NotificationEvent.CHURCH_REGISTERED: (
        "Your church account is ready. You can now list venues and equipment "
        "and book resources from other churches."
    ),
}

_DETAIL_FIELDS = (
    ("item_name", "Item"),
    ("start_date", "Start"),
    ("end_date", "End"),
    ("price_option", "Pricing"),
    ("total_price", "Total"),
    ("notes", "Notes"),
)


class _Defaults(dict):
    def __missing__(self, key: str) -> str:
        return ""


def render(event: NotificationEvent, payload: Mapping[str, Any]) -> tuple[str, str]:
    """Return ``(subject, body)`` for an event."""
    values = _Defaults(payload)
    subject = _SUBJECTS[event].format_map(values)
    lines = [f"Dear {values['recipient_name'] or 'friend'},", "", _INTROS[event].format_map(values)]
    details = [
        f"{label}: {payload[key]}" for key, label in _DETAIL_FIELDS if payload.get(key) not in (None, "")
    ]
    if details:
        lines.append("")
        lines.extend(details)
    lines.extend(["", "Church Venue"])
    return subject, "\n".join(lines)


def deliver(event: NotificationEvent, payload: Mapping[str, Any]) -> None:
    recipient = payload.get("recipient_email")
    if not recipient:
        logger.warning("Dropping %s notification without recipient", event.value)
        return
    subject, body = render(event, payload)
    send_email(recipient, subject, body)


def notify(event: NotificationEvent, payload: Mapping[str, Any]) -> None:
    """Queue ``event`` for delivery. Never raises."""
    try:
        background_worker.enqueue(deliver, event, dict(payload))
        logger.info("Queued %s notification for %s", event.value, payload.get("recipient_email"))
    except Exception as exc:
        logger.error("Failed to queue %s notification: %s", event.value, exc)
