import logging
from unittest.mock import AsyncMock

import pytest

import app.utils.email as email_utils
from app.notifications import gateway
from app.notifications.gateway import NotificationEvent, render
from app.utils import background_worker

# Captured before the autouse fixture swaps it for a recorder
real_notify = gateway.notify


def test_render_booking_received():
    subject, body = render(
        NotificationEvent.BOOKING_RECEIVED,
        {
            "recipient_name": "Grace Church",
            "booker_name": "Hope Chapel",
            "booker_email": "hope@example.org",
            "item_name": "Main Hall",
            "start_date": "2030-01-07 09:00",
            "end_date": "2030-01-07 11:00",
            "total_price": "ZAR 1,000.00",
        },
    )
    assert subject == "New booking request for Main Hall"
    assert body.startswith("Dear Grace Church,")
    assert "Hope Chapel (hope@example.org)" in body
    assert "Total: ZAR 1,000.00" in body
    assert "Notes:" not in body


def test_render_welcome_without_details():
    subject, body = render(NotificationEvent.CHURCH_REGISTERED, {"recipient_name": "Hope Chapel"})
    assert subject == "Welcome to Church Venue, Hope Chapel"
    assert "Item:" not in body


def test_deliver_sends_rendered_email(monkeypatch):
    sent = []
    monkeypatch.setattr(gateway, "send_email", lambda to, subject, body: sent.append((to, subject)))
    gateway.deliver(
        NotificationEvent.BOOKING_APPROVED,
        {"recipient_email": "hope@example.org", "item_name": "Main Hall"},
    )
    assert sent == [("hope@example.org", "Booking approved: Main Hall")]


def test_deliver_without_recipient_is_dropped(monkeypatch, caplog):
    monkeypatch.setattr(gateway, "send_email", pytest.fail)
    gateway.deliver(NotificationEvent.BOOKING_APPROVED, {"item_name": "Main Hall"})
    assert any("without recipient" in r.getMessage() for r in caplog.records)


def test_notify_queues_delivery(monkeypatch):
    queued = []
    monkeypatch.setattr(
        background_worker, "enqueue", lambda func, *args, **kwargs: queued.append((func, args)) or "id"
    )
    real_notify(NotificationEvent.BOOKING_REJECTED, {"recipient_email": "hope@example.org"})
    func, (event, payload) = queued[0]
    assert func is gateway.deliver
    assert event == NotificationEvent.BOOKING_REJECTED
    assert payload == {"recipient_email": "hope@example.org"}


def test_notify_never_raises(monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("executor shut down")

    monkeypatch.setattr(background_worker, "enqueue", broken)
    real_notify(NotificationEvent.BOOKING_APPROVED, {"recipient_email": "hope@example.org"})
    assert any("executor shut down" in r.getMessage() for r in caplog.records)


def test_send_email_logs_without_smtp(monkeypatch, caplog):
    caplog.set_level(logging.INFO, logger="app.utils.email")
    monkeypatch.setattr(email_utils.settings, "SMTP_HOST", "")
    email_utils.send_email("hope@example.org", "Hello", "Body text")
    assert any("hope@example.org" in r.getMessage() for r in caplog.records)


def test_send_email_uses_smtp(monkeypatch):
    mock_send = AsyncMock()
    monkeypatch.setattr(email_utils.settings, "SMTP_HOST", "smtp.example.org")
    monkeypatch.setattr(email_utils.aiosmtplib, "send", mock_send)
    email_utils.send_email("hope@example.org", "Hello", "Body text")
    message = mock_send.await_args.args[0]
    assert message["To"] == "hope@example.org"
    assert message["Subject"] == "Hello"
    assert mock_send.await_args.kwargs["hostname"] == "smtp.example.org"


def test_worker_retries_then_succeeds():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 2:
            raise ConnectionError("smtp timeout")
        return "sent"

    task_id = background_worker.enqueue(flaky, retries=3, backoff=0)
    assert background_worker.wait(task_id, timeout=5) in ("sent", None)
    assert len(calls) == 2


def test_worker_dead_letters_after_last_attempt():
    def always_fails(recipient):
        raise ConnectionError("smtp down")

    with pytest.raises(ConnectionError):
        background_worker._run_with_retry(always_fails, "hope@example.org", retries=2, backoff=0)
    name, args, _kwargs, exc = background_worker.dead_letter_queue[-1]
    assert name == "always_fails"
    assert args == ("hope@example.org",)
    assert isinstance(exc, ConnectionError)
