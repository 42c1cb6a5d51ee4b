import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from app import models
from app.database import run_in_transaction
from app.services import booking_engine
from app.utils.errors import ConflictError, InternalError
from conftest import at, make_church, make_equipment, make_venue

NOW = datetime(2029, 12, 1, 12, 0)


def _race(Session, bodies, booker_id):
    """Submit every body at once, each from its own session and thread."""
    barrier = threading.Barrier(len(bodies))

    def submit(body):
        session = Session()
        try:
            barrier.wait(timeout=10)
            booking = booking_engine.create_booking(session, body, booker_id, now=NOW)
            return ("ok", booking.id)
        except ConflictError as exc:
            return ("conflict", exc.message)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(bodies)) as pool:
        return list(pool.map(submit, bodies))


def test_concurrent_equipment_requests_respect_quantity(db, Session):
    owner = make_church(db, "Grace Church")
    booker = make_church(db, "Hope Chapel")
    item = make_equipment(db, owner, quantity=2)
    body = {
        "booking_type": "equipment",
        "equipment_id": item.id,
        "start_date": at(14, 9).isoformat(),
        "end_date": at(14, 12).isoformat(),
    }

    results = _race(Session, [dict(body) for _ in range(3)], booker.id)

    outcomes = sorted(kind for kind, _ in results)
    assert outcomes == ["conflict", "ok", "ok"]
    with Session() as check:
        assert check.query(models.Booking).filter_by(equipment_id=item.id).count() == 2


def test_concurrent_venue_requests_book_once(db, Session):
    owner = make_church(db, "Grace Church")
    booker = make_church(db, "Hope Chapel")
    venue = make_venue(db, owner)
    bodies = [
        {
            "booking_type": "venue",
            "venue_id": venue.id,
            "start_date": at(14, 8 + offset).isoformat(),
            "end_date": at(14, 10 + offset).isoformat(),
        }
        for offset in range(4)
    ]

    results = _race(Session, bodies, booker.id)

    booked = [value for kind, value in results if kind == "ok"]
    assert 1 <= len(booked) <= 2
    with Session() as check:
        rows = check.query(models.Booking).filter_by(venue_id=venue.id).all()
        assert len(rows) == len(booked)
        # Whatever won, no two stored bookings overlap
        for a in rows:
            for b in rows:
                if a.id != b.id:
                    assert not (a.start_date < b.end_date and a.end_date > b.start_date)


def _locked():
    return OperationalError("INSERT", {}, Exception("database is locked"))


def test_busy_database_is_retried(db):
    calls = []

    def work(session):
        calls.append(1)
        if len(calls) < 3:
            raise _locked()
        return "done"

    assert run_in_transaction(db, work, retries=3, backoff=0) == "done"
    assert len(calls) == 3


def test_busy_database_gives_up_with_internal_error(db):
    def work(session):
        raise _locked()

    with pytest.raises(InternalError):
        run_in_transaction(db, work, retries=2, backoff=0)


def test_other_database_errors_are_not_retried(db):
    calls = []

    def work(session):
        calls.append(1)
        raise OperationalError("SELECT", {}, Exception("no such table: nope"))

    with pytest.raises(OperationalError):
        run_in_transaction(db, work, retries=3, backoff=0)
    assert len(calls) == 1
