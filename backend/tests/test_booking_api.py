from decimal import Decimal

import pytest

from app import models
from app.notifications.gateway import NotificationEvent
from conftest import at, auth_headers, make_church, make_equipment, make_venue


@pytest.fixture
def owner(db):
    return make_church(db, "Grace Church")


@pytest.fixture
def booker(db):
    return make_church(db, "Hope Chapel")


@pytest.fixture
def venue(db, owner):
    return make_venue(db, owner)


def book(client, church, **body):
    return client.post("/api/v1/bookings/", json=body, headers=auth_headers(church))


def venue_body(venue, start, end, **extra):
    body = {
        "booking_type": "venue",
        "venue_id": venue.id,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
    }
    body.update(extra)
    return body


def test_create_booking_returns_id_and_message(client, venue, booker, Session, sent_notifications):
    res = book(client, booker, **venue_body(venue, at(7, 7), at(7, 9)))
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Booking created successfully"
    with Session() as check:
        stored = check.get(models.Booking, body["id"])
        assert stored.total_price == Decimal("1000.00")
        assert stored.church_id == booker.id
    assert {event for event, _ in sent_notifications} == {
        NotificationEvent.BOOKING_REQUESTED,
        NotificationEvent.BOOKING_RECEIVED,
    }


def test_create_booking_requires_auth(client, venue):
    res = client.post("/api/v1/bookings/", json=venue_body(venue, at(7, 7), at(7, 9)))
    assert res.status_code == 401


def test_double_booking_is_a_400_with_error(client, venue, booker):
    assert book(client, booker, **venue_body(venue, at(7, 7), at(7, 9))).status_code == 201
    res = book(client, booker, **venue_body(venue, at(7, 8), at(7, 10)))
    assert res.status_code == 400
    assert res.json() == {"error": "Venue is already booked for the selected dates"}


def test_validation_error_names_field(client, venue, booker):
    res = book(client, booker, **venue_body(venue, at(7, 5), at(7, 9)))
    assert res.status_code == 400
    body = res.json()
    assert "outside operating hours" in body["error"]
    assert body["field"] == "start_date"


def test_past_start_is_rejected(client, venue, booker):
    res = book(client, booker, **venue_body(venue, at(7, 9).replace(year=2020), at(7, 10).replace(year=2020)))
    assert res.status_code == 400
    assert res.json()["error"] == "Start date must be in the future"


def test_missing_target_is_404(client, booker):
    res = book(
        client,
        booker,
        booking_type="equipment",
        equipment_id=123,
        start_date=at(7, 9).isoformat(),
        end_date=at(7, 10).isoformat(),
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Equipment not found"}


def test_booker_and_owner_projections(client, db, venue, owner, booker):
    mic = make_equipment(db, make_church(db, "Sound Ministry"), name="Microphone")
    created = book(
        client,
        booker,
        **venue_body(venue, at(7, 9), at(7, 11), booking_type="venue_with_equipment", equipment_ids=[mic.id]),
    ).json()

    mine = client.get("/api/v1/bookings/", headers=auth_headers(booker)).json()
    assert [b["id"] for b in mine] == [created["id"]]
    assert mine[0]["item_name"] == "Main Hall"
    assert mine[0]["owner_church_id"] == owner.id
    assert mine[0]["total_price"] == "1200.00"
    assert mine[0]["equipment_items"][0]["equipment"]["name"] == "Microphone"

    listings = client.get("/api/v1/bookings/my-listings", headers=auth_headers(owner)).json()
    assert [b["id"] for b in listings] == [created["id"]]
    assert listings[0]["church"]["name"] == "Hope Chapel"

    # Equipment add-on owners see the booking too
    sound = db.query(models.Church).filter_by(name="Sound Ministry").one()
    assert len(client.get("/api/v1/bookings/my-listings", headers=auth_headers(sound)).json()) == 1
    assert client.get("/api/v1/bookings/my-listings", headers=auth_headers(booker)).json() == []


def test_read_single_booking_visibility(client, db, venue, owner, booker):
    created = book(client, booker, **venue_body(venue, at(7, 9), at(7, 10))).json()
    url = f"/api/v1/bookings/{created['id']}"
    assert client.get(url, headers=auth_headers(booker)).status_code == 200
    assert client.get(url, headers=auth_headers(owner)).status_code == 200
    stranger = make_church(db, "Faith Fellowship")
    assert client.get(url, headers=auth_headers(stranger)).status_code == 403
    assert client.get("/api/v1/bookings/999", headers=auth_headers(owner)).status_code == 404


def test_owner_updates_status(client, venue, owner, booker, sent_notifications):
    created = book(client, booker, **venue_body(venue, at(7, 9), at(7, 10))).json()
    sent_notifications.clear()
    res = client.put(
        f"/api/v1/bookings/{created['id']}/status",
        json={"status": "approved"},
        headers=auth_headers(owner),
    )
    assert res.status_code == 200
    assert res.json() == {"message": "Booking status updated successfully"}
    assert sent_notifications[0][0] == NotificationEvent.BOOKING_APPROVED


def test_status_update_errors(client, db, venue, owner, booker):
    created = book(client, booker, **venue_body(venue, at(7, 9), at(7, 10))).json()
    url = f"/api/v1/bookings/{created['id']}/status"

    res = client.put(url, json={"status": "approved"}, headers=auth_headers(booker))
    assert res.status_code == 403
    assert res.json() == {"error": "Not authorized"}

    res = client.put(url, json={"status": "archived"}, headers=auth_headers(owner))
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid status", "field": "status"}

    res = client.put(url, json={"status": "completed"}, headers=auth_headers(owner))
    assert res.status_code == 400

    res = client.put("/api/v1/bookings/999/status", json={"status": "approved"}, headers=auth_headers(owner))
    assert res.status_code == 404
