import os

# Must be set before the app (and its engine) is imported
os.environ["PYTEST_RUN"] = "1"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.pop("DEFAULT_ADMIN_PASSWORD", None)

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app import crud, models
from app.api.auth import create_access_token
from app.database import Base, configure_sqlite_engine, get_db
from app.main import app

PASSWORD = "Passw0rd!"


@pytest.fixture
def engine(tmp_path):
    """A file-backed SQLite database with the production engine hooks and pragmas."""
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    configure_sqlite_engine(test_engine)
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def Session(engine):
    # Unlike SessionLocal, objects stay loaded after commit so helpers and
    # assertions do not open read transactions of their own. The expiring
    # production behaviour is covered in test_booking_engine.py.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(Session):
    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch):
    """Record notifications instead of handing them to the worker."""
    sent = []

    def fake_notify(event, payload):
        sent.append((event, dict(payload)))

    monkeypatch.setattr("app.notifications.gateway.notify", fake_notify)
    return sent


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """Business-local wall time on a January 2030 day."""
    return datetime(2030, 1, day, hour, minute)


def make_church(db, name="Grace Church", email=None, is_admin=False, **attrs):
    email = email or f"{name.lower().replace(' ', '.')}@example.org"
    church = crud.church.create(
        db, password=PASSWORD, is_admin=is_admin, name=name, email=email, **attrs
    )
    db.commit()
    return church


def make_venue(db, owner, **attrs):
    values = {
        "name": "Main Hall",
        "capacity": 200,
        "price_per_hour": Decimal("500"),
        "city": "Pretoria",
        "province": "Gauteng",
    }
    values.update(attrs)
    venue = models.Venue(church_id=owner.id, **values)
    db.add(venue)
    db.commit()
    return venue


def make_equipment(db, owner, **attrs):
    values = {
        "name": "PA System",
        "category": models.EquipmentCategory.AUDIO,
        "price_per_hour": Decimal("100"),
        "quantity": 1,
    }
    values.update(attrs)
    item = models.Equipment(church_id=owner.id, **values)
    db.add(item)
    db.commit()
    return item


def auth_headers(church) -> dict:
    return {"Authorization": f"Bearer {create_access_token(church)}"}
