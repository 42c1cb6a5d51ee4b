from datetime import timedelta

from jose import jwt

from app.api.auth import create_access_token
from app.core.config import settings
from app.notifications.gateway import NotificationEvent
from conftest import PASSWORD, auth_headers, make_church


def register_payload(**overrides):
    payload = {
        "name": "St. Mark's Anglican",
        "email": "Office@StMarks.org",
        "password": PASSWORD,
        "city": "Johannesburg",
        "province": "Gauteng",
    }
    payload.update(overrides)
    return payload


def test_register_returns_token_and_sends_welcome(client, sent_notifications):
    res = client.post("/auth/register", json=register_payload())
    assert res.status_code == 201
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["church"]["email"] == "office@stmarks.org"
    assert body["church"]["is_admin"] is False
    assert "password" not in body["church"]
    claims = jwt.decode(body["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == str(body["church"]["id"])
    assert claims["adm"] is False
    assert [event for event, _ in sent_notifications] == [NotificationEvent.CHURCH_REGISTERED]


def test_register_rejects_weak_password(client):
    res = client.post("/auth/register", json=register_payload(password="password"))
    assert res.status_code == 400
    body = res.json()
    assert "uppercase" in body["error"]
    assert "password" in body["field_errors"]


def test_register_rejects_duplicate_email(client, db):
    make_church(db, "Existing", email="office@stmarks.org")
    res = client.post("/auth/register", json=register_payload())
    assert res.status_code == 400
    assert res.json() == {"error": "A church with that email already exists"}


def test_register_requires_valid_email(client):
    res = client.post("/auth/register", json=register_payload(email="not-an-email"))
    assert res.status_code == 400
    assert "email" in res.json()["field_errors"]


def test_login_with_form(client, db):
    church = make_church(db, "Grace Church")
    res = client.post("/auth/login", data={"username": church.email.upper(), "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["church"]["id"] == church.id


def test_login_with_json(client, db):
    church = make_church(db, "Grace Church")
    res = client.post("/auth/login", json={"email": church.email, "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["access_token"]


def test_login_rejects_bad_password(client, db):
    church = make_church(db, "Grace Church")
    res = client.post("/auth/login", json={"email": church.email, "password": "Wrong1!xx"})
    assert res.status_code == 401
    assert res.json() == {"error": "Incorrect email or password"}


def test_login_requires_credentials(client):
    res = client.post("/auth/login", json={"email": "a@example.org"})
    assert res.status_code == 400


def test_me_returns_current_church(client, db):
    church = make_church(db, "Grace Church")
    res = client.get("/auth/me", headers=auth_headers(church))
    assert res.status_code == 200
    assert res.json()["name"] == "Grace Church"


def test_me_requires_token(client):
    res = client.get("/auth/me")
    assert res.status_code == 401
    assert res.json() == {"error": "Could not validate credentials"}


def test_expired_or_foreign_tokens_are_rejected(client, db):
    church = make_church(db, "Grace Church")
    expired = create_access_token(church, expires_delta=timedelta(minutes=-1))
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401
    forged = jwt.encode({"sub": str(church.id)}, "not-the-secret", algorithm="HS256")
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_token_for_deleted_church_is_rejected(client, db):
    church = make_church(db, "Grace Church")
    headers = auth_headers(church)
    db.delete(church)
    db.commit()
    assert client.get("/auth/me", headers=headers).status_code == 401
