from conftest import make_church


def test_directory_lists_churches_by_name(client, db):
    make_church(db, "Zion Tabernacle", city="Durban")
    make_church(db, "Grace Church", is_admin=True)
    make_church(db, "Hope Chapel", address="12 Church Street", zip_code="0002")

    res = client.get("/api/v1/churches/")
    assert res.status_code == 200
    churches = res.json()
    assert [c["name"] for c in churches] == ["Grace Church", "Hope Chapel", "Zion Tabernacle"]
    for church in churches:
        assert "password" not in church
        assert "is_admin" not in church
    assert churches[2]["city"] == "Durban"


def test_directory_paginates(client, db):
    for name in ("Alpha Church", "Beta Church", "Gamma Church"):
        make_church(db, name)
    res = client.get("/api/v1/churches/", params={"skip": 1, "limit": 1})
    assert [c["name"] for c in res.json()] == ["Beta Church"]


def test_read_church_profile(client, db):
    church = make_church(db, "Hope Chapel", address="12 Church Street", zip_code="0002")
    res = client.get(f"/api/v1/churches/{church.id}")
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == church.id
    assert body["email"] == "hope.chapel@example.org"
    assert body["address"] == "12 Church Street"
    assert body["zip_code"] == "0002"
    assert "password" not in body


def test_unknown_church_is_not_found(client):
    res = client.get("/api/v1/churches/999")
    assert res.status_code == 404
    assert res.json() == {"error": "Church not found"}
