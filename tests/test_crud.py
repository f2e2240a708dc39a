import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

import crud


def test_create_vendor(client, vendor_data, notification_titles):
    response = client.post("/api/vendors", json=vendor_data)

    assert response.status_code == 201
    data = response.json()
    assert "id" in data
    for key, value in vendor_data.items():
        assert data[key] == value
    assert "Vendor Added" in notification_titles()


def test_create_notification_is_success_type(client, vendor_data):
    client.post("/api/vendors", json=vendor_data)

    notes = client.get("/api/notifications").json()
    added = [n for n in notes if n["title"] == "Vendor Added"]
    assert len(added) == 1
    assert added[0]["type"] == "success"
    assert added[0]["isRead"] is False


def test_create_missing_required_field(client, notification_titles):
    response = client.post("/api/products", json={"category": "Laptops"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert client.get("/api/products").json() == []
    assert notification_titles() == []


def test_list_and_get(client, vendor_data):
    created = client.post("/api/vendors", json=vendor_data).json()

    listed = client.get("/api/vendors").json()
    assert [v["id"] for v in listed] == [created["id"]]

    response = client.get(f"/api/vendors/{created['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Acme Supplies"


def test_get_unknown_and_malformed_id(client):
    assert client.get("/api/assets/64b7f0c2a1b2c3d4e5f60718").status_code == 404
    response = client.get("/api/assets/not-an-id")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_update_is_partial(client, vendor_data, notification_titles):
    created = client.post("/api/vendors", json=vendor_data).json()

    response = client.put(f"/api/vendors/{created['id']}", json={"phone": "555-0199"})

    assert response.status_code == 200
    data = response.json()
    assert data["phone"] == "555-0199"
    assert data["name"] == vendor_data["name"]
    assert data["email"] == vendor_data["email"]
    assert "updatedAt" in data
    assert notification_titles()[0] == "Vendor Updated"


def test_update_unknown_id(client):
    response = client.put("/api/vendors/64b7f0c2a1b2c3d4e5f60718", json={"name": "X"})

    assert response.status_code == 404


def test_delete_moves_to_recycle_bin(client, ctx):
    product = client.post(
        "/api/products",
        json={"name": "ThinkPad", "category": "Laptops", "price": 1200.5, "vendor": "Lenovo", "quantity": 3},
    ).json()

    response = client.delete(f"/api/products/{product['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get(f"/api/products/{product['id']}").status_code == 404

    entries = client.get("/api/recycle-bin").json()
    assert len(entries) == 1
    assert entries[0]["entityType"] == "products"
    for key in ("id", "name", "category", "price", "vendor", "quantity"):
        assert entries[0]["data"][key] == product[key]
    assert "Product Deleted" in [n["title"] for n in client.get("/api/notifications").json()]


def test_delete_unknown_id(client, notification_titles):
    response = client.delete("/api/assets/64b7f0c2a1b2c3d4e5f60718")

    assert response.status_code == 404
    assert client.get("/api/recycle-bin").json() == []
    assert notification_titles() == []


def test_asset_purchase_date(client):
    response = client.post(
        "/api/assets",
        json={"name": "Projector", "type": "AV", "assignedTo": "Room 4", "purchaseDate": "2024-03-01T09:00:00"},
    )

    assert response.status_code == 201
    assert response.json()["purchaseDate"].startswith("2024-03-01T09:00:00")


def test_user_password_hashed_and_hidden(client, ctx, user_data):
    response = client.post("/api/users", json=user_data)

    assert response.status_code == 201
    created = response.json()
    assert "password" not in created
    assert created["role"] == "user"
    assert all("password" not in u for u in client.get("/api/users").json())
    assert "password" not in client.get(f"/api/users/{created['id']}").json()

    stored = ctx.db["users"].find_one({"username": "alice"})
    assert stored["password"] != user_data["password"]
    assert stored["password"].startswith("$2")


def test_user_duplicate_username(client, user_data):
    client.post("/api/users", json=user_data)

    response = client.post("/api/users", json={**user_data, "email": "other@acme.io"})

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"
    assert len(client.get("/api/users").json()) == 1


def test_user_update_to_taken_username(client, user_data):
    client.post("/api/users", json=user_data)
    bob = client.post("/api/users", json={"username": "bob", "password": "pw"}).json()

    response = client.put(f"/api/users/{bob['id']}", json={"username": "alice"})

    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"


def test_crud_actions_are_logged(client, vendor_data):
    created = client.post("/api/vendors", json=vendor_data).json()
    client.put(f"/api/vendors/{created['id']}", json={"company": "Acme Ltd"})
    client.delete(f"/api/vendors/{created['id']}")

    actions = [a["action"] for a in client.get("/api/activity").json()]
    assert actions == ["DELETE", "UPDATE", "CREATE"]


def test_storage_error_returns_500(client, monkeypatch, caplog):
    def unreachable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")

    monkeypatch.setattr(crud, "get_documents", unreachable)

    response = client.get("/api/vendors")

    assert response.status_code == 500
    assert response.json()["code"] == "STORAGE_ERROR"
    assert "Storage error on GET /api/vendors: no servers available" in caplog.text


def test_user_email_is_validated(client):
    response = client.post("/api/users", json={"username": "erin", "email": "not-an-email", "password": "pw"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_user_duplicate_email_index(ctx):
    users = ctx.db["users"]
    users.insert_one({"username": "a", "email": "same@acme.io"})

    with pytest.raises(DuplicateKeyError):
        users.insert_one({"username": "b", "email": "same@acme.io"})
    users.insert_one({"username": "c"})
    users.insert_one({"username": "d"})
