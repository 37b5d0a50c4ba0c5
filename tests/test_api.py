"""End-to-end tests through the HTTP layer."""

import io

import pandas as pd
import pytest
from sqlalchemy.exc import OperationalError

from restaurant_api.services.order_export import XLSX_MEDIA_TYPE
from tests.conftest import bearer

pytestmark = pytest.mark.integration


async def place_sample_order(client, token, menu_items) -> int:
    response = await client.post(
        "/api/orders",
        json={
            "items": [
                {"id": menu_items[0], "quantity": 2, "price": 10.00},
                {"id": menu_items[1], "quantity": 1, "price": 5.50},
            ],
            "total_amount": 25.50,
        },
        headers=bearer(token),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    return body["orderId"]


async def test_order_flow_customer_to_admin_and_back(client, customer_token, admin_token, menu_items):
    order_id = await place_sample_order(client, customer_token, menu_items)

    response = await client.get(f"/api/orders/{order_id}", headers=bearer(customer_token))
    assert response.json() == {"success": True, "order": {"id": order_id, "status": "pending"}}

    response = await client.get("/api/admin/orders", headers=bearer(admin_token))
    assert response.status_code == 200
    orders = response.json()["orders"]
    assert len(orders) == 1
    order = orders[0]
    assert order["id"] == order_id
    assert order["username"] == "alice"
    assert order["email"] == "alice@example.com"
    assert order["phone"] == "555-123-4567"
    assert order["total_amount"] == 25.5
    assert sorted((i["name"], i["quantity"], i["price"]) for i in order["items"]) == [
        ("Margherita", 2, 10.0),
        ("Tiramisu", 1, 5.5),
    ]

    response = await client.put(
        f"/api/admin/orders/{order_id}/status",
        json={"status": "confirmed"},
        headers=bearer(admin_token),
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await client.get(f"/api/orders/{order_id}", headers=bearer(customer_token))
    assert response.json()["order"]["status"] == "confirmed"

    response = await client.get("/api/orders", headers=bearer(customer_token))
    assert [o["id"] for o in response.json()["orders"]] == [order_id]


async def test_invalid_status_is_400_and_unchanged(client, customer_token, admin_token, menu_items):
    order_id = await place_sample_order(client, customer_token, menu_items)

    response = await client.put(
        f"/api/admin/orders/{order_id}/status",
        json={"status": "teleported"},
        headers=bearer(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["success"] is False

    response = await client.get(f"/api/orders/{order_id}", headers=bearer(customer_token))
    assert response.json()["order"]["status"] == "pending"


async def test_status_of_unknown_order_is_404(client, admin_token):
    response = await client.put(
        "/api/admin/orders/999/status",
        json={"status": "confirmed"},
        headers=bearer(admin_token),
    )
    assert response.status_code == 404


async def test_foreign_order_is_404(client, customer_token, admin_token, menu_items):
    order_id = await place_sample_order(client, customer_token, menu_items)

    response = await client.post(
        "/api/auth/register",
        json={"username": "mallory", "email": "mallory@example.com", "password": "mallory-pw"},
    )
    other_token = response.json()["token"]

    response = await client.get(f"/api/orders/{order_id}", headers=bearer(other_token))
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Order not found"}


async def test_empty_cart_is_400(client, customer_token):
    response = await client.post(
        "/api/orders",
        json={"items": [], "total_amount": 0},
        headers=bearer(customer_token),
    )
    assert response.status_code == 400


# ============================================================================
# ACCESS CONTROL
# ============================================================================


@pytest.mark.parametrize(
    "method,path",
    [
        ("POST", "/api/orders"),
        ("GET", "/api/orders/1"),
        ("GET", "/api/admin/orders"),
        ("GET", "/api/admin/menu"),
    ],
)
async def test_missing_token_is_401(client, method, path):
    response = await client.request(method, path, json={"items": [], "total_amount": 0})
    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_bad_bearer_tokens(client):
    response = await client.get("/api/orders", headers=bearer("garbage"))
    assert response.status_code == 401

    response = await client.get("/api/orders", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/admin/orders"),
        ("GET", "/api/admin/orders/export"),
        ("PUT", "/api/admin/orders/1/status"),
        ("GET", "/api/admin/menu"),
        ("DELETE", "/api/admin/menu/1"),
    ],
)
async def test_customer_on_admin_route_is_403(client, customer_token, method, path):
    response = await client.request(
        method, path, json={"status": "confirmed"}, headers=bearer(customer_token)
    )
    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Admin access required"}


# ============================================================================
# EXPORT / HEALTH / ERRORS
# ============================================================================


async def test_export_orders_to_excel(client, customer_token, admin_token, menu_items):
    order_id = await place_sample_order(client, customer_token, menu_items)

    response = await client.get("/api/admin/orders/export", headers=bearer(admin_token))
    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "attachment" in response.headers["content-disposition"]

    df = pd.read_excel(io.BytesIO(response.content), sheet_name="orders")
    assert df["order_id"].tolist() == [order_id]
    assert df["customer_username"].tolist() == ["alice"]
    assert df["item_count"].tolist() == [3]
    assert df["total_amount"].tolist() == [25.5]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"


async def test_unhandled_error_is_generic_500(app, client):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    response = await client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


async def test_storage_error_is_generic_500(app, client):
    @app.get("/db-boom")
    async def db_boom():
        raise OperationalError("SELECT 1", {}, Exception("connection refused to db-host:5432"))

    response = await client.get("/db-boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["success"] is False
