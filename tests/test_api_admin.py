import pytest

from lpg_orders.core.config import settings
from lpg_orders.services.orders import can_transition


async def _place(client, **overrides):
    body = {
        "customerName": "Hina Malik",
        "phone": "03331234567",
        "address": "House 7, Canal View, Multan",
        "cylinderType": "Domestic",
        "quantity": 1,
    }
    body.update(overrides)
    r = await client.post("/api/orders", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]["orderId"]


# -------------------------
# Access key
# -------------------------

async def test_admin_requires_key(client):
    r = await client.get("/api/admin/orders")
    assert r.status_code == 401


async def test_admin_rejects_wrong_key(client):
    r = await client.get("/api/admin/orders", headers={"X-Admin-Key": "guess"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Admin only"


async def test_admin_fails_closed_without_configured_key(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_ACCESS_KEY", "")

    r = await client.get("/api/admin/products", headers={"X-Admin-Key": "anything"})

    assert r.status_code == 500
    assert "ADMIN_ACCESS_KEY" in r.json()["detail"]


# -------------------------
# Products
# -------------------------

async def test_product_crud(client, admin_headers):
    r = await client.post(
        "/api/admin/products",
        headers=admin_headers,
        json={"name": "11.8 kg Domestic", "category": "Domestic", "price": "2500.00"},
    )
    assert r.status_code == 201, r.text
    product = r.json()
    assert product["price"] == 2500.0
    assert product["inStock"] is True

    dup = await client.post(
        "/api/admin/products",
        headers=admin_headers,
        json={"name": "Another", "category": "Domestic", "price": "2400.00"},
    )
    assert dup.status_code == 409

    r = await client.patch(
        f"/api/admin/products/{product['id']}",
        headers=admin_headers,
        json={"price": "2650.50", "inStock": False},
    )
    assert r.status_code == 200
    assert r.json()["price"] == 2650.5
    assert r.json()["inStock"] is False

    r = await client.delete(f"/api/admin/products/{product['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert (await client.get(f"/api/admin/products/{product['id']}", headers=admin_headers)).status_code == 404


async def test_product_price_must_be_positive(client, admin_headers):
    r = await client.post(
        "/api/admin/products",
        headers=admin_headers,
        json={"name": "Free gas", "category": "Commercial", "price": 0},
    )
    assert r.status_code == 422


async def test_admin_price_change_applies_to_next_order(client, admin_headers, add_product):
    product = await add_product("Domestic", "2500")
    await client.patch(f"/api/admin/products/{product.id}", headers=admin_headers, json={"price": "2700"})

    r = await client.post(
        "/api/orders",
        json={
            "customerName": "Hina Malik",
            "phone": "03331234567",
            "address": "House 7, Canal View, Multan",
            "cylinderType": "Domestic",
            "quantity": 2,
        },
    )
    assert r.json()["data"]["totalPrice"] == 5400.0


# -------------------------
# Coupons
# -------------------------

async def test_coupon_create_normalizes_and_defaults(client, admin_headers):
    r = await client.post(
        "/api/admin/coupons",
        headers=admin_headers,
        json={
            "code": "  summer25 ",
            "discountType": "percentage",
            "discountValue": 25,
            "applicableCylinderType": "Both",
        },
    )

    assert r.status_code == 201, r.text
    coupon = r.json()
    assert coupon["code"] == "SUMMER25"
    assert coupon["usageLimit"] == 100
    assert coupon["usageCount"] == 0
    assert coupon["isActive"] is True


async def test_coupon_duplicate_code(client, admin_headers, add_coupon):
    await add_coupon(code="SUMMER25")

    r = await client.post(
        "/api/admin/coupons",
        headers=admin_headers,
        json={
            "code": "summer25",
            "discountType": "flat",
            "discountValue": 100,
            "applicableCylinderType": "Domestic",
        },
    )
    assert r.status_code == 409


async def test_coupon_percentage_over_100(client, admin_headers):
    r = await client.post(
        "/api/admin/coupons",
        headers=admin_headers,
        json={
            "code": "TOOMUCH",
            "discountType": "percentage",
            "discountValue": 150,
            "applicableCylinderType": "Both",
        },
    )
    assert r.status_code == 400


async def test_coupon_list_and_update(client, admin_headers, add_coupon):
    await add_coupon(code="A1")
    await add_coupon(code="B2", is_active=False)

    r = await client.get("/api/admin/coupons", headers=admin_headers, params={"isActive": "true"})
    assert [c["code"] for c in r.json()] == ["A1"]

    r = await client.patch("/api/admin/coupons/b2", headers=admin_headers, json={"isActive": True})
    assert r.status_code == 200
    assert r.json()["isActive"] is True

    r = await client.patch(
        "/api/admin/coupons/B2",
        headers=admin_headers,
        json={"discountValue": 120},
    )
    assert r.status_code == 400

    assert (await client.get("/api/admin/coupons/NOPE", headers=admin_headers)).status_code == 404


async def test_coupon_usage_and_delete_cascade(client, admin_headers, add_product, add_coupon):
    await add_product("Domestic", "2500")
    await add_coupon(code="ONCE", usage_limit=1)
    order_id = await _place(client, couponCode="ONCE")

    r = await client.get("/api/admin/coupons/ONCE", headers=admin_headers)
    assert r.json()["usageCount"] == 1

    r = await client.get("/api/admin/coupons/ONCE/redemptions", headers=admin_headers)
    redemptions = r.json()
    assert len(redemptions) == 1
    assert redemptions[0]["orderId"] == order_id
    assert redemptions[0]["discountAmount"] == 250.0

    r = await client.delete("/api/admin/coupons/ONCE", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["removedUsages"] == 1
    assert (await client.get("/api/admin/coupons/ONCE", headers=admin_headers)).status_code == 404

    # The order keeps its snapshot of the coupon
    order = (await client.get(f"/api/admin/orders/{order_id}", headers=admin_headers)).json()
    assert order["couponCode"] == "ONCE"
    assert order["discount"] == 250.0

    # Re-creating the code starts a fresh ledger
    await add_coupon(code="ONCE", usage_limit=1)
    await _place(client, couponCode="ONCE")


# -------------------------
# Orders
# -------------------------

@pytest.mark.parametrize(
    "current,new,allowed",
    [
        ("pending", "confirmed", True),
        ("pending", "delivered", True),
        ("confirmed", "in-transit", True),
        ("in-transit", "pending", False),
        ("confirmed", "cancelled", True),
        ("delivered", "cancelled", False),
        ("cancelled", "pending", False),
    ],
)
def test_can_transition(current, new, allowed):
    assert can_transition(current, new) is allowed


async def test_order_status_flow_and_history(client, admin_headers, add_product):
    await add_product("Domestic", "2500")
    order_id = await _place(client)

    r = await client.get("/api/admin/orders", headers=admin_headers)
    assert r.json()["total"] == 1
    assert r.json()["items"][0]["id"] == order_id

    for status in ("confirmed", "in-transit", "delivered"):
        r = await client.patch(
            f"/api/admin/orders/{order_id}/status",
            headers=admin_headers,
            json={"status": status, "notes": f"now {status}"},
        )
        assert r.status_code == 200, r.text
        assert r.json()["status"] == status

    # Delivered orders move to the history view
    assert (await client.get("/api/admin/orders", headers=admin_headers)).json()["total"] == 0
    history = (await client.get("/api/admin/orders/history", headers=admin_headers)).json()
    assert [o["id"] for o in history["items"]] == [order_id]

    r = await client.patch(
        f"/api/admin/orders/{order_id}/status",
        headers=admin_headers,
        json={"status": "cancelled"},
    )
    assert r.status_code == 400

    r = await client.get(f"/api/admin/orders/{order_id}/history", headers=admin_headers)
    assert [h["status"] for h in r.json()] == ["pending", "confirmed", "in-transit", "delivered"]
    assert r.json()[0]["notes"] == "Order placed"


async def test_order_status_rejects_unknown_value(client, admin_headers, add_product):
    await add_product("Domestic", "2500")
    order_id = await _place(client)

    r = await client.patch(
        f"/api/admin/orders/{order_id}/status",
        headers=admin_headers,
        json={"status": "shipped"},
    )
    assert r.status_code == 422


async def test_order_not_found(client, admin_headers):
    r = await client.get("/api/admin/orders/12345", headers=admin_headers)
    assert r.status_code == 404


async def test_coupon_create_uses_configured_usage_limit(client, admin_headers, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_USAGE_LIMIT", 7)

    r = await client.post(
        "/api/admin/coupons",
        headers=admin_headers,
        json={
            "code": "SEVEN",
            "discountType": "flat",
            "discountValue": 50,
            "applicableCylinderType": "Both",
        },
    )

    assert r.status_code == 201, r.text
    assert r.json()["usageLimit"] == 7


async def test_order_delete_removes_order_and_history(client, admin_headers, add_product):
    await add_product("Domestic", "2500")
    order_id = await _place(client)

    r = await client.delete(f"/api/admin/orders/{order_id}", headers=admin_headers)

    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Order deleted successfully"}
    assert (await client.get(f"/api/admin/orders/{order_id}", headers=admin_headers)).status_code == 404
    assert (await client.get(f"/api/admin/orders/{order_id}/history", headers=admin_headers)).status_code == 404


async def test_order_with_redemption_cannot_be_deleted(client, admin_headers, add_product, add_coupon):
    await add_product("Domestic", "2500")
    await add_coupon(code="ONCE", usage_limit=1)
    order_id = await _place(client, couponCode="ONCE")

    r = await client.delete(f"/api/admin/orders/{order_id}", headers=admin_headers)

    assert r.status_code == 409
    assert (await client.get(f"/api/admin/orders/{order_id}", headers=admin_headers)).status_code == 200

    # Once the coupon and its ledger rows are gone the order can go too
    await client.delete("/api/admin/coupons/ONCE", headers=admin_headers)
    r = await client.delete(f"/api/admin/orders/{order_id}", headers=admin_headers)
    assert r.status_code == 200


async def test_order_delete_not_found(client, admin_headers):
    r = await client.delete("/api/admin/orders/999", headers=admin_headers)
    assert r.status_code == 404
