import pytest


@pytest.fixture
def order_id(client, make_product, build_order):
    p1 = make_product(price=2500, stock=5)
    response = client.post("/orders", json=build_order([{"product": p1.id, "qty": 2}]))
    assert response.status_code == 201
    return response.json()["id"]


def test_admin_endpoints_require_token(client, order_id):
    assert client.get(f"/orders/{order_id}").status_code == 401
    assert client.get(f"/orders/{order_id}", headers={"X-Admin-Token": "wrong"}).status_code == 401


def test_admin_endpoints_disabled_without_configured_token(client, order_id, test_settings):
    test_settings.ADMIN_API_TOKEN = None

    response = client.get(f"/orders/{order_id}", headers={"X-Admin-Token": "anything"})

    assert response.status_code == 403


def test_get_order(client, order_id, admin_headers):
    response = client.get(f"/orders/{order_id}", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["customer"] == {"name": "Wahab", "phone": "51234567", "email": "buyer@example.com"}
    assert body["shippingAddress"]["houseNo"] == "8"
    assert body["items"][0]["priceInFils"] == 2500
    assert body["items"][0]["qty"] == 2
    assert body["totalInFils"] == body["subtotalInFils"] + body["shippingInFils"]


def test_get_order_by_invoice(client, order_id, admin_headers):
    invoice_no = client.get(f"/orders/{order_id}", headers=admin_headers).json()["invoiceNo"]

    response = client.get(f"/orders/invoice/{invoice_no}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["id"] == order_id


def test_get_missing_order(client, admin_headers):
    assert client.get("/orders/999", headers=admin_headers).status_code == 404
    assert client.get("/orders/invoice/INV-2000-000000", headers=admin_headers).status_code == 404


def test_list_orders(client, order_id, admin_headers):
    response = client.get("/orders", headers=admin_headers, params={"status": "pending"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == order_id
    assert body["hasNextPage"] is False

    cancelled = client.get("/orders", headers=admin_headers, params={"status": "cancelled"}).json()
    assert cancelled["total"] == 0


def test_status_follows_transition_table(client, order_id, admin_headers, publisher):
    url = f"/orders/{order_id}/status"

    assert client.patch(url, json={"status": "confirmed"}, headers=admin_headers).json()["status"] == "confirmed"
    assert client.patch(url, json={"status": "shipped"}, headers=admin_headers).json()["status"] == "shipped"
    assert client.patch(url, json={"status": "completed"}, headers=admin_headers).json()["status"] == "completed"

    assert [event for event, _ in publisher.published] == ["OrderStatusChanged"] * 3
    assert publisher.published[0][1]["old_status"] == "pending"
    assert publisher.published[0][1]["new_status"] == "confirmed"


def test_invalid_status_transition_is_rejected(client, order_id, admin_headers):
    url = f"/orders/{order_id}/status"
    assert client.patch(url, json={"status": "cancelled"}, headers=admin_headers).status_code == 200

    response = client.patch(url, json={"status": "pending"}, headers=admin_headers)

    assert response.status_code == 409
    assert "cancelled" in response.json()["detail"]


def test_unknown_status_is_rejected(client, order_id, admin_headers):
    response = client.patch(f"/orders/{order_id}/status", json={"status": "paid"}, headers=admin_headers)

    assert response.status_code == 422


def test_update_payment(client, order_id, admin_headers):
    response = client.patch(
        f"/orders/{order_id}/payment",
        json={"paymentMethod": "knet", "paymentStatus": "paid"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["paymentMethod"] == "knet"
    assert body["paymentStatus"] == "paid"
    assert body["totalInFils"] == 7000
