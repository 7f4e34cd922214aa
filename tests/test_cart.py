"""Tests for Cart API endpoints."""
from decimal import Decimal


def add(client, headers, product_id, quantity=1):
    return client.post(
        "/api/v1/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers
    )


def test_empty_cart_is_created_on_first_access(client, customer_headers):
    response = client.get("/api/v1/cart/", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["items"] == []
    assert data["total_items"] == 0
    assert Decimal(data["total_price"]) == Decimal("0")


def test_add_items(client, customer_headers, create_product):
    phone = create_product(name="Phone", price="1000", stock=10)
    case = create_product(name="Case", price="250", stock=10)

    add(client, customer_headers, phone["id"], 2)
    response = add(client, customer_headers, case["id"], 4)

    assert response.status_code == 200
    data = response.json()
    assert data["total_items"] == 6
    assert Decimal(data["total_price"]) == Decimal("3000")


def test_adding_same_product_merges_quantity(client, customer_headers, create_product):
    product = create_product(stock=10)

    add(client, customer_headers, product["id"], 2)
    data = add(client, customer_headers, product["id"], 3).json()

    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 5


def test_add_beyond_stock(client, customer_headers, create_product):
    product = create_product(stock=3)
    add(client, customer_headers, product["id"], 2)

    response = add(client, customer_headers, product["id"], 2)

    assert response.status_code == 400
    assert response.headers["X-Error-Code"] == "InsufficientStock"


def test_add_unknown_product(client, customer_headers):
    response = add(client, customer_headers, 9999)

    assert response.status_code == 404


def test_update_item_quantity(client, customer_headers, create_product):
    product = create_product(price="100", stock=10)
    item_id = add(client, customer_headers, product["id"]).json()["items"][0]["id"]

    response = client.put(
        f"/api/v1/cart/items/{item_id}", json={"quantity": 7}, headers=customer_headers
    )

    assert response.status_code == 200
    assert response.json()["items"][0]["quantity"] == 7
    assert Decimal(response.json()["total_price"]) == Decimal("700")


def test_remove_item(client, customer_headers, create_product):
    product = create_product()
    item_id = add(client, customer_headers, product["id"]).json()["items"][0]["id"]

    response = client.delete(f"/api/v1/cart/items/{item_id}", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["items"] == []


def test_cannot_touch_another_users_cart_item(client, customer_headers, other_customer_headers, create_product):
    product = create_product()
    item_id = add(client, customer_headers, product["id"]).json()["items"][0]["id"]

    response = client.delete(f"/api/v1/cart/items/{item_id}", headers=other_customer_headers)

    assert response.status_code == 404


def test_clear_cart(client, customer_headers, create_product):
    add(client, customer_headers, create_product(name="One")["id"])
    add(client, customer_headers, create_product(name="Two")["id"])

    response = client.delete("/api/v1/cart/", headers=customer_headers)

    assert response.status_code == 200
    assert client.get("/api/v1/cart/", headers=customer_headers).json()["items"] == []
