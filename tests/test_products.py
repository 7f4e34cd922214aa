"""Tests for Product API endpoints."""
from decimal import Decimal


def test_create_product(client, admin_headers, category_id):
    """Test creating a new product."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Toyota Avanza 1.5 G",
            "price": "235000000",
            "stock": 10,
            "category_id": category_id
        },
        headers=admin_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Toyota Avanza 1.5 G"
    assert data["slug"] == "toyota-avanza-15-g"
    assert Decimal(data["price"]) == Decimal("235000000")
    assert data["stock"] == 10
    assert data["is_active"] is True
    assert "id" in data
    assert "created_at" in data


def test_create_product_requires_admin(client, customer_headers, category_id):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Test Product", "price": "10", "stock": 1, "category_id": category_id},
        headers=customer_headers
    )

    assert response.status_code == 403
    assert response.headers["X-Error-Code"] == "Forbidden"


def test_create_product_requires_authentication(client, category_id):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Test Product", "price": "10", "stock": 1, "category_id": category_id}
    )

    assert response.status_code == 401


def test_create_product_invalid_price(client, admin_headers, category_id):
    """Test creating product with invalid price fails."""
    response = client.post(
        "/api/v1/products/",
        json={
            "name": "Test Product",
            "price": "-10.00",  # Invalid: negative price
            "stock": 10,
            "category_id": category_id
        },
        headers=admin_headers
    )

    assert response.status_code == 422  # Validation error


def test_create_product_invalid_stock(client, admin_headers, category_id):
    """Test creating product with negative stock fails."""
    response = client.post(
        "/api/v1/products/",
        json={"name": "Test Product", "price": "99.99", "stock": -5, "category_id": category_id},
        headers=admin_headers
    )

    assert response.status_code == 422


def test_create_product_duplicate_slug(client, admin_headers, create_product, category_id):
    create_product(name="Honda Brio")

    response = client.post(
        "/api/v1/products/",
        json={"name": "HONDA  brio!", "price": "1", "stock": 1, "category_id": category_id},
        headers=admin_headers
    )

    assert response.status_code == 409
    assert response.headers["X-Error-Code"] == "Conflict"


def test_create_product_name_without_slug(client, admin_headers, category_id):
    response = client.post(
        "/api/v1/products/",
        json={"name": "!!!", "price": "1", "stock": 1, "category_id": category_id},
        headers=admin_headers
    )

    assert response.status_code == 400


def test_create_product_unknown_category(client, admin_headers):
    response = client.post(
        "/api/v1/products/",
        json={"name": "Orphan", "price": "1", "stock": 1, "category_id": 9999},
        headers=admin_headers
    )

    assert response.status_code == 400


def test_get_product(client, create_product):
    """Test getting a product by ID."""
    product = create_product(name="Test Product", price="50000", stock=5)

    response = client.get(f"/api/v1/products/{product['id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Test Product"


def test_get_product_is_cached(client, create_product, fake_cache):
    product = create_product()

    client.get(f"/api/v1/products/{product['id']}")

    assert f"product:{product['id']}" in fake_cache.store


def test_get_product_by_slug(client, create_product):
    product = create_product(name="Suzuki Ertiga GX")

    response = client.get("/api/v1/products/slug/suzuki-ertiga-gx")

    assert response.status_code == 200
    assert response.json()["id"] == product["id"]


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/v1/products/9999")

    assert response.status_code == 404
    assert response.headers["X-Error-Code"] == "ProductNotFound"


def test_list_products(client, create_product):
    """Test listing products with pagination."""
    for i in range(5):
        create_product(name=f"Product {i}", price=str(10 * (i + 1)), stock=i + 1)

    response = client.get("/api/v1/products/?page=1&page_size=3")

    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 3
    assert data["total"] == 5
    assert data["page"] == 1
    assert data["total_pages"] == 2


def test_list_products_filters_and_sorting(client, create_product):
    create_product(name="Cheap", price="100", stock=1)
    create_product(name="Middle", price="500", stock=1)
    create_product(name="Pricey", price="900", stock=1)

    response = client.get(
        "/api/v1/products/?min_price=200&max_price=1000&sort_by=price&sort_order=asc"
    )

    names = [p["name"] for p in response.json()["items"]]
    assert names == ["Middle", "Pricey"]


def test_search_products(client, create_product):
    """Test searching products by name."""
    create_product(name="Apple iPhone")
    create_product(name="Samsung Galaxy")
    create_product(name="Apple MacBook")

    response = client.get("/api/v1/products/?search=Apple")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2


def test_update_product(client, admin_headers, create_product):
    """Test updating a product."""
    product = create_product(name="Old Name", price="100", stock=10)

    response = client.put(
        f"/api/v1/products/{product['id']}",
        json={"name": "New Name", "price": "150"},
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "New Name"
    assert data["slug"] == "new-name"
    assert Decimal(data["price"]) == Decimal("150")
    assert data["stock"] == 10  # Unchanged


def test_update_product_clears_cache(client, admin_headers, create_product, fake_cache):
    product = create_product(price="100")
    client.get(f"/api/v1/products/{product['id']}")

    client.put(f"/api/v1/products/{product['id']}", json={"price": "200"}, headers=admin_headers)

    response = client.get(f"/api/v1/products/{product['id']}")
    assert Decimal(response.json()["price"]) == Decimal("200")


def test_delete_product(client, admin_headers, create_product):
    """Test soft deleting a product."""
    product = create_product(name="To Delete")

    response = client.delete(f"/api/v1/products/{product['id']}", headers=admin_headers)
    assert response.status_code == 200

    # Inactive products are hidden
    assert client.get(f"/api/v1/products/{product['id']}").status_code == 404
    assert client.get("/api/v1/products/").json()["total"] == 0


def test_deleted_product_keeps_its_slug(client, admin_headers, create_product, category_id):
    product = create_product(name="Reserved Name")
    client.delete(f"/api/v1/products/{product['id']}", headers=admin_headers)

    response = client.post(
        "/api/v1/products/",
        json={"name": "Reserved Name", "price": "1", "stock": 1, "category_id": category_id},
        headers=admin_headers
    )

    assert response.status_code == 409


def test_stock_increase(client, admin_headers, create_product):
    product = create_product(stock=5)

    response = client.patch(
        f"/api/v1/products/{product['id']}/stock",
        json={"quantity": 3, "direction": "increase"},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["stock"] == 8


def test_stock_decrease(client, admin_headers, create_product):
    product = create_product(stock=5)

    response = client.patch(
        f"/api/v1/products/{product['id']}/stock",
        json={"quantity": 5, "direction": "decrease"},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["stock"] == 0


def test_stock_decrease_below_zero_fails_and_keeps_stock(client, admin_headers, create_product):
    product = create_product(stock=5)

    response = client.patch(
        f"/api/v1/products/{product['id']}/stock",
        json={"quantity": 6, "direction": "decrease"},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.headers["X-Error-Code"] == "InsufficientStock"
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 5


def test_stock_inactive_product(client, admin_headers, create_product):
    product = create_product(stock=5)
    client.delete(f"/api/v1/products/{product['id']}", headers=admin_headers)

    response = client.patch(
        f"/api/v1/products/{product['id']}/stock",
        json={"quantity": 1, "direction": "increase"},
        headers=admin_headers
    )

    assert response.status_code == 404


def test_stock_quantity_must_be_positive(client, admin_headers, create_product):
    product = create_product(stock=5)

    response = client.patch(
        f"/api/v1/products/{product['id']}/stock",
        json={"quantity": 0, "direction": "decrease"},
        headers=admin_headers
    )

    assert response.status_code == 422
