"""Tests for registration, login and bearer-token auth."""
import jwt

from app.config import get_settings

ADMIN_PASSWORD = "Admin123!"
CUSTOMER_PASSWORD = "Customer123!"


def register(client, **overrides):
    payload = {"name": "Budi Santoso", "email": "budi@storefront.io", "password": CUSTOMER_PASSWORD}
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


def test_register(client):
    response = register(client, email="Budi@Storefront.io")

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "budi@storefront.io"
    assert data["role"] == "customer"
    assert "hashed_password" not in data


def test_register_duplicate_email(client):
    register(client)

    response = register(client, email="BUDI@storefront.io")

    assert response.status_code == 409


def test_register_weak_password(client):
    response = register(client, password="password")

    assert response.status_code == 422


def test_register_admin_requires_secret(client):
    response = client.post(
        "/api/v1/auth/register-admin",
        json={
            "name": "Mallory",
            "email": "mallory@storefront.io",
            "password": ADMIN_PASSWORD,
            "admin_secret": "guess",
        },
    )

    assert response.status_code == 401


def test_register_admin(client):
    response = client.post(
        "/api/v1/auth/register-admin",
        json={
            "name": "Store Admin",
            "email": "admin@storefront.io",
            "password": ADMIN_PASSWORD,
            "admin_secret": get_settings().ADMIN_SECRET,
        },
    )

    assert response.status_code == 201
    assert response.json()["role"] == "admin"


def test_login_returns_token(client):
    user = register(client).json()

    response = client.post(
        "/api/v1/auth/login", json={"email": "budi@storefront.io", "password": CUSTOMER_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user["id"]

    settings = get_settings()
    claims = jwt.decode(data["access_token"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert claims["sub"] == str(user["id"])
    assert claims["role"] == "customer"


def test_login_wrong_password(client):
    register(client)

    response = client.post(
        "/api/v1/auth/login", json={"email": "budi@storefront.io", "password": "Wrong123!"}
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile(client, customer_headers):
    response = client.get("/api/v1/auth/profile", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "budi@storefront.io"


def test_profile_without_token(client):
    response = client.get("/api/v1/auth/profile")

    assert response.status_code == 401


def test_profile_with_garbage_token(client):
    response = client.get("/api/v1/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.headers["X-Error-Code"] == "Unauthorized"


def test_deactivated_user_token_is_rejected(client, admin_headers, customer_headers):
    me = client.get("/api/v1/auth/profile", headers=customer_headers).json()
    client.patch(f"/api/v1/users/{me['id']}/status", json={"is_active": False}, headers=admin_headers)

    response = client.get("/api/v1/auth/profile", headers=customer_headers)

    assert response.status_code == 401
