import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

# Settings are read once at import time; point the app at SQLite before importing it
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.utils.cache import cache_service


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "Admin123!"
CUSTOMER_PASSWORD = "Customer123!"


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


class FakeRedis:
    """In-memory stand-in for the few Redis commands the cache uses."""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)


@pytest.fixture(autouse=True)
def fake_cache(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_service, "client", fake)
    return fake


@pytest.fixture(autouse=True)
def confirmation_task():
    """Keep order confirmations off the Celery broker."""
    with patch("app.api.orders.send_order_confirmation.delay") as delay:
        yield delay


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def register_and_login(client, email, password, name="Test User", admin=False):
    payload = {"name": name, "email": email, "password": password}
    if admin:
        payload["admin_secret"] = "ADMIN_SECRET_123"
        response = client.post("/api/v1/auth/register-admin", json=payload)
    else:
        response = client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text

    token = client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    ).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    return register_and_login(client, "admin@storefront.io", ADMIN_PASSWORD, "Store Admin", admin=True)


@pytest.fixture
def customer_headers(client):
    return register_and_login(client, "budi@storefront.io", CUSTOMER_PASSWORD, "Budi Santoso")


@pytest.fixture
def other_customer_headers(client):
    return register_and_login(client, "sari@storefront.io", CUSTOMER_PASSWORD, "Sari Dewi")


@pytest.fixture
def category_id(client, admin_headers):
    response = client.post(
        "/api/v1/categories/",
        json={"name": "Electronics", "description": "Gadgets"},
        headers=admin_headers,
    )
    return response.json()["id"]


@pytest.fixture
def create_product(client, admin_headers, category_id):
    """Factory creating products through the API."""
    def _create(name="Test Product", price="100000", stock=10, **extra):
        payload = {"name": name, "price": price, "stock": stock, "category_id": category_id}
        payload.update(extra)
        response = client.post("/api/v1/products/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_coupon(client, admin_headers):
    """Factory creating coupons valid from yesterday until next month."""
    def _create(code="DISKON10", discount_type="percentage", value="10", **extra):
        now = datetime.now(timezone.utc)
        payload = {
            "code": code,
            "discount_type": discount_type,
            "value": value,
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=30)).isoformat(),
        }
        payload.update(extra)
        response = client.post("/api/v1/coupons/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
