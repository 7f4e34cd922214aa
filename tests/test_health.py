"""Tests for health check endpoints."""
import redis


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Storefront API"
    assert "version" in data
    assert "docs" in data


def test_readiness_reports_redis_outage(client, monkeypatch):
    class DownRedis:
        def ping(self):
            raise redis.ConnectionError("connection refused")

    monkeypatch.setattr("app.api.health.redis_client", DownRedis())

    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["database"] is True
    assert data["checks"]["redis"] is False
    assert "redis_error" in data["checks"]


def test_readiness_when_everything_answers(client, monkeypatch):
    class UpRedis:
        def ping(self):
            return True

    monkeypatch.setattr("app.api.health.redis_client", UpRedis())

    response = client.get("/api/v1/health/ready")

    assert response.json() == {"status": "ready", "checks": {"database": True, "redis": True}}
