"""Tests for health endpoints."""

from unittest.mock import Mock

from fastapi.testclient import TestClient


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness_without_database(client: TestClient) -> None:
    """Readiness reports degraded until the session is wired."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] is False
    assert "environment" in data
    assert "debug" in data


def test_readiness_with_database(app, client: TestClient) -> None:
    app.state.cassandra_session = Mock()
    response = client.get("/health/ready")
    assert response.json()["status"] == "ready"
    assert response.json()["database"] is True


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "learnpath"
    assert "version" in data


def test_request_id_echoed(client: TestClient) -> None:
    response = client.get("/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_root(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert "LearnPath" in response.json()["message"]


def test_request_id_generated(client: TestClient) -> None:
    response = client.get("/health/live")
    assert len(response.headers["X-Request-ID"]) == 32


def test_readiness_reports_keyspace(client: TestClient) -> None:
    assert client.get("/health/ready").json()["keyspace"] == "learnpath"
