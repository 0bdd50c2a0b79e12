"""Tests for health check endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from storefront.catalog.repository import InMemoryProductRepository
from storefront.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    app.state.product_store = InMemoryProductRepository.with_seed_data()
    return TestClient(app)


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "storefront-api"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint queries the store."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["backend"] == "memory"
    assert data["categories"] == 3


def test_readiness_fails_when_store_fails() -> None:
    """A failing store makes the service not ready."""
    store = AsyncMock()
    store.list_categories.side_effect = RuntimeError("database unavailable")
    app.state.product_store = store

    response = TestClient(app).get("/ready")

    assert response.status_code == 500
    assert response.json()["errorCode"] == "INTERNAL_ERROR"


def test_health_is_outside_api_prefix(client: TestClient) -> None:
    assert client.get("/api/v1/health").status_code == 404
