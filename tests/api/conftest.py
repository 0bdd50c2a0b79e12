"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from storefront.catalog.repository import InMemoryProductRepository
from storefront.infrastructure.config import settings
from storefront.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client over a freshly seeded in-memory store."""
    app.state.product_store = InMemoryProductRepository.with_seed_data()
    return TestClient(app)


@pytest.fixture
def api() -> str:
    """Versioned API prefix."""
    return settings.api_prefix
