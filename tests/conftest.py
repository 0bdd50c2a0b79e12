"""Shared fixtures for storefront tests."""

from decimal import Decimal

import pytest

from storefront.catalog.repository import InMemoryProductRepository
from storefront.catalog.service import CatalogService
from storefront.domain.entities import CreateProductDTO, ImageInput


@pytest.fixture
def store() -> InMemoryProductRepository:
    """Fresh in-memory store holding the five sample products."""
    return InMemoryProductRepository.with_seed_data()


@pytest.fixture
def service(store: InMemoryProductRepository) -> CatalogService:
    """Catalog service over the seeded in-memory store."""
    return CatalogService(store, request_id="test-request")


@pytest.fixture
def new_product() -> CreateProductDTO:
    """Valid input for a new electronics product."""
    return CreateProductDTO(
        name="USB-C Cable",
        description="Braided charging cable, two metres",
        price=Decimal("12.50"),
        sku="CB-001",
        stock_quantity=200,
        category_id="cat-1",
        images=[ImageInput(url="https://example.com/images/cable-1.jpg")],
    )
