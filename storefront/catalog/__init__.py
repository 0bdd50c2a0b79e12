"""Product Catalog Service.

Provides the filtering engine, product stores and catalog operations.
"""

from storefront.catalog.repository import (
    InMemoryProductRepository,
    ProductStore,
    SqlProductRepository,
)
from storefront.catalog.service import CatalogService

__all__ = [
    # Stores
    "ProductStore",
    "InMemoryProductRepository",
    "SqlProductRepository",
    # Service
    "CatalogService",
]
