"""Catalog service for product operations.

High-level service that validates input, applies pagination defaults
and orchestrates the product store. It is the single place where
domain validation errors are raised.
"""

import asyncio
import dataclasses
import math
from decimal import Decimal

import structlog

from storefront.catalog.filtering import normalize_limit, normalize_page
from storefront.catalog.repository import ProductStore
from storefront.domain.entities import (
    Category,
    CreateProductDTO,
    PageMeta,
    PaginatedResponse,
    Product,
    ProductFilters,
    SortField,
    SortOrder,
    UpdateProductDTO,
)
from storefront.domain.exceptions import InvalidArgumentError

logger = structlog.get_logger()

FEATURED_LIMIT = 8
REQUIRED_CREATE_FIELDS = ("name", "description", "sku", "category_id")


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _require_id(product_id: str | None) -> None:
    if _is_blank(product_id):
        raise InvalidArgumentError("Product ID is required", field="id")


def _check_price(price: Decimal) -> None:
    if price <= 0:
        raise InvalidArgumentError("Price must be greater than 0", field="price")


def _check_stock(stock_quantity: int) -> None:
    if stock_quantity < 0:
        raise InvalidArgumentError(
            "Stock quantity cannot be negative", field="stock_quantity"
        )


class CatalogService:
    """Service for catalog operations.

    Example usage:
        service = CatalogService(InMemoryProductRepository.with_seed_data())

        page = await service.get_products(
            ProductFilters(category="electronics", sort="price", order="asc"),
        )
    """

    def __init__(self, store: ProductStore, request_id: str | None = None) -> None:
        """Initialize service.

        Args:
            store: Product store.
            request_id: Request ID for correlation.
        """
        self.store = store
        self.request_id = request_id

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_products(self, filters: ProductFilters) -> PaginatedResponse[Product]:
        """List products with filters and pagination.

        ``page`` and ``limit`` are clamped before the store is queried.
        The page and the total count are fetched concurrently.

        Args:
            filters: Filter, sort and pagination parameters.

        Returns:
            One page of products with pagination metadata.
        """
        page = normalize_page(filters.page)
        limit = normalize_limit(filters.limit)
        validated = dataclasses.replace(filters, page=page, limit=limit)

        products, total = await asyncio.gather(
            self.store.find_many(validated),
            self.store.count(validated),
        )

        return PaginatedResponse(
            data=list(products),
            meta=PageMeta(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
            ),
        )

    async def search_products(
        self, query: str | None, filters: ProductFilters | None = None
    ) -> PaginatedResponse[Product]:
        """Search product names and descriptions.

        Args:
            query: Search text; surrounding whitespace is ignored.
            filters: Other filters; any ``search`` value is replaced.

        Returns:
            One page of matching products.

        Raises:
            InvalidArgumentError: If the query is empty or blank.
        """
        if _is_blank(query):
            raise InvalidArgumentError("Search query is required", field="q")

        filters = filters or ProductFilters()
        return await self.get_products(
            dataclasses.replace(filters, search=query.strip())
        )

    async def get_products_by_category(
        self, category: str | None, filters: ProductFilters | None = None
    ) -> PaginatedResponse[Product]:
        """List products in one category (by slug or ID)."""
        if _is_blank(category):
            raise InvalidArgumentError("Category is required", field="category")

        filters = filters or ProductFilters()
        return await self.get_products(dataclasses.replace(filters, category=category))

    async def get_product_by_id(self, product_id: str | None) -> Product | None:
        """Get product by ID.

        Returns:
            The product, or None when no product has this ID.

        Raises:
            InvalidArgumentError: If the ID is empty.
        """
        _require_id(product_id)
        return await self.store.find_by_id(product_id)

    async def get_featured_products(self, limit: int = FEATURED_LIMIT) -> list[Product]:
        """Newest products first."""
        response = await self.get_products(
            ProductFilters(
                limit=limit,
                sort=SortField.CREATED_AT,
                order=SortOrder.DESC,
            )
        )
        return response.data

    async def list_categories(self) -> list[Category]:
        """All categories ordered by name."""
        return await self.store.list_categories()

    # =========================================================================
    # Commands
    # =========================================================================

    async def create_product(self, data: CreateProductDTO) -> Product:
        """Validate and create a product.

        Raises:
            InvalidArgumentError: On a missing required field, a
                non-positive price, negative stock, an unknown category
                or a SKU that is already taken.
        """
        missing = [name for name in REQUIRED_CREATE_FIELDS if _is_blank(getattr(data, name))]
        if missing:
            raise InvalidArgumentError(
                "Missing required fields: " + ", ".join(missing),
                field=missing[0],
            )
        if data.price is None:
            raise InvalidArgumentError("Price is required", field="price")
        _check_price(data.price)
        if data.stock_quantity is None:
            raise InvalidArgumentError("Stock quantity is required", field="stock_quantity")
        _check_stock(data.stock_quantity)

        category = await self._require_category(data.category_id)
        data = dataclasses.replace(data, category_id=category.id)
        if await self.store.find_by_sku(data.sku) is not None:
            raise InvalidArgumentError(f"SKU '{data.sku}' is already in use", field="sku")

        product = await self.store.create(data)

        logger.info(
            "Product created",
            product_id=product.id,
            sku=product.sku,
            request_id=self.request_id,
        )
        return product

    async def update_product(self, product_id: str | None, patch: UpdateProductDTO) -> Product:
        """Apply a partial update to a product.

        Fields left as None keep their current values.

        Raises:
            InvalidArgumentError: On an empty ID or an invalid provided value.
            ProductNotFoundError: If no product has this ID.
        """
        _require_id(product_id)
        for name in ("name", "description"):
            value = getattr(patch, name)
            if value is not None and _is_blank(value):
                raise InvalidArgumentError(f"{name.capitalize()} cannot be empty", field=name)
        if patch.price is not None:
            _check_price(patch.price)
        if patch.stock_quantity is not None:
            _check_stock(patch.stock_quantity)
        if patch.category_id is not None:
            category = await self._require_category(patch.category_id)
            patch = dataclasses.replace(patch, category_id=category.id)

        product = await self.store.update(product_id, patch)

        logger.info(
            "Product updated",
            product_id=product_id,
            request_id=self.request_id,
        )
        return product

    async def delete_product(self, product_id: str | None) -> None:
        """Delete a product.

        Raises:
            InvalidArgumentError: If the ID is empty.
            ProductNotFoundError: If no product has this ID.
        """
        _require_id(product_id)
        await self.store.delete(product_id)

        logger.info(
            "Product deleted",
            product_id=product_id,
            request_id=self.request_id,
        )

    async def _require_category(self, category_id: str) -> Category:
        """Look up a category by ID or slug."""
        category = await self.store.find_category(category_id)
        if category is None:
            raise InvalidArgumentError(
                f"Category '{category_id}' does not exist", field="category_id"
            )
        return category
