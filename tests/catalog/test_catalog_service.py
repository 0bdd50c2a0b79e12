"""Tests for catalog service."""

import math
from dataclasses import replace
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from storefront.catalog.repository import InMemoryProductRepository
from storefront.catalog.service import CatalogService
from storefront.domain.entities import (
    CreateProductDTO,
    ProductFilters,
    UpdateProductDTO,
)
from storefront.domain.exceptions import InvalidArgumentError, ProductNotFoundError


class TestGetProducts:
    """Tests for listing products."""

    @pytest.mark.asyncio
    async def test_defaults(self, service: CatalogService) -> None:
        """Default page is 1 and default limit is 20."""
        result = await service.get_products(ProductFilters())

        assert len(result.data) == 5
        assert result.meta.total == 5
        assert result.meta.page == 1
        assert result.meta.limit == 20
        assert result.meta.total_pages == 1

    @pytest.mark.asyncio
    async def test_clamps_page_and_limit(self, service: CatalogService) -> None:
        """Out-of-range values are clamped, not rejected."""
        result = await service.get_products(ProductFilters(page=-3, limit=0))
        assert result.meta.page == 1
        assert result.meta.limit == 1
        assert result.meta.total_pages == 5

        result = await service.get_products(ProductFilters(limit=500))
        assert result.meta.limit == 100

    @pytest.mark.asyncio
    async def test_store_receives_clamped_values(self) -> None:
        """The store is queried with the clamped page and limit."""
        store = AsyncMock()
        store.find_many.return_value = []
        store.count.return_value = 0

        await CatalogService(store).get_products(ProductFilters(page=0, limit=1000))

        filters = store.find_many.call_args.args[0]
        assert (filters.page, filters.limit) == (1, 100)
        assert store.count.call_args.args[0] == filters

    @pytest.mark.asyncio
    async def test_total_pages(self, service: CatalogService) -> None:
        result = await service.get_products(ProductFilters(limit=2))
        assert result.meta.total_pages == math.ceil(5 / 2)

    @pytest.mark.asyncio
    async def test_page_beyond_range(self, service: CatalogService) -> None:
        """A page past the end is empty but keeps the total."""
        result = await service.get_products(ProductFilters(page=9, limit=2))
        assert result.data == []
        assert result.meta.total == 5
        assert result.meta.page == 9

    @pytest.mark.asyncio
    async def test_empty_result_has_zero_pages(self, service: CatalogService) -> None:
        result = await service.get_products(ProductFilters(category="garden"))
        assert result.data == []
        assert result.meta.total == 0
        assert result.meta.total_pages == 0

    @pytest.mark.asyncio
    async def test_price_range(self, service: CatalogService) -> None:
        result = await service.get_products(
            ProductFilters(min_price=Decimal("50"), max_price=Decimal("1000"))
        )
        assert {p.price for p in result.data} == {Decimal("199.99"), Decimal("699.99")}
        assert result.meta.total == 2

    @pytest.mark.asyncio
    async def test_category_sorted_by_price(self, service: CatalogService) -> None:
        result = await service.get_products(
            ProductFilters(category="electronics", sort="price", order="asc")
        )
        assert [p.name for p in result.data] == [
            "Wireless Headphones",
            "Smartphone",
            "Laptop",
        ]


class TestSearchAndLookup:
    """Tests for search, category listing and lookup."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_blank_search_rejected(self, service: CatalogService, query) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await service.search_products(query)
        assert exc_info.value.field == "q"

    @pytest.mark.asyncio
    async def test_search_trims_query(self, service: CatalogService) -> None:
        result = await service.search_products("  smartphone  ")
        assert [p.name for p in result.data] == ["Smartphone"]

    @pytest.mark.asyncio
    async def test_search_keeps_other_filters(self, service: CatalogService) -> None:
        result = await service.search_products(
            "high", ProductFilters(max_price=Decimal("500"))
        )
        assert [p.name for p in result.data] == ["Wireless Headphones"]

    @pytest.mark.asyncio
    async def test_products_by_category(self, service: CatalogService) -> None:
        result = await service.get_products_by_category("books")
        assert [p.sku for p in result.data] == ["BK-001"]

    @pytest.mark.asyncio
    async def test_products_by_blank_category_rejected(self, service: CatalogService) -> None:
        with pytest.raises(InvalidArgumentError):
            await service.get_products_by_category(" ")

    @pytest.mark.asyncio
    async def test_get_product_by_id(self, service: CatalogService) -> None:
        product = await service.get_product_by_id("2")
        assert product is not None
        assert product.name == "Smartphone"

    @pytest.mark.asyncio
    async def test_get_missing_product_returns_none(self, service: CatalogService) -> None:
        assert await service.get_product_by_id("missing-id") is None

    @pytest.mark.asyncio
    async def test_get_product_requires_id(self, service: CatalogService) -> None:
        with pytest.raises(InvalidArgumentError):
            await service.get_product_by_id("")

    @pytest.mark.asyncio
    async def test_featured_products_newest_first(self, service: CatalogService) -> None:
        featured = await service.get_featured_products(limit=2)
        assert [p.name for p in featured] == ["Laptop", "Programming Book"]

    @pytest.mark.asyncio
    async def test_list_categories_sorted_by_name(self, service: CatalogService) -> None:
        categories = await service.list_categories()
        assert [c.name for c in categories] == ["Books", "Clothing", "Electronics"]


class TestCreateProduct:
    """Tests for product creation."""

    @pytest.mark.asyncio
    async def test_create(
        self,
        service: CatalogService,
        store: InMemoryProductRepository,
        new_product: CreateProductDTO,
    ) -> None:
        product = await service.create_product(new_product)

        assert product.id
        assert product.category.slug == "electronics"
        assert product.is_active is True
        assert product.images[0].alt_text == "USB-C Cable - Image 1"
        assert await store.find_by_id(product.id) == product

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "description", "sku", "category_id"])
    async def test_missing_required_field(
        self, service: CatalogService, new_product: CreateProductDTO, missing: str
    ) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await service.create_product(replace(new_product, **{missing: None}))
        assert exc_info.value.field == missing

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [Decimal("-1"), Decimal("0")])
    async def test_non_positive_price_leaves_store_unchanged(
        self,
        service: CatalogService,
        store: InMemoryProductRepository,
        new_product: CreateProductDTO,
        price: Decimal,
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await service.create_product(replace(new_product, price=price))
        assert await store.count(ProductFilters()) == 5

    @pytest.mark.asyncio
    async def test_negative_stock(
        self, service: CatalogService, new_product: CreateProductDTO
    ) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await service.create_product(replace(new_product, stock_quantity=-1))
        assert exc_info.value.field == "stock_quantity"

    @pytest.mark.asyncio
    async def test_unknown_category(
        self, service: CatalogService, new_product: CreateProductDTO
    ) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await service.create_product(replace(new_product, category_id="cat-99"))
        assert exc_info.value.field == "category_id"

    @pytest.mark.asyncio
    async def test_duplicate_sku(
        self, service: CatalogService, new_product: CreateProductDTO
    ) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await service.create_product(replace(new_product, sku="WH-001"))
        assert exc_info.value.field == "sku"


class TestUpdateProduct:
    """Tests for partial updates."""

    @pytest.mark.asyncio
    async def test_empty_patch_changes_only_updated_at(
        self, service: CatalogService, store: InMemoryProductRepository
    ) -> None:
        before = await store.find_by_id("1")

        after = await service.update_product("1", UpdateProductDTO())

        assert after.updated_at > before.updated_at
        assert replace(after, updated_at=before.updated_at) == before

    @pytest.mark.asyncio
    async def test_patch_applies_provided_fields(self, service: CatalogService) -> None:
        product = await service.update_product(
            "3",
            UpdateProductDTO(price=Decimal("24.99"), is_active=False, category_id="books"),
        )
        assert product.price == Decimal("24.99")
        assert product.is_active is False
        assert product.category.id == "cat-3"
        assert product.name == "Cotton T-Shirt"

    @pytest.mark.asyncio
    async def test_invalid_values_rejected(self, service: CatalogService) -> None:
        with pytest.raises(InvalidArgumentError):
            await service.update_product("1", UpdateProductDTO(price=Decimal("0")))
        with pytest.raises(InvalidArgumentError):
            await service.update_product("1", UpdateProductDTO(stock_quantity=-5))
        with pytest.raises(InvalidArgumentError):
            await service.update_product("1", UpdateProductDTO(name="  "))
        with pytest.raises(InvalidArgumentError):
            await service.update_product("1", UpdateProductDTO(category_id="nope"))

    @pytest.mark.asyncio
    async def test_update_missing_product(self, service: CatalogService) -> None:
        with pytest.raises(ProductNotFoundError):
            await service.update_product("missing-id", UpdateProductDTO(name="X"))


class TestDeleteProduct:
    """Tests for deletion."""

    @pytest.mark.asyncio
    async def test_delete(
        self, service: CatalogService, store: InMemoryProductRepository
    ) -> None:
        await service.delete_product("4")
        assert await store.find_by_id("4") is None
        assert await store.count(ProductFilters()) == 4

    @pytest.mark.asyncio
    async def test_delete_missing_product(self, service: CatalogService) -> None:
        with pytest.raises(ProductNotFoundError):
            await service.delete_product("missing-id")

    @pytest.mark.asyncio
    async def test_delete_requires_id(self, service: CatalogService) -> None:
        with pytest.raises(InvalidArgumentError):
            await service.delete_product(None)
