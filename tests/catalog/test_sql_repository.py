"""Tests for the SQL product store against in-memory SQLite."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.catalog.models import ProductModel
from storefront.catalog.repository import (
    MAX_SQL_OFFSET,
    ProductStore,
    SqlProductRepository,
)
from storefront.catalog.seed import seed_database
from storefront.catalog.service import CatalogService
from storefront.domain.entities import (
    CreateProductDTO,
    ImageInput,
    ProductFilters,
    UpdateProductDTO,
)
from storefront.domain.exceptions import InvalidArgumentError, ProductNotFoundError
from storefront.infrastructure.database import init_models


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh, seeded in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed_database(session)
        await session.commit()
        yield session
    await engine.dispose()


@pytest.fixture
def repo(session: AsyncSession) -> SqlProductRepository:
    return SqlProductRepository(session)


def test_satisfies_store_protocol(repo: SqlProductRepository) -> None:
    assert isinstance(repo, ProductStore)


@pytest.mark.asyncio
async def test_seed_is_idempotent(session: AsyncSession) -> None:
    result = await seed_database(session)
    assert result == {"categories_created": 0, "products_created": 0}


@pytest.mark.asyncio
async def test_find_many_by_category_sorted_by_price(repo: SqlProductRepository) -> None:
    products = await repo.find_many(
        ProductFilters(category="electronics", sort="price", order="asc")
    )
    assert [p.name for p in products] == ["Wireless Headphones", "Smartphone", "Laptop"]


@pytest.mark.asyncio
async def test_category_matches_id(repo: SqlProductRepository) -> None:
    assert await repo.count(ProductFilters(category="cat-1")) == 3


@pytest.mark.asyncio
async def test_price_range_and_count(repo: SqlProductRepository) -> None:
    filters = ProductFilters(min_price=Decimal("50"), max_price=Decimal("1000"))
    products = await repo.find_many(filters)
    assert sorted(p.price for p in products) == [Decimal("199.99"), Decimal("699.99")]
    assert await repo.count(filters) == 2


@pytest.mark.asyncio
async def test_search_is_case_insensitive(repo: SqlProductRepository) -> None:
    products = await repo.find_many(ProductFilters(search="NOISE"))
    assert [p.sku for p in products] == ["WH-001"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(repo: SqlProductRepository) -> None:
    assert await repo.count(ProductFilters(search="%")) == 0


@pytest.mark.asyncio
async def test_name_sort_and_window(repo: SqlProductRepository) -> None:
    products = await repo.find_many(
        ProductFilters(sort="name", order="asc", page=2, limit=2)
    )
    assert [p.name for p in products] == ["Programming Book", "Smartphone"]


@pytest.mark.asyncio
async def test_default_sort_is_newest_first(repo: SqlProductRepository) -> None:
    products = await repo.find_many(ProductFilters())
    assert products[0].name == "Laptop"
    assert products[-1].name == "Wireless Headphones"


@pytest.mark.asyncio
async def test_entity_includes_relations(repo: SqlProductRepository) -> None:
    product = await repo.find_by_sku("WH-001")

    assert product.category.slug == "electronics"
    assert [i.alt_text for i in product.images] == [
        "Wireless Headphones - Main Image",
        "Wireless Headphones - Side View",
    ]
    assert product.reviews[0].user.first_name == "John"
    assert product.review_count == 1
    assert product.average_rating == 5.0


@pytest.mark.asyncio
async def test_create_update_delete(repo: SqlProductRepository) -> None:
    created = await repo.create(
        CreateProductDTO(
            name="Desk Lamp",
            description="LED desk lamp",
            price=Decimal("35.00"),
            sku="DL-001",
            stock_quantity=10,
            category_id="cat-1",
            images=[ImageInput(url="https://example.com/lamp.jpg")],
        )
    )
    assert created.images[0].alt_text == "Desk Lamp - Image 1"
    assert (await repo.find_by_id(created.id)).sku == "DL-001"

    updated = await repo.update(created.id, UpdateProductDTO(price=Decimal("30.00")))
    assert updated.price == Decimal("30.00")
    assert updated.name == "Desk Lamp"

    await repo.delete(created.id)
    assert await repo.find_by_id(created.id) is None


@pytest.mark.asyncio
async def test_update_and_delete_missing(repo: SqlProductRepository) -> None:
    with pytest.raises(ProductNotFoundError):
        await repo.update("missing-id", UpdateProductDTO())
    with pytest.raises(ProductNotFoundError):
        await repo.delete("missing-id")


@pytest.mark.asyncio
async def test_categories(repo: SqlProductRepository) -> None:
    categories = await repo.list_categories()
    assert [c.slug for c in categories] == ["books", "clothing", "electronics"]
    assert (await repo.find_category("books")).id == "cat-3"


@pytest.mark.asyncio
async def test_service_over_sql_store(repo: SqlProductRepository) -> None:
    """Page and count queries share one session."""
    service = CatalogService(repo)

    page = await service.get_products(ProductFilters(limit=2))
    assert len(page.data) == 2
    assert page.meta.total == 5
    assert page.meta.total_pages == 3

    with pytest.raises(InvalidArgumentError):
        await service.create_product(
            CreateProductDTO(
                name="Copy",
                description="Duplicate SKU",
                price=Decimal("1.00"),
                sku="LP-001",
                stock_quantity=1,
                category_id="electronics",
            )
        )


@pytest.mark.asyncio
async def test_page_past_integer_range_is_empty(repo: SqlProductRepository) -> None:
    """A page whose offset no database integer can hold is simply empty."""
    service = CatalogService(repo)

    page = await service.get_products(ProductFilters(page=10**19))

    assert page.data == []
    assert page.meta.total == 5
    assert page.meta.page == 10**19


@pytest.mark.asyncio
async def test_last_representable_offset_is_queried(repo: SqlProductRepository) -> None:
    assert await repo.find_many(ProductFilters(page=MAX_SQL_OFFSET + 1, limit=1)) == []


@pytest.mark.asyncio
async def test_created_at_ties_order_by_id_in_both_directions(
    session: AsyncSession, repo: SqlProductRepository
) -> None:
    stamp = datetime(2030, 1, 1, tzinfo=timezone.utc)
    for product_id in ("tie-b", "tie-a"):
        session.add(
            ProductModel(
                id=product_id,
                name=product_id,
                description="Same instant",
                price=Decimal("1.00"),
                sku=product_id.upper(),
                stock_quantity=1,
                category_id="cat-2",
                created_at=stamp,
                updated_at=stamp,
            )
        )
    await session.flush()

    for order in ("asc", "desc"):
        products = await repo.find_many(ProductFilters(search="same instant", order=order))
        assert [p.id for p in products] == ["tie-a", "tie-b"]
