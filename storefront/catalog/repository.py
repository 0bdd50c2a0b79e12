"""Product stores.

``ProductStore`` is the capability contract the catalog service depends
on. Two implementations are provided:

- ``InMemoryProductRepository`` keeps products in a list and runs the
  filtering engine over it.
- ``SqlProductRepository`` pushes the same predicates down to the
  database through an async SQLAlchemy session.
"""

import asyncio
import dataclasses
from typing import Any, Protocol, runtime_checkable
from uuid import uuid4

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.filtering import (
    count_matching,
    normalize_limit,
    normalize_page,
    query_products,
    resolve_order,
    resolve_sort,
)
from storefront.catalog.models import (
    CategoryModel,
    ProductImageModel,
    ProductModel,
)
from storefront.domain.entities import (
    Category,
    CreateProductDTO,
    ImageInput,
    Product,
    ProductFilters,
    ProductImage,
    SortField,
    SortOrder,
    UpdateProductDTO,
    utc_now,
)
from storefront.domain.exceptions import ProductNotFoundError

PATCHABLE_FIELDS = (
    "name",
    "description",
    "price",
    "stock_quantity",
    "category_id",
    "is_active",
)

# Largest OFFSET a 64-bit database integer can hold.
MAX_SQL_OFFSET = 2**63 - 1


@runtime_checkable
class ProductStore(Protocol):
    """Persistence contract for products and their categories."""

    async def find_many(self, filters: ProductFilters) -> list[Product]:
        """Products matching ``filters``, sorted and windowed."""
        ...

    async def find_by_id(self, product_id: str) -> Product | None:
        """Product with ``product_id``, or None."""
        ...

    async def find_by_sku(self, sku: str) -> Product | None:
        """Product with ``sku``, or None."""
        ...

    async def count(self, filters: ProductFilters) -> int:
        """Number of products matching the predicates of ``filters``."""
        ...

    async def create(self, data: CreateProductDTO) -> Product:
        """Persist a new product."""
        ...

    async def update(self, product_id: str, patch: UpdateProductDTO) -> Product:
        """Apply ``patch``. Raises ProductNotFoundError if absent."""
        ...

    async def delete(self, product_id: str) -> None:
        """Remove a product. Raises ProductNotFoundError if absent."""
        ...

    async def find_category(self, id_or_slug: str) -> Category | None:
        """Category by ID or slug, or None."""
        ...

    async def list_categories(self) -> list[Category]:
        """All categories ordered by name."""
        ...


def _image_defaults(name: str, index: int, image: ImageInput) -> tuple[str, int]:
    alt_text = image.alt_text or f"{name} - Image {index + 1}"
    sort_order = image.sort_order if image.sort_order is not None else index
    return alt_text, sort_order


def _patch_values(patch: UpdateProductDTO) -> dict[str, Any]:
    return {
        name: getattr(patch, name)
        for name in PATCHABLE_FIELDS
        if getattr(patch, name) is not None
    }


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryProductRepository:
    """In-memory repository for products.

    Products are kept in insertion order, which is the "source order"
    that stable sorting preserves for equal keys. Stored products are
    replaced, never modified in place.
    """

    def __init__(
        self,
        products: list[Product] | None = None,
        categories: list[Category] | None = None,
    ) -> None:
        self._products: list[Product] = list(products or [])
        self._categories: dict[str, Category] = {c.id: c for c in categories or []}
        for product in self._products:
            self._categories.setdefault(product.category.id, product.category)

    @classmethod
    def with_seed_data(cls) -> "InMemoryProductRepository":
        """Create a repository holding the sample catalog."""
        from storefront.catalog.seed import seed_categories, seed_products

        categories = seed_categories()
        return cls(products=seed_products(categories), categories=list(categories.values()))

    def _index_of(self, product_id: str) -> int:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        raise ProductNotFoundError(product_id)

    def _resolve_category(self, category_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            category = Category(id=category_id, name="Unknown Category", slug="unknown")
        return category

    async def find_many(self, filters: ProductFilters) -> list[Product]:
        """Find products with filtering, sorting, and pagination."""
        return query_products(self._products, filters)

    async def find_by_id(self, product_id: str) -> Product | None:
        """Get product by ID."""
        return next((p for p in self._products if p.id == product_id), None)

    async def find_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU."""
        return next((p for p in self._products if p.sku == sku), None)

    async def count(self, filters: ProductFilters) -> int:
        """Count products matching filters."""
        return count_matching(self._products, filters)

    async def create(self, data: CreateProductDTO) -> Product:
        """Save a new product and return it."""
        images = []
        for index, image in enumerate(data.images):
            alt_text, sort_order = _image_defaults(data.name, index, image)
            images.append(
                ProductImage(
                    id=uuid4().hex,
                    url=image.url,
                    alt_text=alt_text,
                    sort_order=sort_order,
                )
            )
        now = utc_now()
        product = Product(
            id=uuid4().hex,
            name=data.name,
            description=data.description,
            price=data.price,
            sku=data.sku,
            stock_quantity=data.stock_quantity,
            category=self._resolve_category(data.category_id),
            is_active=True,
            images=sorted(images, key=lambda i: i.sort_order),
            created_at=now,
            updated_at=now,
        )
        self._products.append(product)
        return product

    async def update(self, product_id: str, patch: UpdateProductDTO) -> Product:
        """Replace a product with a patched copy."""
        index = self._index_of(product_id)
        changes = _patch_values(patch)
        category_id = changes.pop("category_id", None)
        if category_id is not None:
            changes["category"] = self._resolve_category(category_id)
        updated = dataclasses.replace(
            self._products[index], **changes, updated_at=utc_now()
        )
        self._products[index] = updated
        return updated

    async def delete(self, product_id: str) -> None:
        """Remove a product."""
        del self._products[self._index_of(product_id)]

    async def find_category(self, id_or_slug: str) -> Category | None:
        """Get category by ID or slug."""
        if id_or_slug in self._categories:
            return self._categories[id_or_slug]
        return next(
            (c for c in self._categories.values() if c.slug == id_or_slug), None
        )

    async def list_categories(self) -> list[Category]:
        """List categories ordered by name."""
        return sorted(self._categories.values(), key=lambda c: c.name.casefold())


# ============================================================================
# SQL Store
# ============================================================================


_PRODUCT_LOAD_OPTIONS = (
    selectinload(ProductModel.category),
    selectinload(ProductModel.images),
    selectinload(ProductModel.reviews),
)


class SqlProductRepository:
    """Repository for product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination. ``find_many`` and ``count``
    share one predicate builder so they cannot drift apart.

    Example usage:
        async with get_session_factory()() as session:
            repo = SqlProductRepository(session)
            products = await repo.find_many(
                ProductFilters(category="electronics", sort="price"),
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self._lock = asyncio.Lock()

    def _conditions(self, filters: ProductFilters) -> list[Any]:
        conditions = []

        if filters.category:
            conditions.append(
                or_(
                    CategoryModel.slug == filters.category,
                    CategoryModel.id == filters.category,
                )
            )

        if filters.search:
            conditions.append(
                or_(
                    ProductModel.name.icontains(filters.search, autoescape=True),
                    ProductModel.description.icontains(filters.search, autoescape=True),
                )
            )

        if filters.min_price is not None:
            conditions.append(ProductModel.price >= filters.min_price)

        if filters.max_price is not None:
            conditions.append(ProductModel.price <= filters.max_price)

        return conditions

    def _apply_filters(self, query: Any, filters: ProductFilters) -> Any:
        query = query.join(ProductModel.category)
        conditions = self._conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))
        return query

    def _order_by(self, filters: ProductFilters) -> list[Any]:
        field = resolve_sort(filters.sort)
        columns = {
            SortField.NAME: func.lower(ProductModel.name),
            SortField.PRICE: ProductModel.price,
        }
        column = columns.get(field, ProductModel.created_at)
        primary = column.asc() if resolve_order(filters.order) is SortOrder.ASC else column.desc()
        # Ties fall back to creation time, then to the (random) id, so rows
        # created in the same instant have a fixed but arbitrary order.
        # lower() and LIKE are not accent-aware on SQLite, unlike
        # collation_key in the in-memory store.
        return [primary, ProductModel.created_at.asc(), ProductModel.id.asc()]

    async def _execute(self, query: Any) -> Any:
        # An AsyncSession runs one statement at a time; callers may gather.
        async with self._lock:
            return await self.session.execute(query)

    async def _get_model(self, product_id: str) -> ProductModel | None:
        query = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .options(*_PRODUCT_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def find_many(self, filters: ProductFilters) -> list[Product]:
        """Find products with filtering, sorting, and pagination."""
        page = normalize_page(filters.page)
        limit = normalize_limit(filters.limit)
        offset = (page - 1) * limit
        if offset > MAX_SQL_OFFSET:
            return []

        query = self._apply_filters(select(ProductModel), filters)
        query = (
            query.order_by(*self._order_by(filters))
            .limit(limit)
            .offset(offset)
            .options(*_PRODUCT_LOAD_OPTIONS)
        )

        result = await self._execute(query)
        return [model.to_entity() for model in result.scalars().all()]

    async def find_by_id(self, product_id: str) -> Product | None:
        """Get product by ID."""
        model = await self._get_model(product_id)
        return model.to_entity() if model else None

    async def find_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU."""
        query = (
            select(ProductModel)
            .where(ProductModel.sku == sku)
            .options(*_PRODUCT_LOAD_OPTIONS)
        )
        result = await self._execute(query)
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def count(self, filters: ProductFilters) -> int:
        """Count products matching filters."""
        query = self._apply_filters(
            select(func.count(ProductModel.id)).select_from(ProductModel),
            filters,
        )
        result = await self._execute(query)
        return result.scalar_one()

    async def create(self, data: CreateProductDTO) -> Product:
        """Insert a product with its images."""
        images = []
        for index, image in enumerate(data.images):
            alt_text, sort_order = _image_defaults(data.name, index, image)
            images.append(
                ProductImageModel(
                    url=image.url,
                    alt_text=alt_text,
                    sort_order=sort_order,
                    position=index,
                )
            )

        model = ProductModel(
            name=data.name,
            description=data.description,
            price=data.price,
            sku=data.sku,
            stock_quantity=data.stock_quantity,
            category_id=data.category_id,
            is_active=True,
            images=images,
        )
        self.session.add(model)
        await self.session.flush()

        created = await self._get_model(model.id)
        return created.to_entity()

    async def update(self, product_id: str, patch: UpdateProductDTO) -> Product:
        """Apply a partial update to a product."""
        model = await self._get_model(product_id)
        if model is None:
            raise ProductNotFoundError(product_id)

        for name, value in _patch_values(patch).items():
            setattr(model, name, value)
        model.updated_at = utc_now()
        await self.session.flush()

        updated = await self._get_model(product_id)
        return updated.to_entity()

    async def delete(self, product_id: str) -> None:
        """Delete a product with its images and reviews."""
        model = await self._get_model(product_id)
        if model is None:
            raise ProductNotFoundError(product_id)

        await self.session.delete(model)
        await self.session.flush()

    async def find_category(self, id_or_slug: str) -> Category | None:
        """Get category by ID or slug."""
        query = select(CategoryModel).where(
            or_(CategoryModel.id == id_or_slug, CategoryModel.slug == id_or_slug)
        )
        result = await self._execute(query)
        model = result.scalars().first()
        return model.to_entity() if model else None

    async def list_categories(self) -> list[Category]:
        """List categories ordered by name."""
        result = await self._execute(
            select(CategoryModel).order_by(CategoryModel.name)
        )
        return [model.to_entity() for model in result.scalars().all()]
