#!/usr/bin/env python3
"""Sample catalog data and database seeder.

Provides the five sample products across three categories used by the
in-memory store, and a command that writes the same catalog into the
configured database.

Usage:
    python -m storefront.catalog.seed
    python -m storefront.catalog.seed --database-url sqlite+aiosqlite:///catalog.db
"""

import argparse
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.catalog.models import (
    CategoryModel,
    ProductImageModel,
    ProductModel,
    ReviewModel,
)
from storefront.domain.entities import (
    Category,
    Product,
    ProductImage,
    Review,
    ReviewAuthor,
)
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import init_models

# Seeded products are spaced one hour apart so "newest first" is well defined.
SEED_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

CATEGORIES = [
    {
        "id": "cat-1",
        "name": "Electronics",
        "slug": "electronics",
        "description": "Electronic devices and gadgets",
        "image_url": "https://example.com/images/electronics.jpg",
    },
    {
        "id": "cat-2",
        "name": "Clothing",
        "slug": "clothing",
        "description": "Fashion and apparel",
        "image_url": "https://example.com/images/clothing.jpg",
    },
    {
        "id": "cat-3",
        "name": "Books",
        "slug": "books",
        "description": "Books and literature",
        "image_url": "https://example.com/images/books.jpg",
    },
]

PRODUCTS = [
    {
        "id": "1",
        "name": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": "199.99",
        "sku": "WH-001",
        "stock_quantity": 50,
        "category_id": "cat-1",
        "images": [
            ("img-1", "https://example.com/images/headphones-1.jpg", "Wireless Headphones - Main Image"),
            ("img-2", "https://example.com/images/headphones-2.jpg", "Wireless Headphones - Side View"),
        ],
        "reviews": [
            ("rev-1", 5, "Excellent sound quality!", "John", "Doe"),
        ],
        "average_rating": 4.5,
        "review_count": 128,
    },
    {
        "id": "2",
        "name": "Smartphone",
        "description": "Latest model smartphone with advanced features",
        "price": "699.99",
        "sku": "SP-001",
        "stock_quantity": 25,
        "category_id": "cat-1",
        "images": [
            ("img-3", "https://example.com/images/smartphone-1.jpg", "Smartphone - Front View"),
        ],
        "reviews": [],
        "average_rating": 4.2,
        "review_count": 85,
    },
    {
        "id": "3",
        "name": "Cotton T-Shirt",
        "description": "Comfortable cotton t-shirt in multiple colors",
        "price": "29.99",
        "sku": "TS-001",
        "stock_quantity": 100,
        "category_id": "cat-2",
        "images": [
            ("img-4", "https://example.com/images/tshirt-1.jpg", "Cotton T-Shirt - Blue"),
        ],
        "reviews": [],
        "average_rating": 4.0,
        "review_count": 42,
    },
    {
        "id": "4",
        "name": "Programming Book",
        "description": "Learn modern web development techniques",
        "price": "49.99",
        "sku": "BK-001",
        "stock_quantity": 30,
        "category_id": "cat-3",
        "images": [
            ("img-5", "https://example.com/images/book-1.jpg", "Programming Book - Cover"),
        ],
        "reviews": [],
        "average_rating": 4.8,
        "review_count": 67,
    },
    {
        "id": "5",
        "name": "Laptop",
        "description": "High-performance laptop for professionals",
        "price": "1299.99",
        "sku": "LP-001",
        "stock_quantity": 15,
        "category_id": "cat-1",
        "images": [
            ("img-6", "https://example.com/images/laptop-1.jpg", "Laptop - Closed"),
            ("img-7", "https://example.com/images/laptop-2.jpg", "Laptop - Open"),
        ],
        "reviews": [],
        "average_rating": 4.7,
        "review_count": 156,
    },
]


def _created_at(index: int) -> datetime:
    return SEED_EPOCH + timedelta(hours=index)


# ============================================================================
# In-Memory Seed
# ============================================================================


def seed_categories() -> dict[str, Category]:
    """Fresh sample categories keyed by ID."""
    return {c["id"]: Category(**c) for c in CATEGORIES}


def seed_products(categories: dict[str, Category] | None = None) -> list[Product]:
    """Fresh sample products, oldest first.

    Args:
        categories: Categories to attach; defaults to ``seed_categories()``.

    Returns:
        New Product instances on every call.
    """
    categories = categories or seed_categories()
    products = []
    for index, entry in enumerate(PRODUCTS):
        created_at = _created_at(index)
        products.append(
            Product(
                id=entry["id"],
                name=entry["name"],
                description=entry["description"],
                price=Decimal(entry["price"]),
                sku=entry["sku"],
                stock_quantity=entry["stock_quantity"],
                category=categories[entry["category_id"]],
                images=[
                    ProductImage(id=image_id, url=url, alt_text=alt, sort_order=position)
                    for position, (image_id, url, alt) in enumerate(entry["images"])
                ],
                reviews=[
                    Review(
                        id=review_id,
                        rating=rating,
                        comment=comment,
                        user=ReviewAuthor(first_name=first, last_name=last),
                        created_at=created_at,
                    )
                    for review_id, rating, comment, first, last in entry["reviews"]
                ],
                average_rating=entry["average_rating"],
                review_count=entry["review_count"],
                created_at=created_at,
                updated_at=created_at,
            )
        )
    return products


# ============================================================================
# Database Seed
# ============================================================================


async def seed_database(session: AsyncSession) -> dict[str, int]:
    """Insert the sample catalog, skipping rows that already exist.

    Categories are matched by slug and products by SKU. The caller
    owns the transaction.

    Args:
        session: Async SQLAlchemy session.

    Returns:
        Counts of created categories and products.
    """
    existing = await session.execute(select(CategoryModel))
    categories = {c.slug: c for c in existing.scalars().all()}
    category_ids: dict[str, str] = {}

    created_categories = 0
    for entry in CATEGORIES:
        model = categories.get(entry["slug"])
        if model is None:
            model = CategoryModel(**entry)
            session.add(model)
            created_categories += 1
        category_ids[entry["id"]] = model.id

    existing_skus = set(
        (await session.execute(select(ProductModel.sku))).scalars().all()
    )

    created_products = 0
    for index, entry in enumerate(PRODUCTS):
        if entry["sku"] in existing_skus:
            continue
        created_at = _created_at(index)
        session.add(
            ProductModel(
                name=entry["name"],
                description=entry["description"],
                price=Decimal(entry["price"]),
                sku=entry["sku"],
                stock_quantity=entry["stock_quantity"],
                category_id=category_ids[entry["category_id"]],
                created_at=created_at,
                updated_at=created_at,
                images=[
                    ProductImageModel(
                        url=url, alt_text=alt, sort_order=position, position=position
                    )
                    for position, (_, url, alt) in enumerate(entry["images"])
                ],
                reviews=[
                    ReviewModel(
                        rating=rating,
                        comment=comment,
                        author_first_name=first,
                        author_last_name=last,
                        created_at=created_at,
                    )
                    for _, rating, comment, first, last in entry["reviews"]
                ],
            )
        )
        created_products += 1

    await session.flush()
    return {"categories_created": created_categories, "products_created": created_products}


async def run_seed(database_url: str) -> dict[str, Any]:
    """Create tables and seed the catalog at ``database_url``."""
    engine = create_async_engine(database_url)
    try:
        await init_models(engine)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        async with session_factory() as session:
            result = await seed_database(session)
            await session.commit()
        return result
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the storefront product catalog",
    )
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy async database URL (default: DATABASE_URL setting)",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)

    result = asyncio.run(run_seed(args.database_url))

    print(f"  ✓ Categories created: {result['categories_created']}")
    print(f"  ✓ Products created: {result['products_created']}")


if __name__ == "__main__":
    main()
