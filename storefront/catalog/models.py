"""SQLAlchemy models for the product catalog.

Defines categories, products, product images and reviews for
persistent storage. Each model converts itself to its domain entity.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.domain.entities import (
    Category,
    Product,
    ProductImage,
    Review,
    ReviewAuthor,
)
from storefront.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CategoryModel(Base):
    """Category table.

    Attributes:
        id: Unique category identifier (UUID string).
        name: Display name.
        slug: Unique URL-safe name.
        description: Optional description.
        image_url: Optional banner image URL.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    products: Mapped[list["ProductModel"]] = relationship(
        "ProductModel",
        back_populates="category",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, slug={self.slug})>"

    def to_entity(self) -> Category:
        """Convert to domain entity."""
        return Category(
            id=self.id,
            name=self.name,
            slug=self.slug,
            description=self.description,
            image_url=self.image_url,
        )


class ProductModel(Base):
    """Product table.

    Attributes:
        id: Unique product identifier (UUID string).
        name: Product name.
        description: Product description.
        price: Unit price with two decimal places.
        sku: Stock Keeping Unit (unique).
        stock_quantity: Units on hand.
        is_active: Whether the product is listed.
        category_id: Owning category.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now,
    )

    # Relationships
    category: Mapped[CategoryModel] = relationship(
        CategoryModel,
        back_populates="products",
    )
    images: Mapped[list["ProductImageModel"]] = relationship(
        "ProductImageModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="(ProductImageModel.sort_order, ProductImageModel.position)",
    )
    reviews: Mapped[list["ReviewModel"]] = relationship(
        "ReviewModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ReviewModel.created_at",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, sku={self.sku}, name={self.name[:30]})>"

    def to_entity(self) -> Product:
        """Convert to domain entity.

        Requires ``category``, ``images`` and ``reviews`` to be loaded.
        The rating aggregates are computed from the loaded reviews.
        """
        reviews = [r.to_entity() for r in self.reviews]
        average = (
            round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else 0.0
        )
        return Product(
            id=self.id,
            name=self.name,
            description=self.description,
            price=Decimal(self.price),
            sku=self.sku,
            stock_quantity=self.stock_quantity,
            is_active=self.is_active,
            category=self.category.to_entity(),
            images=[i.to_entity() for i in self.images],
            reviews=reviews,
            average_rating=average,
            review_count=len(reviews),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ProductImageModel(Base):
    """Product image table.

    ``position`` records insertion order and breaks ``sort_order`` ties.
    """

    __tablename__ = "product_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    alt_text: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product: Mapped[ProductModel] = relationship(ProductModel, back_populates="images")

    def to_entity(self) -> ProductImage:
        """Convert to domain entity."""
        return ProductImage(
            id=self.id,
            url=self.url,
            alt_text=self.alt_text,
            sort_order=self.sort_order,
        )


class ReviewModel(Base):
    """Product review table."""

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now,
    )

    product: Mapped[ProductModel] = relationship(ProductModel, back_populates="reviews")

    def to_entity(self) -> Review:
        """Convert to domain entity."""
        return Review(
            id=self.id,
            rating=self.rating,
            comment=self.comment,
            user=ReviewAuthor(
                first_name=self.author_first_name,
                last_name=self.author_last_name,
            ),
            created_at=self.created_at,
        )
