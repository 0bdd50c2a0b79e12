"""Domain entities and query descriptors for the catalog.

Products own their images and reviews. Categories are shared
references. ``ProductFilters`` describes a catalog query and
``PaginatedResponse`` carries one page of results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# ============================================================================
# Sorting
# ============================================================================


class SortField(str, Enum):
    """Fields a product listing can be ordered by."""

    NAME = "name"
    PRICE = "price"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


# ============================================================================
# Entities
# ============================================================================


@dataclass
class Category:
    """Product category.

    Attributes:
        id: Unique category identifier.
        name: Display name.
        slug: Unique, URL-safe name.
        description: Optional description.
        image_url: Optional banner image.
    """

    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None


@dataclass
class ProductImage:
    """Image belonging to exactly one product."""

    id: str
    url: str
    alt_text: str | None = None
    sort_order: int = 0


@dataclass
class ReviewAuthor:
    """Public name of a reviewer."""

    first_name: str
    last_name: str


@dataclass
class Review:
    """Customer review of a product."""

    id: str
    rating: int
    user: ReviewAuthor
    comment: str | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Product:
    """Product in the catalog.

    ``average_rating`` and ``review_count`` are aggregates computed by
    the store. They are read-only projections and are never patched.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Long description.
        price: Unit price, always positive.
        sku: Stock Keeping Unit, unique across the catalog.
        stock_quantity: Units on hand, never negative.
        is_active: Whether the product is listed.
        category: Category the product belongs to.
        images: Images in display order.
        reviews: Customer reviews.
        average_rating: Mean review rating.
        review_count: Number of reviews.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    name: str
    description: str
    price: Decimal
    sku: str
    stock_quantity: int
    category: Category
    is_active: bool = True
    images: list[ProductImage] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def category_id(self) -> str:
        """ID of the product's category."""
        return self.category.id


# ============================================================================
# Commands
# ============================================================================


@dataclass
class ImageInput:
    """Image supplied when creating a product."""

    url: str
    alt_text: str | None = None
    sort_order: int | None = None


@dataclass
class CreateProductDTO:
    """Data for creating a product.

    Every field is optional at the type level so that the service can
    report which required one is missing.
    """

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    sku: str | None = None
    stock_quantity: int | None = None
    category_id: str | None = None
    images: list[ImageInput] = field(default_factory=list)


@dataclass
class UpdateProductDTO:
    """Partial update for a product. ``None`` leaves a field untouched."""

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    stock_quantity: int | None = None
    category_id: str | None = None
    is_active: bool | None = None


# ============================================================================
# Queries
# ============================================================================


@dataclass
class ProductFilters:
    """Product query descriptor.

    Attributes:
        category: Category slug or ID.
        search: Case-insensitive substring of name or description.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        page: Page number (1-based).
        limit: Items per page.
        sort: Sort field (name, price, createdAt).
        order: Sort order (asc, desc).
    """

    category: str | None = None
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    page: int | None = None
    limit: int | None = None
    sort: SortField | str | None = None
    order: SortOrder | str | None = None


@dataclass
class PageMeta:
    """Pagination metadata for a result page."""

    total: int
    page: int
    limit: int
    total_pages: int


@dataclass
class PaginatedResponse(Generic[T]):
    """One page of results plus pagination metadata."""

    data: list[T]
    meta: PageMeta
