"""API schemas for the storefront API.

Pydantic models for request/response validation and serialization.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from storefront.domain.entities import (
    CreateProductDTO,
    ImageInput,
    PaginatedResponse,
    Product,
    UpdateProductDTO,
)

# Prices travel as JSON numbers, not strings.
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base model with camelCase aliases that also reads dataclass attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(CamelModel):
    """Standard error envelope.

    All API errors follow this format for consistency.
    """

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginationMetaSchema(CamelModel):
    """Pagination metadata."""

    total: int = Field(..., description="Total number of matching items")
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Number of pages")


# ============================================================================
# Catalog Schemas
# ============================================================================


class CategorySchema(CamelModel):
    """Product category."""

    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None


class ProductImageSchema(CamelModel):
    """Product image."""

    id: str
    url: str
    alt_text: str | None = None
    sort_order: int


class ReviewAuthorSchema(CamelModel):
    """Reviewer name."""

    first_name: str
    last_name: str


class ReviewSchema(CamelModel):
    """Product review."""

    id: str
    rating: int
    comment: str | None = None
    created_at: datetime
    user: ReviewAuthorSchema


class ProductSchema(CamelModel):
    """Product with category, images and review aggregates."""

    id: str
    name: str
    description: str
    price: Price
    sku: str
    stock_quantity: int
    is_active: bool
    category_id: str
    category: CategorySchema
    images: list[ProductImageSchema] = Field(default_factory=list)
    reviews: list[ReviewSchema] = Field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Request Schemas
# ============================================================================


class ImageCreateSchema(CamelModel):
    """Image supplied with a new product."""

    url: str = Field(..., min_length=1)
    alt_text: str | None = None
    sort_order: int | None = None


class ProductCreateRequest(CamelModel):
    """Request to create a product.

    Required fields are checked by the catalog service so that a missing
    field is reported the same way whichever client sends it.
    """

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    sku: str | None = None
    stock_quantity: int | None = None
    category_id: str | None = None
    images: list[ImageCreateSchema] = Field(default_factory=list)

    def to_dto(self) -> CreateProductDTO:
        """Convert to service input."""
        return CreateProductDTO(
            name=self.name,
            description=self.description,
            price=self.price,
            sku=self.sku,
            stock_quantity=self.stock_quantity,
            category_id=self.category_id,
            images=[
                ImageInput(url=i.url, alt_text=i.alt_text, sort_order=i.sort_order)
                for i in self.images
            ],
        )


class ProductUpdateRequest(CamelModel):
    """Partial product update. Omitted fields are left unchanged."""

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    stock_quantity: int | None = None
    category_id: str | None = None
    is_active: bool | None = None

    def to_dto(self) -> UpdateProductDTO:
        """Convert to service input."""
        return UpdateProductDTO(
            name=self.name,
            description=self.description,
            price=self.price,
            stock_quantity=self.stock_quantity,
            category_id=self.category_id,
            is_active=self.is_active,
        )


# ============================================================================
# Response Envelopes
# ============================================================================


class ProductListResponse(CamelModel):
    """Paginated list of products."""

    success: bool = True
    data: list[ProductSchema]
    meta: PaginationMetaSchema

    @classmethod
    def from_page(cls, page: PaginatedResponse[Product]) -> "ProductListResponse":
        """Build from a service result page."""
        return cls(
            data=[ProductSchema.model_validate(p) for p in page.data],
            meta=PaginationMetaSchema.model_validate(page.meta),
        )


class ProductsResponse(CamelModel):
    """Unpaginated list of products."""

    success: bool = True
    data: list[ProductSchema]


class ProductResponse(CamelModel):
    """Single product."""

    success: bool = True
    data: ProductSchema


class CategoryListResponse(CamelModel):
    """List of categories."""

    success: bool = True
    data: list[CategorySchema]
