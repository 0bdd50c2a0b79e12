"""Domain layer - catalog entities, query descriptors and exceptions."""

from storefront.domain.entities import (
    Category,
    CreateProductDTO,
    ImageInput,
    PageMeta,
    PaginatedResponse,
    Product,
    ProductFilters,
    ProductImage,
    Review,
    ReviewAuthor,
    SortField,
    SortOrder,
    UpdateProductDTO,
)
from storefront.domain.exceptions import (
    DomainError,
    InvalidArgumentError,
    NotFoundError,
    ProductNotFoundError,
)

__all__ = [
    # Entities
    "Category",
    "Product",
    "ProductImage",
    "Review",
    "ReviewAuthor",
    # Inputs and queries
    "CreateProductDTO",
    "ImageInput",
    "ProductFilters",
    "SortField",
    "SortOrder",
    "UpdateProductDTO",
    # Results
    "PageMeta",
    "PaginatedResponse",
    # Exceptions
    "DomainError",
    "InvalidArgumentError",
    "NotFoundError",
    "ProductNotFoundError",
]
