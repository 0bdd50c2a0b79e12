"""Domain exceptions.

All domain-level errors raised by the catalog service and stores.
The HTTP layer maps each kind to a status code:

- InvalidArgumentError -> 400
- NotFoundError -> 404
- anything else -> 500
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the API layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class InvalidArgumentError(DomainError):
    """Raised when an input fails validation.

    Covers missing or blank required fields, non-positive prices,
    negative stock, empty search queries and empty identifiers.
    """

    error_code = "INVALID_ARGUMENT"

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize invalid argument error.

        Args:
            message: Explanation of what is wrong with the input.
            field: Name of the offending field, if there is one.
        """
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when an operation targets an entity that does not exist."""

    error_code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """Raised when a product ID is not present in the store."""

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: ID of the missing product.
        """
        super().__init__(
            "Product not found",
            details={"product_id": product_id},
        )
        self.product_id = product_id
