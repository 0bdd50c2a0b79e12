"""Storefront API client.

Thin async HTTP client for the catalog REST API, used by frontends and
scripts that consume the catalog. Errors never raise; every call
returns an ``APIResponse``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx
import structlog

from storefront.domain.entities import ProductFilters

logger = structlog.get_logger()

# Wire names of the ProductFilters fields.
FILTER_PARAMS = {
    "category": "category",
    "search": "search",
    "min_price": "minPrice",
    "max_price": "maxPrice",
    "page": "page",
    "limit": "limit",
    "sort": "sort",
    "order": "order",
}


@dataclass
class APIError:
    """Represents an API error response."""

    error_code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class APIResponse:
    """Represents an API response."""

    success: bool
    data: dict[str, Any] | list[Any] | None = None
    meta: dict[str, Any] | None = None
    error: APIError | None = None


def filters_to_params(filters: ProductFilters | None) -> dict[str, Any]:
    """Convert filters to query parameters, skipping unset fields."""
    if filters is None:
        return {}

    params = {}
    for attr, name in FILTER_PARAMS.items():
        value = getattr(filters, attr)
        if value is None:
            continue
        if isinstance(value, Decimal):
            value = str(value)
        params[name] = getattr(value, "value", value)
    return params


class CatalogAPIClient:
    """HTTP client for the Storefront catalog API.

    Example usage:
        async with CatalogAPIClient("http://localhost:8000/api/v1") as api:
            result = await api.get_products(ProductFilters(category="books"))
            if result.success:
                print(result.meta["total"])
    """

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        """Initialize the API client.

        Args:
            base_url: API base URL including the version prefix.
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "CatalogAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> APIResponse:
        """Make an API request.

        Args:
            method: HTTP method.
            path: API endpoint path.
            params: Query parameters.

        Returns:
            APIResponse with success status and data or error.
        """
        client = await self._get_client()

        try:
            logger.debug("Making API request", method=method, path=path)

            response = await client.request(method=method, url=path, params=params)

            if response.status_code >= 400:
                error_data = response.json()
                if not isinstance(error_data, dict):
                    error_data = {}
                return APIResponse(
                    success=False,
                    error=APIError(
                        error_code=error_data.get("errorCode", "UNKNOWN_ERROR"),
                        message=error_data.get("error", "Unknown error"),
                        status_code=response.status_code,
                        details=error_data.get("details", {}),
                    ),
                )

            if response.status_code == 204:
                return APIResponse(success=True)

            body = response.json()
            if not isinstance(body, dict):
                body = {"data": body}
            return APIResponse(
                success=True,
                data=body.get("data"),
                meta=body.get("meta"),
            )

        except httpx.TimeoutException as e:
            logger.error("API request timeout", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="TIMEOUT",
                    message=f"Request timed out: {path}",
                    status_code=504,
                ),
            )
        except httpx.RequestError as e:
            logger.error("API request failed", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="REQUEST_ERROR",
                    message=f"Request failed: {str(e)}",
                    status_code=500,
                ),
            )
        except ValueError as e:
            logger.error("Invalid API response", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="INVALID_RESPONSE",
                    message="Response body is not valid JSON",
                    status_code=502,
                ),
            )
        except Exception as e:
            logger.exception("Unexpected API error", path=path)
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="INTERNAL_ERROR",
                    message=f"Internal error: {str(e)}",
                    status_code=500,
                ),
            )

    # =========================================================================
    # Product Endpoints
    # =========================================================================

    async def get_products(self, filters: ProductFilters | None = None) -> APIResponse:
        """List products.

        Args:
            filters: Optional filter, sort and pagination parameters.

        Returns:
            APIResponse with a page of products and pagination meta.
        """
        return await self._request("GET", "/products", params=filters_to_params(filters))

    async def search_products(
        self, query: str, filters: ProductFilters | None = None
    ) -> APIResponse:
        """Search products by name and description."""
        params = filters_to_params(filters)
        params.pop("search", None)
        params["q"] = query
        return await self._request("GET", "/products/search", params=params)

    async def get_product(self, product_id: str) -> APIResponse:
        """Get a product by ID."""
        return await self._request("GET", f"/products/{product_id}")

    async def get_featured_products(self, limit: int = 8) -> APIResponse:
        """Get the newest products."""
        return await self._request(
            "GET", "/products/featured", params={"limit": limit}
        )

    # =========================================================================
    # Category Endpoints
    # =========================================================================

    async def list_categories(self) -> APIResponse:
        """List all categories."""
        return await self._request("GET", "/categories")
