"""Product API endpoints.

Provides endpoints for browsing and managing the catalog:
- GET /products - list products (filtered, sorted, paginated)
- GET /products/search - full-text search over name and description
- GET /products/featured - newest products
- GET /products/{id} - product details
- POST /products - create a product
- PUT /products/{id} - partially update a product
- DELETE /products/{id} - delete a product
"""

import dataclasses
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from storefront.api.dependencies import get_catalog_service, page_filters
from storefront.api.schemas import (
    ErrorResponse,
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductSchema,
    ProductsResponse,
    ProductUpdateRequest,
)
from storefront.catalog.service import FEATURED_LIMIT, CatalogService
from storefront.domain.entities import ProductFilters
from storefront.domain.exceptions import ProductNotFoundError

router = APIRouter(prefix="/products", tags=["Products"])

Service = Annotated[CatalogService, Depends(get_catalog_service)]
Filters = Annotated[ProductFilters, Depends(page_filters)]


# ============================================================================
# Queries
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="List products",
    description="Get a paginated list of products with optional filtering and sorting.",
)
async def list_products(
    service: Service,
    filters: Filters,
    category: str | None = Query(default=None, description="Category slug or ID"),
    search: str | None = Query(default=None, description="Text to look for"),
) -> ProductListResponse:
    """List products.

    Args:
        service: Catalog service.
        filters: Price, sort and pagination parameters.
        category: Category slug or ID.
        search: Case-insensitive text matched against name and description.

    Returns:
        Paginated list of products.
    """
    page = await service.get_products(
        dataclasses.replace(filters, category=category, search=search)
    )
    return ProductListResponse.from_page(page)


@router.get(
    "/search",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Search products",
)
async def search_products(
    service: Service,
    filters: Filters,
    q: str | None = Query(default=None, description="Search query"),
    category: str | None = Query(default=None, description="Category slug or ID"),
) -> ProductListResponse:
    """Search products by name and description.

    A missing or blank ``q`` is rejected with 400.
    """
    page = await service.search_products(
        q, dataclasses.replace(filters, category=category)
    )
    return ProductListResponse.from_page(page)


@router.get(
    "/featured",
    response_model=ProductsResponse,
    summary="Featured products",
)
async def featured_products(
    service: Service,
    limit: int = Query(default=FEATURED_LIMIT, description="Number of products"),
) -> ProductsResponse:
    """Newest products first."""
    products = await service.get_featured_products(limit)
    return ProductsResponse(data=[ProductSchema.model_validate(p) for p in products])


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product details",
)
async def get_product(product_id: str, service: Service) -> ProductResponse:
    """Get a product by ID.

    Raises:
        ProductNotFoundError: If no product has this ID.
    """
    product = await service.get_product_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductResponse(data=ProductSchema.model_validate(product))


# ============================================================================
# Commands
# ============================================================================


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest, service: Service
) -> ProductResponse:
    """Create a product.

    Args:
        request: Product fields and images.
        service: Catalog service.

    Returns:
        The stored product.
    """
    product = await service.create_product(request.to_dto())
    return ProductResponse(data=ProductSchema.model_validate(product))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update product",
    description="Apply a partial update. Omitted fields keep their current values.",
)
async def update_product(
    product_id: str, request: ProductUpdateRequest, service: Service
) -> ProductResponse:
    """Update a product."""
    product = await service.update_product(product_id, request.to_dto())
    return ProductResponse(data=ProductSchema.model_validate(product))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(product_id: str, service: Service) -> Response:
    """Delete a product."""
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
