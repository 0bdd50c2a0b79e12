"""Category API endpoints.

- GET /categories - all categories
- GET /categories/{category}/products - products in one category
"""

import dataclasses
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.api.dependencies import get_catalog_service, page_filters
from storefront.api.schemas import (
    CategoryListResponse,
    CategorySchema,
    ErrorResponse,
    ProductListResponse,
)
from storefront.catalog.service import CatalogService
from storefront.domain.entities import ProductFilters

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CategoryListResponse:
    """All categories ordered by name."""
    categories = await service.list_categories()
    return CategoryListResponse(
        data=[CategorySchema.model_validate(c) for c in categories]
    )


@router.get(
    "/{category}/products",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="List products in a category",
)
async def list_category_products(
    category: str,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    filters: Annotated[ProductFilters, Depends(page_filters)],
    search: str | None = Query(default=None, description="Text to look for"),
) -> ProductListResponse:
    """List products by category slug or ID.

    An unknown category yields an empty page rather than 404.
    """
    page = await service.get_products_by_category(
        category, dataclasses.replace(filters, search=search)
    )
    return ProductListResponse.from_page(page)
