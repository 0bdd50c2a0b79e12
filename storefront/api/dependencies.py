"""Request dependencies shared by the API routers."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from typing import Annotated

from fastapi import Depends, Query, Request

from storefront.catalog.repository import ProductStore, SqlProductRepository
from storefront.catalog.service import CatalogService
from storefront.domain.entities import ProductFilters
from storefront.infrastructure.database import get_session_factory


async def get_product_store(request: Request) -> AsyncGenerator[ProductStore, None]:
    """Get the product store for this request.

    Uses the store attached to ``app.state`` when there is one (the
    in-memory backend). Otherwise opens a database session that is
    committed after the handler returns and rolled back on error.
    """
    store = getattr(request.app.state, "product_store", None)
    if store is not None:
        yield store
        return

    async with get_session_factory()() as session:
        try:
            yield SqlProductRepository(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_catalog_service(
    request: Request,
    store: Annotated[ProductStore, Depends(get_product_store)],
) -> CatalogService:
    """Get catalog service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return CatalogService(store, request_id=request_id)


def page_filters(
    page: Annotated[int | None, Query(description="Page number (1-based)")] = None,
    limit: Annotated[int | None, Query(description="Items per page (max 100)")] = None,
    min_price: Annotated[
        Decimal | None, Query(alias="minPrice", description="Minimum price (inclusive)")
    ] = None,
    max_price: Annotated[
        Decimal | None, Query(alias="maxPrice", description="Maximum price (inclusive)")
    ] = None,
    sort: Annotated[str | None, Query(description="name, price or createdAt")] = None,
    order: Annotated[str | None, Query(description="asc or desc")] = None,
) -> ProductFilters:
    """Filters every product listing accepts.

    Out-of-range page and limit values are clamped by the service,
    not rejected here.
    """
    return ProductFilters(
        page=page,
        limit=limit,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        order=order,
    )
