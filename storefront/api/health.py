"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.api.dependencies import get_product_store
from storefront.catalog.repository import ProductStore
from storefront.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    backend: str
    categories: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="storefront-api",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    store: Annotated[ProductStore, Depends(get_product_store)],
) -> ReadinessResponse:
    """Check that the product store answers queries.

    Returns:
        Readiness status. A store failure surfaces as a 500 error.
    """
    categories = await store.list_categories()
    return ReadinessResponse(
        status="ready",
        backend=settings.store_backend,
        categories=len(categories),
    )
