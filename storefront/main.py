"""Storefront API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.categories import router as categories_router
from storefront.api.health import router as health_router
from storefront.api.middleware import setup_middleware
from storefront.api.products import router as products_router
from storefront.api.schemas import ErrorResponse
from storefront.catalog.repository import InMemoryProductRepository
from storefront.catalog.seed import seed_categories, seed_database
from storefront.domain.exceptions import (
    DomainError,
    InvalidArgumentError,
    NotFoundError,
)
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import (
    dispose_engine,
    get_session_factory,
    init_models,
)
from storefront.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()


def build_memory_store() -> InMemoryProductRepository:
    """Create the in-memory store, with the sample catalog if enabled."""
    if settings.seed_on_startup:
        return InMemoryProductRepository.with_seed_data()
    return InMemoryProductRepository(categories=list(seed_categories().values()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging(settings.log_level)
    logger.info(
        "Starting Storefront API",
        version=settings.api_version,
        debug=settings.debug,
        store_backend=settings.store_backend,
    )

    if settings.store_backend == "database":
        await init_models()
        if settings.seed_on_startup:
            async with get_session_factory()() as session:
                result = await seed_database(session)
                await session.commit()
            logger.info("Catalog seeded", **result)

    yield

    # Shutdown
    logger.info("Shutting down Storefront API")
    if settings.store_backend == "database":
        await dispose_engine()


app = FastAPI(
    title="Storefront API",
    description="Product catalog API",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# The database backend opens a session per request instead.
app.state.product_store = (
    build_memory_store() if settings.store_backend == "memory" else None
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router, prefix=settings.api_prefix)
app.include_router(categories_router, prefix=settings.api_prefix)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
    details: dict | None = None,
) -> JSONResponse:
    """Build a JSON response in the standard error envelope."""
    body = ErrorResponse(
        error=message,
        error_code=error_code,
        details=details or {},
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to HTTP status codes."""
    if isinstance(exc, InvalidArgumentError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(
            "Domain error",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )

    return error_response(request, status_code, exc.message, exc.error_code, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed query parameters and bodies as 400."""
    errors = [
        {
            "location": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Invalid request",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions (e.g. unknown routes) with consistent format."""
    return error_response(request, exc.status_code, str(exc.detail), "HTTP_ERROR")
