"""FastAPI application factory and dependency injection setup."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from property_portfolio.api.dependencies import get_db
from property_portfolio.api.routes import (
    auth_router,
    company_router,
    dashboard_router,
    health_router,
    lease_router,
    lease_tenant_router,
    profile_router,
    property_router,
    relation_router,
    setup_router,
    tenant_router,
    users_router,
)
from property_portfolio.config import get_settings
from property_portfolio.container import get_container, reset_container
from property_portfolio.exceptions import PropertyPortfolioError
from property_portfolio.logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown.

    Initializes logging and the DI container on startup,
    cleans up resources on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
    )

    container = get_container()
    _ = container.database  # Force database initialization

    logger.info("application_started")

    yield

    logger.info("application_stopping")
    reset_container()
    logger.info("application_stopped")


async def log_request_middleware(request: Request, call_next):
    """Middleware to add request context to logs."""
    request_id = str(uuid.uuid4())[:8]
    bind_context(request_id=request_id, path=request.url.path, method=request.method)

    try:
        response = await call_next(request)
        logger.debug(
            "request_completed",
            status_code=response.status_code,
        )
        return response
    finally:
        clear_context()


async def exception_handler(
    request: Request, exc: PropertyPortfolioError
) -> JSONResponse:
    """Handle domain exceptions and return appropriate JSON responses."""
    logger.warning(
        "domain_exception",
        error_code=exc.error_code,
        message=exc.message,
        context=exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with a short Danish summary."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    fields = ", ".join(e["field"] for e in errors if e["field"])
    logger.info("request_validation_failed", errors=errors)
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": f"Valideringsfejl: {fields}" if fields else "Valideringsfejl",
            "context": {"errors": errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", exc_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"message": "Server fejl"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant property portfolio management with ownership-weighted reporting",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(log_request_middleware)

    app.add_exception_handler(PropertyPortfolioError, exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(setup_router)
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(users_router)
    app.include_router(company_router)
    app.include_router(relation_router)
    app.include_router(property_router)
    app.include_router(lease_router)
    app.include_router(tenant_router)
    app.include_router(lease_tenant_router)
    app.include_router(dashboard_router)

    return app


# Create app instance for uvicorn
app = create_app()

__all__ = ["app", "create_app", "get_db"]
