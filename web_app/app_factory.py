"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import api_router
from .middleware.headers import ClientIdentityMiddleware
from .middleware.logging import LoggingMiddleware
from linkvault.common.logging_config import get_logger
from linkvault.errors import LinkVaultError

logger = get_logger("linkvault.web")


async def link_vault_error_handler(request: Request, exc: LinkVaultError) -> JSONResponse:
    logger.warning(f"{exc.status_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request body on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


def create_app(
    store_instance,
    rate_limiter_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store_instance: Link store (may be set later by the lifespan)
        rate_limiter_instance: Rate limiter shared by create and verify
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="LinkVault",
        description="URL shortener with optional PIN-protected links",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.store = store_instance
    app.state.rate_limiter = rate_limiter_instance
    app.state.config = config

    app.add_exception_handler(LinkVaultError, link_vault_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    # The frontend is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Last added runs first: client identity must be set before logging reads it
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        ClientIdentityMiddleware,
        trust_forwarded_for=config.trust_forwarded_for,
    )

    app.include_router(api_router, prefix="/api", tags=["API"])

    return app
