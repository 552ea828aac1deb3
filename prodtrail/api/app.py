"""FastAPI application factory for ProdTrail.

Usage::

    from prodtrail.api.app import create_app

    app = create_app(repository=repository, identity=identity)

The factory is designed for use by both the production bootstrap
(``prodtrail.app``) and unit tests.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from prodtrail.api.routes import router
from prodtrail.api.schemas import ErrorResponse
from prodtrail.catalog.repository import ProductRepository
from prodtrail.errors import InvalidFieldError, ProductNotFoundError
from prodtrail.identity import IdentityProvider

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


def create_app(
    repository: ProductRepository,
    identity: IdentityProvider,
) -> FastAPI:
    """Create and configure the ProdTrail FastAPI application.

    Args:
        repository: Loaded ProductRepository (owns the audit log).
        identity:   Attribution fallback when a request has no X-Actor header.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from prodtrail import __version__

    app = FastAPI(
        title="ProdTrail",
        summary="Product catalog with field-level change history",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    # Route handlers reach dependencies through app.state.
    app.state.repository = repository
    app.state.identity = identity

    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(ProductNotFoundError)
    async def not_found_handler(_request: Request, exc: ProductNotFoundError) -> JSONResponse:
        return _error(404, "PRODUCT_NOT_FOUND", str(exc))

    @app.exception_handler(InvalidFieldError)
    async def invalid_field_handler(_request: Request, exc: InvalidFieldError) -> JSONResponse:
        return _error(400, "INVALID_FIELD", str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        detail = ""
        if errors:
            locs = errors[0].get("loc", ())
            field_name = str(locs[-1]) if locs else ""
            detail = f"{field_name}: {errors[0].get('msg', '')}" if field_name else str(errors[0].get("msg", ""))
        return _error(400, "INVALID_FIELD", detail)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return _error(500, "INTERNAL_ERROR", "An unexpected error occurred.")

    return app
