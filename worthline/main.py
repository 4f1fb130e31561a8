# worthline/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health check)

Run with any ASGI server, e.g.:
    uvicorn worthline.main:app
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from worthline import __version__
from worthline.config import settings
from worthline.middleware import CorrelationIdMiddleware
from worthline.routers import portfolio_router
from worthline.schemas.errors import ErrorDetail, ValidationErrorDetail
from worthline.services.exceptions import (
    AccountNotFoundError,
    InvalidGranularityError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from worthline.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Portfolio valuation and change-history API",
    version=__version__,
)

app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions carry no HTTP knowledge; these handlers turn
# them into ErrorDetail responses. Handlers are matched on the most
# specific exception class first.
# =============================================================================

@app.exception_handler(AccountNotFoundError)
async def account_not_found_handler(request: Request, exc: AccountNotFoundError) -> JSONResponse:
    """Handle unknown requested accounts (404)."""
    logger.warning(f"Account(s) not found: {exc.account_ids}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="AccountNotFoundError",
            message=str(exc),
            details={"account_ids": exc.account_ids},
        ).model_dump(),
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle generic not found errors (404)."""
    logger.warning(f"Not found: {exc}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="NotFoundError",
            message=str(exc),
            details={
                "resource_type": exc.resource_type,
                "resource_id": exc.resource_id,
            } if exc.resource_type else None,
        ).model_dump(),
    )


@app.exception_handler(InvalidGranularityError)
async def invalid_granularity_handler(
    request: Request, exc: InvalidGranularityError
) -> JSONResponse:
    """Handle unknown granularity strings (400)."""
    logger.warning(f"Invalid granularity: {exc.granularity}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="InvalidGranularityError",
            message=str(exc),
            details={
                "granularity": exc.granularity,
                "valid_options": [
                    "none", "full", "hourly", "daily", "weekly", "monthly", "yearly",
                    "<N>ms", "<N>s", "<N>m", "<N>h", "<N>d", "<N>w",
                ],
            },
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle validation errors (400), including malformed dates and amounts."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to our standard
    ErrorDetail format for API consistency.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        422: "ValidationError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors with consistent format.

    Converts the default 422 validation error to our ValidationErrorDetail format.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(portfolio_router)  # /portfolio/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """
    Liveness check.

    Returns the application name, version and default reporting currency.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__,
        "reporting_currency": settings.reporting_currency,
    }
