"""Storefront API application.

Checkout (order validation, audit trail, WhatsApp payment hand-off), admin
queries over the order audit log, health and metrics.

Run with:
    uvicorn storefront.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .audit.router import router as audit_router
from .audit.service import drain_pending_alerts
from .checkout.exceptions import OrderPersistenceError, OrderValidationFailed
from .checkout.router import router as checkout_router
from .config import Settings, get_settings
from .database import dispose_engine
from .domain.validation.messages import actionable_message, format_validation_errors, group_errors_by_field
from .observability.logging_config import configure_logging
from .observability.middleware import REQUEST_ID_HEADER, RequestIDMiddleware
from .observability.router import router as observability_router

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def _error(status_code: int, error: str, message: str, **fields: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **fields})


async def _order_rejected(request: Request, exc: OrderValidationFailed) -> JSONResponse:
    def issue(error):
        return {**error.to_dict(), "remediation": actionable_message(error)}

    result = exc.result
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "order_validation_failed",
        format_validation_errors(result.errors, actionable=True),
        errors=[issue(error) for error in result.errors],
        fields={
            name: [error.code for error in errors]
            for name, errors in group_errors_by_field(result.errors).items()
        },
        warnings=[issue(warning) for warning in result.warnings],
    )


async def _order_not_created(request: Request, exc: OrderPersistenceError) -> JSONResponse:
    return _error(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "order_not_created",
        "Your order could not be placed. Please try again.",
        order_number=exc.order_number,
    )


async def _malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Malformed request body on {request.method} {request.url.path}")
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        details=exc.errors(),
    )


async def _database_failure(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "database_error",
        "A database error occurred. Please try again later.",
    )


async def _unexpected_failure(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred. Please try again later.",
    )


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
        logger.info(f"Storefront API starting ({settings.ENVIRONMENT})")

        # Checkout and the server constraints keep separate delivery method lists
        mismatch = settings.delivery_method_mismatch()
        if mismatch:
            logger.warning(
                "Delivery method configuration mismatch: checkout offers "
                f"{mismatch.get('checkout_only', [])} which the server rejects; "
                f"server accepts {mismatch.get('server_only', [])} which checkout never offers"
            )

        yield

        await drain_pending_alerts()
        await dispose_engine()
        logger.info("Storefront API stopped")

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Logging is configured by the lifespan at startup."""
    settings = settings or get_settings()

    public_docs = settings.ENVIRONMENT != "production"
    application = FastAPI(
        title="Storefront API",
        description="Checkout, order validation and order audit trail",
        version=API_VERSION,
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
        openapi_url="/openapi.json" if public_docs else None,
        lifespan=_lifespan(settings),
    )

    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    application.add_exception_handler(OrderValidationFailed, _order_rejected)
    application.add_exception_handler(OrderPersistenceError, _order_not_created)
    application.add_exception_handler(RequestValidationError, _malformed_request)
    application.add_exception_handler(SQLAlchemyError, _database_failure)
    application.add_exception_handler(Exception, _unexpected_failure)

    application.include_router(observability_router)
    application.include_router(checkout_router)
    application.include_router(audit_router)

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {"name": "Storefront API", "version": API_VERSION, "status": "running"}

    return application


app = create_app()
