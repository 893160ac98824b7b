from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from packworkx.core.errors import PackWorkXError
from packworkx.core.logging import company_id_var, configure_logging, correlation_id_var
from packworkx.core.settings import get_app_settings
from packworkx.db.run_migrations import main as run_alembic
from packworkx.db.seed import seed_all
from packworkx.db.session import create_schema
from packworkx.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from packworkx.api.routes.auth import router as auth_router
from packworkx.api.routes.users import router as users_router
from packworkx.api.routes.roles import router as roles_router
from packworkx.api.routes.companies import router as companies_router
# Domain routers
from packworkx.api.routes.clients import router as clients_router
from packworkx.api.routes.items import router as items_router
from packworkx.api.routes.purchase_orders import router as purchase_orders_router
from packworkx.api.routes.grns import router as grns_router
from packworkx.api.routes.purchase_returns import router as purchase_returns_router
from packworkx.api.routes.inventory import router as inventory_router
from packworkx.api.routes.stock_adjustments import router as stock_adjustments_router
from packworkx.api.routes.skus import router as skus_router
from packworkx.api.routes.work_orders import router as work_orders_router
from packworkx.api.routes.invoices import router as invoices_router
from packworkx.api.routes.notes import credit_router, debit_router
from packworkx.api.routes.machines import router as machines_router
from packworkx.api.routes.reports import router as reports_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Authentication and token endpoints."},
    {"name": "Companies", "description": "Company registration, profile and document numbering."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Roles", "description": "Role administration endpoints."},
    {"name": "Clients", "description": "Customers, suppliers and their wallets."},
    {"name": "Items", "description": "Item master: reels, glues, pins, finished goods."},
    {"name": "Purchase Orders", "description": "Purchase orders, approvals and supplier payments."},
    {"name": "Goods Receipt", "description": "Goods received notes reconciled against purchase orders."},
    {"name": "Purchase Returns", "description": "Accepted goods returned to suppliers against their debit wallet."},
    {"name": "Inventory", "description": "Stock rows, stock summary and stock adjustments."},
    {"name": "SKUs", "description": "Customer box specifications."},
    {"name": "Work Orders", "description": "Production orders made in house, outsourced or bought in."},
    {"name": "Invoices", "description": "Work-order invoices and partial payments."},
    {"name": "Credit Notes", "description": "Credit notes feeding client credit wallets."},
    {"name": "Debit Notes", "description": "Debit notes feeding supplier debit wallets."},
    {"name": "Machines", "description": "Machines, processes and dynamic process fields."},
    {"name": "Reports", "description": "Exportable business reports (CSV/Excel/PDF) and dashboard."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Bind a correlation id to the request for logging and error responses.
    Adds 'X-Correlation-ID' to every response.

    company_id is bound later, when the bearer token is resolved.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    token_company = company_id_var.set(None)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = corr
        return response
    finally:
        correlation_id_var.reset(token_corr)
        company_id_var.reset(token_company)


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None) or correlation_id_var.get(),
        company_id=company_id_var.get(),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    headers = {"X-Correlation-ID": err.correlation_id} if err.correlation_id else None
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"), headers=headers)


@app.exception_handler(PackWorkXError)
async def domain_exception_handler(request: Request, exc: PackWorkXError):
    """Translate domain errors raised by services into the error envelope."""
    if exc.status_code >= 409:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.code,
        message=exc.message,
        details=jsonable_encoder(exc.details),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=jsonable_encoder(exc.errors()),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


@app.on_event("startup")
async def on_startup() -> None:
    """
    Prepare the database on service startup.

    Migrations run in a worker thread because the Alembic environment drives its own event loop.
    Schema creation and seeding are opt-in via settings.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)
            # Do not crash the app in case of transient DB issues; rely on retries or later readiness checks.

    if settings.CREATE_SCHEMA_ON_STARTUP:
        logger.info("Creating missing tables from model metadata")
        await create_schema()

    if settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            await seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


for _router in (
    auth_router,
    companies_router,
    users_router,
    roles_router,
    clients_router,
    items_router,
    purchase_orders_router,
    grns_router,
    purchase_returns_router,
    inventory_router,
    stock_adjustments_router,
    skus_router,
    work_orders_router,
    invoices_router,
    credit_router,
    debit_router,
    machines_router,
    reports_router,
):
    api_v1.include_router(_router)

# Attach api_v1 to app
app.include_router(api_v1)
