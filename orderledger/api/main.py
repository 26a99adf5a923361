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

from orderledger.core.settings import get_app_settings
from orderledger.core.logging import configure_logging, correlation_id_var, workspace_id_var
from orderledger.db.run_migrations import main as run_alembic
from orderledger.db.seed import seed_all
from orderledger.db.session import open_document_store
from orderledger.db.store import BatchCommitError, StoreUnavailableError
from orderledger.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from orderledger.api.routes.maintenance import router as maintenance_router
from orderledger.api.routes.orders import router as orders_router
from orderledger.api.routes.reports import router as reports_router
from orderledger.api.routes.stats import router as stats_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probes."},
    {"name": "Stats", "description": "Dashboard statistics and duration windows."},
    {"name": "Orders", "description": "Per-order profit reconciliation."},
    {"name": "Maintenance", "description": "Bulk clearing of financial records."},
    {"name": "Reports", "description": "Exportable business reports (CSV/Excel/PDF)."},
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
    Enrich request context with correlation_id and workspace_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    workspace = request.headers.get("X-Workspace-ID")
    token_corr = correlation_id_var.set(corr)
    token_workspace = workspace_id_var.set(workspace)
    request.state.correlation_id = corr
    request.state.workspace_id = workspace

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)
        workspace_id_var.reset(token_workspace)

    response.headers["X-Correlation-ID"] = corr
    return response


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
        correlation_id=getattr(request.state, "correlation_id", None),
        workspace_id=getattr(request.state, "workspace_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


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
        details=exc.errors(),
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    """The document store was not initialised at startup."""
    logger.error("Document store unavailable for %s %s", request.method, request.url.path)
    return _build_error_response(
        request=request,
        status_code=503,
        error_type="store_unavailable",
        message=str(exc) or "Document store unavailable",
    )


@app.exception_handler(BatchCommitError)
async def batch_commit_error_handler(request: Request, exc: BatchCommitError):
    """A batch failed to commit; batches committed before it remain applied."""
    logger.error("Batch commit failed: %s", exc)
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="batch_commit_failed",
        message="A batch of writes failed to commit; earlier batches remain applied",
        details={"operations": exc.operations},
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
    Run migrations, open the document store and optionally seed demo data.

    The store handle lives on app.state for the lifetime of the process. If it
    cannot be opened the service still starts and store-backed endpoints
    answer 503.
    """
    backend = settings.DOCUMENT_STORE_BACKEND
    if backend == "postgres" and settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            # env.py drives its own event loop, so keep it off this one
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)

    store, engine = open_document_store(backend)
    app.state.document_store = store
    app.state.engine = engine

    if settings.AUTO_SEED and store is not None:
        try:
            logger.info("Seeding demo orders and ledger entries...")
            await seed_all(store)
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Dispose of the database engine, if one was opened."""
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        await engine.dispose()


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


api_v1.include_router(stats_router)
api_v1.include_router(orders_router)
api_v1.include_router(maintenance_router)
api_v1.include_router(reports_router)

app.include_router(api_v1)
