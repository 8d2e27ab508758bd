"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shopdesk.api.routers import (
    audit_logs_router,
    cash_sessions_router,
    products_router,
    sales_router,
    users_router,
)
from shopdesk.app_context import get_app_context
from shopdesk.config.logging_config import setup_logging
from shopdesk.config.settings import get_settings
from shopdesk.core.exceptions import (
    AppError,
    AuthorizationError,
    NotFoundError,
    RemoteDataError,
    RemoteTimeoutError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    ctx = get_app_context()
    ctx.initialize()
    yield
    # Shutdown: let pending audit writes finish
    ctx.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Retail and repair-shop back office: cash sessions, sales, users and audit",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(cash_sessions_router)
app.include_router(users_router)
app.include_router(audit_logs_router)
app.include_router(products_router)
app.include_router(sales_router)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, RemoteTimeoutError):
        return 504
    if isinstance(exc, RemoteDataError):
        return 502
    return 400


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = _status_for(exc)
    message = exc.message
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        if status_code == 502:
            # Backend details stay in the log
            message = "Unexpected error talking to the data service"
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
