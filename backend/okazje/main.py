"""Okazje+ Personalization API -- FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from okazje.api.v1.router import api_v1_router
from okazje.config import settings
from okazje.core.exceptions import (
    NotFoundError,
    OkazjeException,
    UpstreamUnavailableError,
    ValidationError,
)
from okazje.core.logging import configure_logging
from okazje.db.session import engine
from okazje.models import Base
from okazje.schemas.common import ErrorDetail, ErrorResponse
from okazje.services.cache_service import get_cache_service

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    configure_logging(settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)

    logger.info("api_starting", environment=settings.ENVIRONMENT, debug=settings.DEBUG)

    # Auto-create tables on startup (safe for fresh deployments)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), exc_info=True)

    cache = get_cache_service()
    if await cache.health_check():
        logger.info("redis_connected")
    else:
        logger.warning("redis_unavailable", detail="distribution counts will not be cached")

    yield

    logger.info("api_shutting_down")
    await cache.close()
    await engine.dispose()


app = FastAPI(
    title="Okazje+ Personalization API",
    description="Interaction tracking, behavior scoring, user segmentation and personalized feeds",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, code: str, exc: OkazjeException, field: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=exc.message, field=field))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, "not_found", exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(422, "validation_error", exc, field=exc.field)


@app.exception_handler(UpstreamUnavailableError)
async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailableError):
    logger.error("upstream_unavailable", store=exc.store, path=request.url.path)
    return _error(503, "upstream_unavailable", exc)


# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Okazje+ Personalization API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
    }
