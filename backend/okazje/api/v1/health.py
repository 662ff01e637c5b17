"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from okazje.dependencies import get_db
from okazje.schemas import HealthCheckResponse
from okazje.services.cache_service import CacheService, get_cache

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """Return service health status.

    Checks connectivity to the database and Redis. Redis being down only
    degrades the distribution cache, so the status becomes "degraded".
    """
    services = {}

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services["database"] = db_status

    redis_status = "ok" if await cache.health_check() else "error: ping failed"
    services["redis"] = redis_status

    overall_status = "ok" if all(s == "ok" for s in services.values()) else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        redis=redis_status,
        services=services,
    )
