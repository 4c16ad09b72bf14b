"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.storage import get_redis

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check for load balancer (no upstream/Redis check)."""
    return {
        "status": "ok",
        "service": "storefront-access",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check. Redis is only checked when it backs the pending setup slot."""
    checks = {
        "service": "ok",
        "upstream": "ok" if settings.api_base_url.strip() else "not configured",
        "redis": "not used",
    }
    overall_healthy = bool(settings.api_base_url.strip())

    if settings.pending_setup_backend == "redis":
        try:
            redis_client = await get_redis()
            await redis_client.ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = f"error: {str(e)[:100]}"
            overall_healthy = False

    return JSONResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "storefront-access",
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
