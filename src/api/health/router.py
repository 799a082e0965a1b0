"""Health check endpoints for debugging and monitoring."""

from fastapi import APIRouter, Depends

from src.modules.health.service import HealthService, OverallHealthStatus
from src.redis.client import get_redis_client
import redis.asyncio as redis

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(
    redis: redis.Redis = Depends(get_redis_client),
) -> OverallHealthStatus:
    """Health of the rate-limit store."""
    health_service = HealthService(redis)
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "profile-transformer-api"}
