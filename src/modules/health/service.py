import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

import redis.asyncio as redis

from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitScope,
)
from src.modules.rate_limit.limiter import RateLimiter
from src.utils.logger import get_logger


logger = get_logger(__name__)

HEALTH_CHECK_LIMIT = 3
HEALTH_CHECK_WINDOW_SECONDS = 60


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Checks on the rate-limit counter store."""

    def __init__(self, redis: redis.Redis):
        self.redis = redis

    async def check_redis_health(self) -> HealthCheckResult:
        """Redis connection and functionality health check."""
        try:
            test_key = "health_check_test"

            await self.redis.ping()
            await self.redis.setex(test_key, 10, "test_data")
            cached_value = await self.redis.get(test_key)
            await self.redis.delete(test_key)

            return HealthCheckResult(
                service="redis",
                status="healthy",
                connected=True,
                details={"cache_test_passed": cached_value is not None},
            )
        except Exception as e:
            logger.error(f"Redis health check error: {e}")
            return HealthCheckResult(
                service="redis",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def check_rate_limit_health(self) -> HealthCheckResult:
        """Sliding window sanity check on a throwaway identifier."""
        try:
            rate_limiter = RateLimiter(self.redis)
            test_client = ClientIdentifier(
                scope=RateLimitScope.CLIENT,
                client_id="health_check_test",
            )

            # Fill the window and go one over; the last request must be denied
            allowed = []
            for _ in range(HEALTH_CHECK_LIMIT + 1):
                result = await rate_limiter.is_allowed(
                    test_client, HEALTH_CHECK_LIMIT, HEALTH_CHECK_WINDOW_SECONDS
                )
                allowed.append(result.is_allowed)
            await self.redis.delete(test_client.to_cache_key())

            last_request_blocked = not allowed[-1]
            all_before_limit_allowed = all(allowed[:HEALTH_CHECK_LIMIT])
            rate_limiting_works = last_request_blocked and all_before_limit_allowed

            return HealthCheckResult(
                service="rate_limit",
                status="healthy" if rate_limiting_works else "degraded",
                connected=True,
                details={
                    "limit": HEALTH_CHECK_LIMIT,
                    "window_seconds": HEALTH_CHECK_WINDOW_SECONDS,
                    "rate_limiting_works": rate_limiting_works,
                    "last_request_blocked": last_request_blocked,
                    "all_before_limit_allowed": all_before_limit_allowed,
                },
            )
        except Exception as e:
            logger.error(f"Rate limit health check error: {e}")
            return HealthCheckResult(
                service="rate_limit",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        """Run all health checks in parallel and return overall status."""
        results = await asyncio.gather(
            self.check_redis_health(),
            self.check_rate_limit_health(),
        )

        services = {}
        overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
        for service_result in results:
            if service_result.status == "unhealthy":
                overall_status = "unhealthy"
            elif service_result.status == "degraded" and overall_status == "healthy":
                overall_status = "degraded"
            services[service_result.service] = service_result

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
