"""Two-tier quota check in front of the transformation provider."""

from src.api.core.constants import (
    DEFAULT_CLIENT_IP,
    TRANSFORM_DAILY_RATE_LIMIT,
    TRANSFORM_DAILY_WINDOW_SECONDS,
    TRANSFORM_IP_RATE_LIMIT,
    TRANSFORM_IP_WINDOW_SECONDS,
    RateLimitKeys,
)
from src.api.core.exceptions.base import DailyRateLimitedError, RateLimitedError
from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitConfig,
    RateLimitDecision,
    RateLimitScope,
)
from src.modules.rate_limit.limiter import RateLimiter
from src.utils.logger import get_logger

logger = get_logger(__name__)


class TransformRateLimiter:
    """Per-client and global daily sliding windows for transformation requests.

    Both windows are consumed on every attempt. When both deny, the daily
    window is the one reported.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        client_config: RateLimitConfig | None = None,
        daily_config: RateLimitConfig | None = None,
    ):
        self.rate_limiter = rate_limiter
        self.client_config = client_config or RateLimitConfig(
            limit=TRANSFORM_IP_RATE_LIMIT,
            window_seconds=TRANSFORM_IP_WINDOW_SECONDS,
            scope=RateLimitScope.CLIENT,
        )
        self.daily_config = daily_config or RateLimitConfig(
            limit=TRANSFORM_DAILY_RATE_LIMIT,
            window_seconds=TRANSFORM_DAILY_WINDOW_SECONDS,
            scope=RateLimitScope.DAILY,
        )

    async def check(self, client_ip: str | None) -> RateLimitDecision:
        """Consume one slot from each window and combine the verdicts."""
        client = ClientIdentifier(
            scope=RateLimitScope.CLIENT,
            client_id=RateLimitKeys.transform_ip(client_ip or DEFAULT_CLIENT_IP),
        )
        daily = ClientIdentifier(
            scope=RateLimitScope.DAILY,
            client_id=RateLimitKeys.transform_daily(),
        )

        client_result = await self.rate_limiter.is_allowed(
            client, self.client_config.limit, self.client_config.window_seconds
        )
        daily_result = await self.rate_limiter.is_allowed(
            daily, self.daily_config.limit, self.daily_config.window_seconds
        )

        denied_scope = None
        if not daily_result.is_allowed:
            denied_scope = RateLimitScope.DAILY
        elif not client_result.is_allowed:
            denied_scope = RateLimitScope.CLIENT

        return RateLimitDecision(
            allowed=denied_scope is None,
            denied_scope=denied_scope,
            client=client_result,
            daily=daily_result,
        )

    async def enforce(self, client_ip: str | None) -> RateLimitDecision:
        """Like check(), but raise the matching error when denied."""
        decision = await self.check(client_ip)
        if decision.allowed:
            return decision

        headers = {"Retry-After": str(decision.retry_after)}
        if decision.denied_scope == RateLimitScope.DAILY:
            logger.warning(
                "Daily transformation limit exceeded",
                current_count=decision.daily.current_count,
                limit=decision.daily.limit,
            )
            raise DailyRateLimitedError(
                details={"retry_after": decision.retry_after}, headers=headers
            )

        logger.warning(
            "Client transformation limit exceeded",
            client=str(decision.client.client_identifier),
            current_count=decision.client.current_count,
            limit=decision.client.limit,
        )
        raise RateLimitedError(
            details={"retry_after": decision.retry_after}, headers=headers
        )
