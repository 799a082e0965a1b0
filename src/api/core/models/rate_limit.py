"""Rate limiting types and models."""

from enum import Enum

from pydantic import BaseModel

from src.api.core.constants import RATE_LIMIT_PREFIX


class RateLimitScope(str, Enum):
    """Windows consulted before a transformation is submitted."""

    CLIENT = "client"
    DAILY = "daily"


# Cache keys: {prefix}:{scope}:{identifier}
# Examples:
# - @fashn-ai/avatar:client:transform-image:1.2.3.4
# - @fashn-ai/avatar:daily:transform-image-daily


class ClientIdentifier(BaseModel):
    """Identifier of one rate-limit window."""

    scope: RateLimitScope
    client_id: str
    prefix: str = RATE_LIMIT_PREFIX

    def to_cache_key(self) -> str:
        """Generate Redis cache key for this window."""
        return f"{self.prefix}:{self.scope.value}:{self.client_id}"

    def __str__(self) -> str:
        """String representation for logging."""
        return f"{self.scope.value}:{self.client_id}"


class RateLimitResult(BaseModel):
    """Result of rate limit check."""

    is_allowed: bool
    current_count: int
    time_to_reset: int | None
    client_identifier: ClientIdentifier
    limit: int
    window_seconds: int


class RateLimitConfig(BaseModel):
    """Quota of one window."""

    limit: int
    window_seconds: int
    scope: RateLimitScope


class RateLimitDecision(BaseModel):
    """Combined verdict of the per-client and daily windows."""

    allowed: bool
    denied_scope: RateLimitScope | None = None
    client: RateLimitResult
    daily: RateLimitResult

    @property
    def retry_after(self) -> int | None:
        """Seconds until the denying window frees a slot."""
        if self.denied_scope is None:
            return None
        result = self.daily if self.denied_scope == RateLimitScope.DAILY else self.client
        return result.time_to_reset or result.window_seconds
