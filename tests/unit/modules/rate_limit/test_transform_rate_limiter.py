"""Tests for the per-client + daily quota facade."""

from unittest.mock import AsyncMock

import pytest

from src.api.core.exceptions.base import DailyRateLimitedError, RateLimitedError
from src.api.core.messages import MessageCode
from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitConfig,
    RateLimitResult,
    RateLimitScope,
)
from src.modules.rate_limit.facade import TransformRateLimiter
from src.modules.rate_limit.limiter import RateLimiter


def _facade(rate_limiter: RateLimiter, client_limit: int, daily_limit: int):
    return TransformRateLimiter(
        rate_limiter,
        client_config=RateLimitConfig(
            limit=client_limit, window_seconds=600, scope=RateLimitScope.CLIENT
        ),
        daily_config=RateLimitConfig(
            limit=daily_limit, window_seconds=86400, scope=RateLimitScope.DAILY
        ),
    )


def _result(scope: RateLimitScope, allowed: bool) -> RateLimitResult:
    return RateLimitResult(
        is_allowed=allowed,
        current_count=1,
        time_to_reset=None if allowed else 30,
        client_identifier=ClientIdentifier(scope=scope, client_id="x"),
        limit=1,
        window_seconds=600,
    )


@pytest.mark.asyncio
async def test_defaults_match_published_quotas(transform_rate_limiter):
    assert transform_rate_limiter.client_config.limit == 5
    assert transform_rate_limiter.client_config.window_seconds == 600
    assert transform_rate_limiter.daily_config.limit == 100
    assert transform_rate_limiter.daily_config.window_seconds == 86400


@pytest.mark.asyncio
async def test_allows_when_both_windows_have_room(rate_limiter):
    decision = await _facade(rate_limiter, 5, 100).check("1.2.3.4")

    assert decision.allowed is True
    assert decision.denied_scope is None
    assert decision.retry_after is None


@pytest.mark.asyncio
async def test_client_window_is_keyed_by_ip(rate_limiter, fake_redis):
    await _facade(rate_limiter, 5, 100).check("1.2.3.4")

    assert "@fashn-ai/avatar:client:transform-image:1.2.3.4" in fake_redis.zsets
    assert "@fashn-ai/avatar:daily:transform-image-daily" in fake_redis.zsets


@pytest.mark.asyncio
async def test_missing_ip_falls_back_to_localhost(rate_limiter, fake_redis):
    await _facade(rate_limiter, 5, 100).check(None)

    assert "@fashn-ai/avatar:client:transform-image:127.0.0.1" in fake_redis.zsets


@pytest.mark.asyncio
async def test_client_denial_reports_client_scope(rate_limiter):
    facade = _facade(rate_limiter, 1, 100)
    await facade.check("1.2.3.4")

    decision = await facade.check("1.2.3.4")

    assert decision.allowed is False
    assert decision.denied_scope == RateLimitScope.CLIENT
    with pytest.raises(RateLimitedError) as exc_info:
        await facade.enforce("1.2.3.4")
    assert exc_info.value.message_code == MessageCode.RATE_LIMIT_EXCEEDED
    assert exc_info.value.message == "Rate limit exceeded. Please try again later."
    assert exc_info.value.status_code == 429
    assert "Retry-After" in exc_info.value.headers


@pytest.mark.asyncio
async def test_daily_denial_is_global_across_clients(rate_limiter):
    facade = _facade(rate_limiter, 5, 1)
    await facade.check("1.2.3.4")

    decision = await facade.check("5.6.7.8")

    assert decision.denied_scope == RateLimitScope.DAILY


@pytest.mark.asyncio
async def test_daily_denial_takes_priority_over_client_denial(rate_limiter):
    facade = _facade(rate_limiter, 1, 1)
    await facade.check("1.2.3.4")

    with pytest.raises(DailyRateLimitedError) as exc_info:
        await facade.enforce("1.2.3.4")

    assert exc_info.value.message_code == MessageCode.DAILY_RATE_LIMIT_EXCEEDED
    assert exc_info.value.message == "Daily rate limit exceeded. Please try again tomorrow."


@pytest.mark.asyncio
@pytest.mark.parametrize("client_allowed", [True, False])
async def test_both_windows_consulted_on_every_attempt(client_allowed):
    rate_limiter = AsyncMock(spec=RateLimiter)
    rate_limiter.is_allowed.side_effect = [
        _result(RateLimitScope.CLIENT, client_allowed),
        _result(RateLimitScope.DAILY, False),
    ]

    decision = await TransformRateLimiter(rate_limiter).check("1.2.3.4")

    assert rate_limiter.is_allowed.await_count == 2
    assert decision.denied_scope == RateLimitScope.DAILY


@pytest.mark.asyncio
async def test_daily_window_consulted_when_client_denies():
    rate_limiter = AsyncMock(spec=RateLimiter)
    rate_limiter.is_allowed.side_effect = [
        _result(RateLimitScope.CLIENT, False),
        _result(RateLimitScope.DAILY, True),
    ]

    decision = await TransformRateLimiter(rate_limiter).check("1.2.3.4")

    assert rate_limiter.is_allowed.await_count == 2
    assert decision.denied_scope == RateLimitScope.CLIENT
    assert decision.retry_after == 30
