"""Global test configuration and fixtures for the Profile Transformer API."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.modules.avatar.resolver import AvatarResolver
from src.modules.rate_limit.facade import TransformRateLimiter
from src.modules.rate_limit.limiter import RateLimiter
from src.modules.transform.infrastructure.fashn_client import FashnClient
from src.modules.transform.poller import ResultPoller
from src.modules.verification.turnstile import TurnstileVerifier
from tests.utils.fake_redis import FakeRedis


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def rate_limiter(fake_redis: FakeRedis) -> RateLimiter:
    return RateLimiter(fake_redis)


@pytest.fixture
def transform_rate_limiter(rate_limiter: RateLimiter) -> TransformRateLimiter:
    return TransformRateLimiter(rate_limiter)


@pytest.fixture
def avatar_resolver() -> AvatarResolver:
    return AvatarResolver(proxy_url="https://proxy", social_site_url="https://x.com")


@pytest.fixture
def turnstile_verifier() -> TurnstileVerifier:
    return TurnstileVerifier(
        secret_key="test-secret", verify_url="https://turnstile.test/siteverify"
    )


@pytest.fixture
def fashn_client() -> FashnClient:
    return FashnClient(api_key="test-key", base_url="https://api.fashn.test/v1")


@pytest.fixture
def sleeps() -> list[float]:
    """Intervals the poller asked to sleep for."""
    return []


@pytest.fixture
def result_poller(fashn_client: FashnClient, sleeps: list[float]) -> ResultPoller:
    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return ResultPoller(
        fashn_client, max_attempts=30, interval_seconds=2.0, sleep=record_sleep
    )


@pytest_asyncio.fixture
async def app() -> AsyncGenerator[FastAPI, None]:
    """Create FastAPI application with lifespan manager for testing."""
    from src.main import app

    async with LifespanManager(app):
        yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client for testing public endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-profile-transformer",
    ) as client:
        yield client
