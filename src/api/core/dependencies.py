from typing import Annotated

from fastapi import Depends, Request
import redis.asyncio as redis

from src.modules.avatar.resolver import AvatarResolver, get_avatar_resolver
from src.modules.rate_limit.facade import TransformRateLimiter
from src.modules.rate_limit.limiter import RateLimiter
from src.modules.transform.backends import TransformationBackend, create_backend
from src.modules.transform.infrastructure.fashn_client import (
    FashnClient,
    get_fashn_client,
)
from src.modules.transform.poller import ResultPoller
from src.modules.transform.service import TransformService
from src.modules.verification.turnstile import (
    TurnstileVerifier,
    get_turnstile_verifier,
)
from src.redis.client import get_redis_client
from src.utils.logger import get_client_ip


async def get_rate_limit_service(
    redis_client: redis.Redis = Depends(get_redis_client),
) -> RateLimiter:
    """Get rate limit service."""
    return RateLimiter(redis_client)


async def get_transform_rate_limiter(
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limit_service)],
) -> TransformRateLimiter:
    """Get the per-client + daily transformation quota facade."""
    return TransformRateLimiter(rate_limiter)


async def get_result_poller(
    client: Annotated[FashnClient, Depends(get_fashn_client)],
) -> ResultPoller:
    return ResultPoller(client)


async def get_transformation_backend(
    client: Annotated[FashnClient, Depends(get_fashn_client)],
    poller: Annotated[ResultPoller, Depends(get_result_poller)],
) -> TransformationBackend:
    """Get the submission strategy selected by TRANSFORM_MODE."""
    return create_backend(client, poller)


async def get_transform_service(
    verifier: Annotated[TurnstileVerifier, Depends(get_turnstile_verifier)],
    rate_limiter: Annotated[TransformRateLimiter, Depends(get_transform_rate_limiter)],
    backend: Annotated[TransformationBackend, Depends(get_transformation_backend)],
) -> TransformService:
    """Get the gated transformation service."""
    return TransformService(verifier, rate_limiter, backend)


async def get_request_client_ip(request: Request) -> str:
    return get_client_ip(request)


AvatarResolverDep = Annotated[AvatarResolver, Depends(get_avatar_resolver)]
FashnClientDep = Annotated[FashnClient, Depends(get_fashn_client)]
ResultPollerDep = Annotated[ResultPoller, Depends(get_result_poller)]
TransformServiceDep = Annotated[TransformService, Depends(get_transform_service)]
ClientIpDep = Annotated[str, Depends(get_request_client_ip)]
