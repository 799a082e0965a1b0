"""The gated transformation action: verify, rate limit, submit."""

from src.api.core.exceptions.base import InvalidInputError
from src.api.core.messages import MessageCode
from src.api.transform.schemas import TransformImageResult
from src.modules.rate_limit.facade import TransformRateLimiter
from src.modules.transform.backends import TransformationBackend
from src.modules.verification.turnstile import TurnstileVerifier
from src.utils.logger import get_logger

logger = get_logger(__name__)


class TransformService:
    """Run one transformation attempt behind the bot check and both quotas."""

    def __init__(
        self,
        verifier: TurnstileVerifier,
        rate_limiter: TransformRateLimiter,
        backend: TransformationBackend,
    ):
        self.verifier = verifier
        self.rate_limiter = rate_limiter
        self.backend = backend

    async def transform_image(
        self,
        image_url: str | None,
        turnstile_token: str | None,
        client_ip: str | None = None,
    ) -> TransformImageResult:
        """Submit an avatar for transformation.

        Order matters: a failed bot check never touches the quotas, and a
        denied quota never reaches the provider.
        """
        if not image_url:
            raise InvalidInputError(MessageCode.IMAGE_URL_REQUIRED)

        await self.verifier.verify(turnstile_token, remote_ip=client_ip)
        await self.rate_limiter.enforce(client_ip)

        submission = await self.backend.submit(image_url)
        if submission.prediction_id:
            logger.info("Transformation queued", prediction_id=submission.prediction_id)
            return TransformImageResult(id=submission.prediction_id)

        logger.info("Transformation completed")
        return TransformImageResult(image=submission.output_url)
