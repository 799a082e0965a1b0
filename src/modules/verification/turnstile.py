"""Server-side validation of Cloudflare Turnstile tokens."""

import asyncio
from typing import Any

import aiohttp

from src.api.core.exceptions.base import VerificationFailedError
from src.utils.logger import get_logger
from src.utils.settings.turnstile import turnstile_settings

logger = get_logger(__name__)


class TurnstileVerifier:
    """Validate one-time bot-challenge tokens against the siteverify endpoint."""

    def __init__(
        self,
        secret_key: str | None = None,
        verify_url: str | None = None,
        timeout: float | None = None,
    ):
        self.secret_key = secret_key or turnstile_settings.TURNSTILE_SECRET_KEY
        self.verify_url = verify_url or turnstile_settings.TURNSTILE_VERIFY_URL
        self.timeout = timeout or turnstile_settings.TURNSTILE_TIMEOUT

    async def verify(self, token: str | None, remote_ip: str | None = None) -> None:
        """Raise VerificationFailedError unless the token validates.

        Turnstile tokens are single use: a token that already went through
        siteverify comes back as "timeout-or-duplicate".
        """
        if not token:
            logger.info("Missing verification token")
            raise VerificationFailedError(details={"reason": "missing-input-response"})

        try:
            result = await self._post_siteverify(token, remote_ip)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Turnstile verification request failed: {e}")
            raise VerificationFailedError()

        if not isinstance(result, dict):
            logger.error("Siteverify returned a non-object body", body=result)
            raise VerificationFailedError()

        if not result.get("success"):
            error_codes = result.get("error-codes") or []
            logger.info("Verification token rejected", error_codes=error_codes)
            raise VerificationFailedError(details={"error_codes": error_codes})

    async def _post_siteverify(self, token: str, remote_ip: str | None) -> Any:
        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.verify_url,
                data=form,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                response.raise_for_status()
                return await response.json(content_type=None)


async def get_turnstile_verifier() -> TurnstileVerifier:
    """Get Turnstile verifier for dependency injection."""
    return TurnstileVerifier()
