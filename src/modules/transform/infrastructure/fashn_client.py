"""Client for the FASHN prediction API."""

import asyncio
from typing import Any

import aiohttp
from pydantic import ValidationError

from src.api.core.exceptions.base import InvalidInputError, ProviderError
from src.api.core.messages import MessageCode
from src.api.transform.schemas import PredictionJob
from src.utils.logger import get_logger
from src.utils.settings.fashn import fashn_settings

logger = get_logger(__name__)


class FashnClient:
    """Thin async wrapper over the /run and /status endpoints."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ):
        self.api_key = api_key or fashn_settings.FASHN_API_KEY
        self.url = (base_url or fashn_settings.FASHN_API_URL).rstrip("/")
        self.timeout = timeout or fashn_settings.FASHN_TIMEOUT

    async def run(self, model_name: str, inputs: dict[str, Any]) -> dict[str, Any]:
        """Start a prediction; returns the provider payload ({"id": ...} or inline output)."""
        status_code, data = await self._request(
            "POST",
            "/run",
            json={"model_name": model_name, "inputs": inputs},
            failure_code=MessageCode.TRANSFORM_START_FAILED,
        )
        if not isinstance(data, dict):
            logger.error("Prediction run returned a non-object body", body=data)
            raise ProviderError(MessageCode.TRANSFORM_START_FAILED)
        if data.get("error"):
            logger.error("Prediction run rejected", provider_error=data.get("error"))
            raise ProviderError(MessageCode.TRANSFORM_START_FAILED)
        return data

    async def status(self, prediction_id: str) -> PredictionJob:
        """Fetch the current status of a prediction."""
        if not prediction_id:
            raise InvalidInputError(MessageCode.PREDICTION_ID_REQUIRED)

        _, data = await self._request(
            "GET",
            f"/status/{prediction_id}",
            failure_code=MessageCode.STATUS_CHECK_FAILED,
        )
        try:
            return PredictionJob.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed status payload for {prediction_id}: {e}")
            raise ProviderError(MessageCode.STATUS_CHECK_FAILED)

    async def _request(
        self,
        method: str,
        path: str,
        failure_code: MessageCode,
        json: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with aiohttp.ClientSession() as session:
            try:
                async with session.request(
                    method,
                    f"{self.url}{path}",
                    json=json,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.error(
                            "FASHN API error",
                            path=path,
                            status_code=response.status,
                            body=body,
                        )
                        # Mirror the upstream status, not its body
                        raise ProviderError(failure_code, status_code=response.status)
                    return response.status, await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.error(f"FASHN request {method} {path} failed: {e}")
                raise ProviderError(failure_code)


async def get_fashn_client() -> FashnClient:
    """Get FASHN client for dependency injection."""
    return FashnClient()
