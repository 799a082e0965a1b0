"""Bounded, fixed-interval polling of a prediction until it finishes."""

import asyncio
from typing import Awaitable, Callable

from src.api.core.exceptions.base import (
    JobFailedError,
    PollTimeoutError,
    ProviderError,
)
from src.api.transform.schemas import PredictionJob, PredictionStatus
from src.modules.transform.infrastructure.fashn_client import FashnClient
from src.utils.logger import get_logger
from src.utils.settings.fashn import fashn_settings

logger = get_logger(__name__)


class ResultPoller:
    """Query a prediction's status until it completes, fails or runs out of attempts."""

    def __init__(
        self,
        client: FashnClient,
        max_attempts: int | None = None,
        interval_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.max_attempts = max_attempts or fashn_settings.POLL_MAX_ATTEMPTS
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else fashn_settings.POLL_INTERVAL_SECONDS
        )
        self.sleep = sleep

    async def poll(self, prediction_id: str) -> str:
        """Return the first output URL of a completed prediction.

        Raises:
            JobFailedError: the prediction failed, was canceled, or completed
                without output
            PollTimeoutError: max_attempts queries without a terminal status
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                job = await self.client.status(prediction_id)
            except ProviderError as e:
                # Transient; burns an attempt instead of aborting
                logger.warning(
                    "Status query failed",
                    prediction_id=prediction_id,
                    attempt=attempt,
                    error=e.message,
                )
            else:
                if job.is_terminal:
                    return self._finish(prediction_id, job, attempt)

            if attempt < self.max_attempts:
                await self.sleep(self.interval_seconds)

        logger.error(
            "Prediction polling timed out",
            prediction_id=prediction_id,
            attempts=self.max_attempts,
        )
        raise PollTimeoutError(details={"prediction_id": prediction_id})

    def _finish(self, prediction_id: str, job: PredictionJob, attempt: int) -> str:
        if job.status == PredictionStatus.COMPLETED.value and job.output:
            logger.info(
                "Prediction completed",
                prediction_id=prediction_id,
                attempts=attempt,
            )
            return job.output[0]

        if job.status == PredictionStatus.COMPLETED.value:
            logger.error(
                "Prediction completed without output",
                prediction_id=prediction_id,
            )
            raise JobFailedError(details={"prediction_id": prediction_id})

        logger.error(
            "Prediction did not succeed",
            prediction_id=prediction_id,
            status=job.status,
            provider_error=job.error,
        )
        raise JobFailedError(
            details={"prediction_id": prediction_id, "status": job.status}
        )
