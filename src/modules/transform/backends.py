"""Submission strategies for the transformation provider.

``sync`` deployments wait for the image server-side; ``async`` deployments
hand the prediction id back and let the caller poll.
"""

import random
from abc import ABC, abstractmethod
from enum import Enum

from src.api.core.constants import MAX_SEED, MIN_SEED
from src.api.core.exceptions.base import InvalidInputError, ProviderError
from src.api.core.messages import MessageCode
from src.api.transform.schemas import FashnInputs, Submission
from src.modules.transform.infrastructure.fashn_client import FashnClient
from src.modules.transform.poller import ResultPoller
from src.utils.logger import get_logger
from src.utils.settings.fashn import fashn_settings

logger = get_logger(__name__)


class TransformMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


def generate_seed() -> int:
    """Uniform over the full unsigned 32-bit range, both ends included."""
    return random.randint(MIN_SEED, MAX_SEED)


def build_inputs(image_url: str, aspect_ratio: str | None = None) -> FashnInputs:
    return FashnInputs(
        face_image=image_url,
        seed=generate_seed(),
        aspect_ratio=aspect_ratio or fashn_settings.FASHN_ASPECT_RATIO,
    )


class TransformationBackend(ABC):
    """Submit an avatar to the provider and report what came back."""

    mode: TransformMode

    def __init__(
        self,
        client: FashnClient,
        model_name: str | None = None,
        aspect_ratio: str | None = None,
    ):
        self.client = client
        self.model_name = model_name or fashn_settings.FASHN_MODEL_NAME
        self.aspect_ratio = aspect_ratio or fashn_settings.FASHN_ASPECT_RATIO

    async def _start(self, image_url: str) -> dict:
        if not image_url:
            raise InvalidInputError(MessageCode.IMAGE_URL_REQUIRED)

        inputs = build_inputs(image_url, self.aspect_ratio)
        logger.info(
            "Submitting transformation",
            model_name=self.model_name,
            seed=inputs.seed,
            aspect_ratio=inputs.aspect_ratio,
        )
        return await self.client.run(self.model_name, inputs.model_dump())

    @abstractmethod
    async def submit(self, image_url: str) -> Submission: ...


class SubmitAndWaitBackend(TransformationBackend):
    """Block until the provider has produced the image."""

    mode = TransformMode.SYNC

    def __init__(
        self,
        client: FashnClient,
        poller: ResultPoller,
        model_name: str | None = None,
        aspect_ratio: str | None = None,
    ):
        super().__init__(client, model_name, aspect_ratio)
        self.poller = poller

    async def submit(self, image_url: str) -> Submission:
        return await self.submit_and_wait(image_url)

    async def submit_and_wait(self, image_url: str) -> Submission:
        data = await self._start(image_url)

        output = data.get("output")
        if output:
            return Submission(output_url=output[0])

        prediction_id = data.get("id")
        if not prediction_id:
            logger.error("Provider returned neither output nor id", keys=list(data))
            raise ProviderError(MessageCode.TRANSFORM_START_FAILED)

        return Submission(output_url=await self.poller.poll(str(prediction_id)))


class SubmitAndTrackBackend(TransformationBackend):
    """Return as soon as the provider has accepted the job."""

    mode = TransformMode.ASYNC

    async def submit(self, image_url: str) -> Submission:
        return await self.submit_and_track(image_url)

    async def submit_and_track(self, image_url: str) -> Submission:
        data = await self._start(image_url)

        prediction_id = data.get("id")
        if not prediction_id:
            logger.error("Provider returned no prediction id", keys=list(data))
            raise ProviderError(MessageCode.TRANSFORM_START_FAILED)

        return Submission(prediction_id=str(prediction_id))


def create_backend(
    client: FashnClient,
    poller: ResultPoller,
    mode: TransformMode | str | None = None,
) -> TransformationBackend:
    """Pick the submission strategy configured by TRANSFORM_MODE."""
    mode = TransformMode(mode or fashn_settings.TRANSFORM_MODE)
    if mode == TransformMode.SYNC:
        return SubmitAndWaitBackend(client, poller)
    return SubmitAndTrackBackend(client)
