"""Transformation API schemas (provider payloads, requests and results)."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class PredictionStatus(str, Enum):
    """Prediction lifecycle as reported by the provider."""

    STARTING = "starting"
    IN_QUEUE = "in_queue"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


TERMINAL_PREDICTION_STATUSES = frozenset(
    {PredictionStatus.COMPLETED, PredictionStatus.FAILED, PredictionStatus.CANCELED}
)


class PredictionJob(BaseModel):
    """Status payload of a prediction; unknown provider fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str
    output: list[str] | None = None
    error: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_PREDICTION_STATUSES}


class FashnInputs(BaseModel):
    face_image: str
    seed: int
    aspect_ratio: str


class Submission(BaseModel):
    """Outcome of submitting a transformation: a finished image or a job to track."""

    model_config = ConfigDict(frozen=True)

    output_url: str | None = None
    prediction_id: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "Submission":
        if (self.output_url is None) == (self.prediction_id is None):
            raise ValueError("Submission needs exactly one of output_url or prediction_id")
        return self


class RunPredictionRequest(BaseModel):
    image_url: str | None = None
    model_name: str | None = None


class TransformImageRequest(BaseModel):
    image_url: str | None = None
    turnstile_token: str | None = None


class TransformImageResult(BaseModel):
    """Either the generated image (sync) or the prediction id to poll (async)."""

    image: str | None = None
    id: str | None = None


class ProfileTransformationRequest(BaseModel):
    handle: str | None = None
    turnstile_token: str | None = None
