"""Client-observable state of one profile transformation."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from src.api.core.constants import DOWNLOAD_FILENAME_SUFFIX, SHARE_TEXT, SHARE_TITLE


class TransformationStatus(str, Enum):
    IDLE = "idle"
    FETCHING_PROFILE = "fetching-profile"
    TRANSFORMING = "transforming"
    POLLING = "polling"
    COMPLETE = "complete"
    ERROR = "error"


S = TransformationStatus

ALLOWED_TRANSITIONS: dict[TransformationStatus, frozenset[TransformationStatus]] = {
    S.IDLE: frozenset({S.FETCHING_PROFILE, S.ERROR}),
    S.FETCHING_PROFILE: frozenset({S.TRANSFORMING, S.ERROR}),
    S.TRANSFORMING: frozenset({S.POLLING, S.COMPLETE, S.ERROR}),
    S.POLLING: frozenset({S.COMPLETE, S.ERROR}),
    S.COMPLETE: frozenset({S.IDLE}),
    S.ERROR: frozenset({S.IDLE}),
}

LOADING_STATUSES = frozenset({S.FETCHING_PROFILE, S.TRANSFORMING, S.POLLING})


class InvalidTransitionError(ValueError):
    def __init__(self, source: TransformationStatus, target: TransformationStatus):
        super().__init__(f"Cannot move from {source.value} to {target.value}")
        self.source = source
        self.target = target


class SharePayload(BaseModel):
    title: str
    text: str
    url: str


class ExportMetadata(BaseModel):
    """What the download, copy and share actions need for a finished image."""

    download_filename: str
    image_url: str
    share: SharePayload


class TransformationState(BaseModel):
    """Immutable snapshot; every transition returns a new state."""

    model_config = ConfigDict(frozen=True)

    status: TransformationStatus = S.IDLE
    profile_image: str | None = None
    transformed_image: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "TransformationState":
        if self.error is not None and self.transformed_image is not None:
            raise ValueError("A state cannot carry both an error and a result")
        if (self.status == S.ERROR) != (self.error is not None):
            raise ValueError("error is set exactly when status is error")
        if (self.status == S.COMPLETE) != (self.transformed_image is not None):
            raise ValueError("transformed_image is set exactly when status is complete")
        if self.status == S.ERROR and self.profile_image is not None:
            raise ValueError("The error state only exposes its message")
        return self

    @property
    def is_loading(self) -> bool:
        return self.status in LOADING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in (S.COMPLETE, S.ERROR)

    def _move(self, target: TransformationStatus, **changes) -> "TransformationState":
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status, target)
        return TransformationState(status=target, **changes)

    def fetching_profile(self) -> "TransformationState":
        return self._move(S.FETCHING_PROFILE)

    def transforming(self, profile_image: str) -> "TransformationState":
        return self._move(S.TRANSFORMING, profile_image=profile_image)

    def polling(self) -> "TransformationState":
        return self._move(S.POLLING, profile_image=self.profile_image)

    def complete(self, transformed_image: str) -> "TransformationState":
        return self._move(
            S.COMPLETE,
            profile_image=self.profile_image,
            transformed_image=transformed_image,
        )

    def failed(self, message: str) -> "TransformationState":
        return self._move(S.ERROR, error=message)

    def reset(self) -> "TransformationState":
        return self._move(S.IDLE)

    def export(self, handle: str) -> ExportMetadata | None:
        """Download/share metadata; only a completed state has any."""
        if self.status != S.COMPLETE or self.transformed_image is None:
            return None
        return ExportMetadata(
            download_filename=f"{handle}{DOWNLOAD_FILENAME_SUFFIX}",
            image_url=self.transformed_image,
            share=SharePayload(
                title=SHARE_TITLE, text=SHARE_TEXT, url=self.transformed_image
            ),
        )
