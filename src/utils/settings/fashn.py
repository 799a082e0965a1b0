"""FASHN prediction API settings configuration."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class FashnSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    FASHN_API_KEY: str = ""
    FASHN_API_URL: str = "https://api.fashn.ai/v1"
    FASHN_MODEL_NAME: str = "face-to-model"
    FASHN_ASPECT_RATIO: str = "2:3"
    FASHN_TIMEOUT: int = 60

    # "sync" waits for the output server-side, "async" hands the prediction id
    # back to the caller, who polls /api/fashn-status.
    TRANSFORM_MODE: Literal["sync", "async"] = "sync"
    POLL_MAX_ATTEMPTS: int = 30
    POLL_INTERVAL_SECONDS: float = 2.0


fashn_settings = FashnSettings()
