"""Cloudflare Turnstile settings configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class TurnstileSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    TURNSTILE_SECRET_KEY: str = ""
    TURNSTILE_VERIFY_URL: str = (
        "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    )
    TURNSTILE_TIMEOUT: float = 10.0


turnstile_settings = TurnstileSettings()
