"""Avatar lookup settings configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AvatarSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    AVATAR_PROXY_URL: str = "https://unavatar.io"
    SOCIAL_SITE_URL: str = "https://x.com"
    AVATAR_PROBE_TIMEOUT: float = 10.0
    PROFILE_FETCH_TIMEOUT: float = 5.0
    PROFILE_FETCH_USER_AGENT: str = (
        "Mozilla/5.0 (compatible; Twitterbot/1.0; +https://x.com)"
    )


avatar_settings = AvatarSettings()
