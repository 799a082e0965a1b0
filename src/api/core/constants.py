API_VERSION_HEADER = "X-Profile-Transformer-Version"

# Rate limiting (sliding windows backed by Redis)
RATE_LIMIT_PREFIX = "@fashn-ai/avatar"

TRANSFORM_IP_RATE_LIMIT = 5  # requests per client address
TRANSFORM_IP_WINDOW_SECONDS = 600  # 10 minutes

TRANSFORM_DAILY_RATE_LIMIT = 100  # requests across all callers
TRANSFORM_DAILY_WINDOW_SECONDS = 86400  # 24 hours

# Used when no X-Forwarded-For header is present
DEFAULT_CLIENT_IP = "127.0.0.1"

# Avatar resolution
AVATAR_PATH_MARKER = "profile_images"
LOW_RES_SIZE_TOKENS = ("normal", "bigger", "mini", "200x200")
HIGH_RES_SIZE_TOKEN = "400x400"

# Transformation
MIN_SEED = 0
MAX_SEED = 2**32 - 1

# Export metadata for completed transformations
DOWNLOAD_FILENAME_SUFFIX = "-ai-model.png"
SHARE_TITLE = "My AI Profile Transformation"
SHARE_TEXT = "Check out my AI-generated model!"


class RateLimitKeys:
    """Typed rate limiting identifier generators."""

    @staticmethod
    def transform_ip(ip_address: str) -> str:
        """Identifier for the per-client transformation window."""
        return f"transform-image:{ip_address}"

    @staticmethod
    def transform_daily() -> str:
        """Identifier for the global daily transformation window."""
        return "transform-image-daily"
