"""Centralized message codes and default messages for API responses."""

from enum import Enum


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    HANDLE_REQUIRED = "HANDLE_REQUIRED"
    IMAGE_URL_REQUIRED = "IMAGE_URL_REQUIRED"
    PREDICTION_ID_REQUIRED = "PREDICTION_ID_REQUIRED"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"

    # Bot verification
    VERIFICATION_FAILED = "VERIFICATION_FAILED"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    DAILY_RATE_LIMIT_EXCEEDED = "DAILY_RATE_LIMIT_EXCEEDED"

    # Avatar resolution
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Transformation provider
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    TRANSFORM_START_FAILED = "TRANSFORM_START_FAILED"
    STATUS_CHECK_FAILED = "STATUS_CHECK_FAILED"
    JOB_FAILED = "JOB_FAILED"
    POLL_TIMEOUT = "POLL_TIMEOUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"


# Default messages for each message code
DEFAULT_MESSAGES = {
    MessageCode.SUCCESS: "Operation completed successfully",
    # Validation errors
    MessageCode.INVALID_INPUT: "Invalid input provided",
    MessageCode.HANDLE_REQUIRED: "Please enter a X/Twitter handle",
    MessageCode.IMAGE_URL_REQUIRED: "image_url is required",
    MessageCode.PREDICTION_ID_REQUIRED: "ID is required",
    MessageCode.REQUEST_TOO_LARGE: "Request body too large",
    # Bot verification
    MessageCode.VERIFICATION_FAILED: "Bot challenge failed.",
    # Rate limiting
    MessageCode.RATE_LIMIT_EXCEEDED: "Rate limit exceeded. Please try again later.",
    MessageCode.DAILY_RATE_LIMIT_EXCEEDED: "Daily rate limit exceeded. Please try again tomorrow.",
    # Avatar resolution
    MessageCode.PROFILE_NOT_FOUND: "Could not fetch profile picture. Please check the username.",
    # Transformation provider
    MessageCode.EXTERNAL_SERVICE_ERROR: "Transformation service error",
    MessageCode.TRANSFORM_START_FAILED: "Failed to start transformation",
    MessageCode.STATUS_CHECK_FAILED: "Failed to check status",
    MessageCode.JOB_FAILED: "Transformation failed. Please try again.",
    MessageCode.POLL_TIMEOUT: "Transformation timed out. Please try again.",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.NOT_FOUND: "Resource not found",
}

# Shown for anything that is not one of our own exceptions
FALLBACK_ERROR_MESSAGE = "Something went wrong"


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
