"""Exception hierarchy and global exception handlers for the FastAPI application."""

import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..messages import MessageCode, get_default_message
from src.utils.logger import get_logger

logger = get_logger(__name__)


class ProfileTransformException(Exception):
    """Base exception for the profile transformer with unified message codes."""

    default_code: MessageCode = MessageCode.INTERNAL_ERROR
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message_code: MessageCode | None = None,
        status_code: int | None = None,
        details: dict | None = None,
        headers: dict | None = None,
        message: str | None = None,
    ):
        self.message_code = message_code or self.default_code
        self.status_code = status_code or self.default_status
        self.message: str = message or get_default_message(self.message_code)
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_response_dict(self) -> dict:
        """Convert exception to API response format."""
        content = {
            "error": self.message,
            "message_code": self.message_code,
        }
        if self.details:
            content["details"] = self.details
        return content


class InvalidInputError(ProfileTransformException):
    """A required input (handle, image URL, prediction id) is missing."""

    default_code = MessageCode.INVALID_INPUT
    default_status = status.HTTP_400_BAD_REQUEST


class VerificationFailedError(ProfileTransformException):
    default_code = MessageCode.VERIFICATION_FAILED
    default_status = status.HTTP_403_FORBIDDEN


class RateLimitedError(ProfileTransformException):
    default_code = MessageCode.RATE_LIMIT_EXCEEDED
    default_status = status.HTTP_429_TOO_MANY_REQUESTS


class DailyRateLimitedError(RateLimitedError):
    default_code = MessageCode.DAILY_RATE_LIMIT_EXCEEDED


class ProfileNotFoundError(ProfileTransformException):
    """The avatar could not be resolved by any strategy."""

    default_code = MessageCode.PROFILE_NOT_FOUND
    default_status = status.HTTP_404_NOT_FOUND


class ProviderError(ProfileTransformException):
    """The transformation provider rejected or botched a request.

    Provider detail is logged where the error is raised and never copied into
    the message returned to callers.
    """

    default_code = MessageCode.EXTERNAL_SERVICE_ERROR
    default_status = status.HTTP_502_BAD_GATEWAY


class JobFailedError(ProfileTransformException):
    default_code = MessageCode.JOB_FAILED
    default_status = status.HTTP_502_BAD_GATEWAY


class PollTimeoutError(ProfileTransformException):
    default_code = MessageCode.POLL_TIMEOUT
    default_status = status.HTTP_504_GATEWAY_TIMEOUT


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""

    @app.exception_handler(ProfileTransformException)
    async def profile_transform_exception_handler(
        request: Request, exc: ProfileTransformException
    ) -> JSONResponse:
        """Handle our own typed exceptions."""
        logger.warning(
            f"Request failed: {exc.message_code.value}",
            path=request.url.path,
            method=request.method,
            message_code=exc.message_code.value,
            status_code=exc.status_code,
            details=exc.details,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(HTTPException)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle FastAPI and Starlette HTTP exceptions."""
        logger.warning(
            f"HTTP exception {exc.status_code}: {exc.detail}",
            path=request.url.path,
            method=request.method,
        )

        message_code = (
            MessageCode.NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else MessageCode.INTERNAL_ERROR
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "message_code": message_code},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        try:
            serializable_errors = [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                for error in exc.errors()
            ]
        except Exception:
            serializable_errors = [
                {"msg": "Validation error occurred", "type": "validation_error"}
            ]

        logger.warning(
            "Validation error occurred",
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": get_default_message(MessageCode.INVALID_INPUT),
                "message_code": MessageCode.INVALID_INPUT,
                "details": {"validation_errors": serializable_errors},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle all other unhandled exceptions."""
        if isinstance(exc, ProfileTransformException):
            return await profile_transform_exception_handler(request, exc)

        logger.error(
            f"Unhandled exception: {str(exc)}",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
            traceback=traceback.format_exc(),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": get_default_message(MessageCode.INTERNAL_ERROR),
                "message_code": MessageCode.INTERNAL_ERROR,
            },
        )
