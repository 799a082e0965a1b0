from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.utils.settings.app import AppSettings
from src.api.core.exceptions.base import ProfileTransformException
from src.api.core.messages import MessageCode
from src.api.core.constants import API_VERSION_HEADER
from src.utils.logger import get_client_ip, get_logger

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, is_production: bool = False):
        super().__init__(app)
        self.is_production = is_production
        self.app_settings = AppSettings()

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
            API_VERSION_HEADER: self.app_settings.API_VERSION,
        }

        # HSTS only over HTTPS
        if self.is_production and request.url.scheme == "https":
            headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        for key, value in headers.items():
            if key not in response.headers:
                response.headers[key] = value

        return response


class PayloadSizeMiddleware(BaseHTTPMiddleware):
    """Reject request bodies above the configured size."""

    def __init__(self, app, max_request_size: int | None = None):
        super().__init__(app)
        self.max_request_size = max_request_size or AppSettings().MAX_REQUEST_SIZE

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_request_size:
            logger.warning(
                f"Request too large: {content_length} bytes from {get_client_ip(request)}"
            )
            # Rendered here; middleware runs outside the exception handlers
            exc = ProfileTransformException(
                MessageCode.REQUEST_TOO_LARGE,
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                details={"max_request_size": self.max_request_size},
            )
            return JSONResponse(status_code=exc.status_code, content=exc.to_response_dict())

        return await call_next(request)
