"""
Consistent error handling for the platform API.

All API errors MUST use these error classes and shapes.
Stack traces are NEVER returned to clients.

Taxonomy:
- AccessDeniedError (403) / PaymentRequiredError (402): entitlement or role check failed
- ConfigurationError (500): unmapped category label, missing credential
- UpstreamUnavailableError (503): hosted database or AI gateway unreachable
- ValidationError (400): malformed input, reported field by field

Each error is recovered at the API boundary and converted to a user-facing
message. Only UpstreamUnavailableError and ConfigurationError are logged
at ERROR for operators.
"""

import logging
import uuid
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base for every error the API reports.

    ``code`` is stable and machine-readable; ``message`` is shown to the user.
    """

    log_level = logging.INFO

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Body sent to the client."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppError):
    """Validation error (400). ``field_errors`` maps field name to message."""

    def __init__(self, message: str, field_errors: Optional[dict[str, str]] = None):
        self.field_errors = dict(field_errors or {})
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"fields": self.field_errors} if self.field_errors else None,
        )


class AuthenticationError(AppError):
    """Authentication failure (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            code="AUTHENTICATION_ERROR",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class AccessDeniedError(AppError):
    """Access denied (403). ``reason`` is machine-readable (banned, role, ...)."""

    def __init__(self, message: str = "Access denied", reason: Optional[str] = None):
        self.reason = reason
        super().__init__(
            code="ACCESS_DENIED",
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details={"reason": reason} if reason else None,
        )


class PaymentRequiredError(AccessDeniedError):
    """Content is behind the paywall (402)."""

    def __init__(self, message: str = "This content requires an active subscription", subject_id: Optional[str] = None):
        super().__init__(message=message, reason="no_subscription")
        self.code = "PAYMENT_REQUIRED"
        self.status_code = status.HTTP_402_PAYMENT_REQUIRED
        if subject_id:
            self.details["subject_id"] = subject_id


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ConfigurationError(AppError):
    """Server-side misconfiguration (500). Never defaulted around."""

    log_level = logging.ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class UpstreamUnavailableError(AppError):
    """Hosted database or AI gateway unreachable (503)."""

    log_level = logging.ERROR

    def __init__(self, message: str = "Service temporarily unavailable", upstream: Optional[str] = None):
        self.upstream = upstream
        super().__init__(
            code="UPSTREAM_UNAVAILABLE",
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"upstream": upstream} if upstream else None,
        )


class RateLimitError(AppError):
    """Upstream rate limit hit (429)."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(
            code="RATE_LIMIT_EXCEEDED",
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )


class QuotaExceededError(AppError):
    """Upstream quota exhausted (402)."""

    def __init__(self, message: str = "Quota exhausted"):
        super().__init__(
            code="QUOTA_EXCEEDED",
            message=message,
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
        )


def generate_correlation_id() -> str:
    """New request id for log correlation."""
    return str(uuid.uuid4())


def get_correlation_id(request: Request) -> str:
    """Get correlation ID from the X-Correlation-ID header, request state, or a new one."""
    correlation_id = request.headers.get("X-Correlation-ID")
    if correlation_id:
        return correlation_id
    if hasattr(request.state, "correlation_id"):
        return request.state.correlation_id
    return generate_correlation_id()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    correlation_id = get_correlation_id(request)
    logger.log(
        exc.log_level,
        "Application error",
        extra={
            "correlation_id": correlation_id,
            "error_code": exc.code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"X-Correlation-ID": correlation_id},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Tags every response with a correlation id and turns anything unhandled
    into a generic 500.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = get_correlation_id(request)
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        except Exception as e:
            logger.exception(
                "Unhandled error in request",
                extra={
                    "correlation_id": correlation_id,
                    "error_type": type(e).__name__,
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "Internal server error",
                        "details": {"correlation_id": correlation_id},
                    }
                },
                headers={"X-Correlation-ID": correlation_id},
            )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_middleware(ErrorHandlerMiddleware)
