"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. Each subclass is one error kind
with exactly one HTTP status and one machine-readable code. The global
exception handlers convert them to consistent JSON responses and are the
only place failures get logged.

Non-AppError exceptions become a generic 500 (with Sentry reporting in
production); their details never reach the client.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        # "message" is what the web client displays; "error" mirrors it for API users
        payload: dict = {
            "message": self.message,
            "error": self.message,
            "code": self.error_code,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class ConflictError(AppError):
    status_code = 400
    error_code = "conflict"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class InvalidOtpError(AppError):
    status_code = 400
    error_code = "invalid_otp"


class OtpExpiredError(AppError):
    status_code = 400
    error_code = "otp_expired"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class InvalidCredentialsError(AuthenticationError):
    error_code = "invalid_credentials"


class UnverifiedError(AuthenticationError):
    error_code = "unverified"


class InvalidTokenError(AuthenticationError):
    error_code = "invalid_token"


class TokenExpiredError(AuthenticationError):
    error_code = "token_expired"


class NotifierError(AppError):
    """The OTP could not be delivered. Safe for the client to retry."""

    status_code = 500
    error_code = "notifier_error"


class StoreUnavailableError(AppError):
    """The account store failed or timed out. Safe for the client to retry."""

    status_code = 500
    error_code = "store_unavailable"


class UpstreamError(AppError):
    status_code = 502
    error_code = "upstream_error"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        log_fn = log.error if exc.status_code >= 500 else log.info
        log_fn(
            "request_failed",
            method=request.method,
            path=request.url.path,
            status_code=exc.status_code,
            code=exc.error_code,
            reason=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        field = None
        message = "Invalid request body"
        if errors and errors[0].get("type") == "json_invalid":
            message = "Invalid JSON body"
        elif errors:
            first = errors[0]
            loc = [str(part) for part in first.get("loc", ()) if part != "body"]
            field = ".".join(loc) or None
            if field:
                missing = first.get("type") == "missing"
                message = f"{field} is required" if missing else f"Invalid {field}"
        err = ValidationError(message, field=field)
        log.info(
            "request_invalid",
            method=request.method,
            path=request.url.path,
            field=field,
        )
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            method=request.method,
            path=request.url.path,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        message = "Something went wrong. Please try again later."
        return JSONResponse(
            status_code=500,
            content={"message": message, "error": message, "code": "internal_error"},
        )
