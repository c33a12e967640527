"""
Error Responder.

Exception types and the single responder that turns any failure into the
unified JSON error body `{message, status, error?}`.
"""

import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

error_log = logger.bind(module="Errors")

GENERIC_MESSAGE = "Something went wrong!"


class AppError(Exception):
    """Base application error carrying an HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class CorsRejectedError(AppError):
    """Request origin is not in the CORS allow-list."""

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__("CORS policy: origin not allowed", status_code=403)


class MalformedPayloadError(AppError):
    """Request body could not be decoded."""

    def __init__(self, message: str = "Malformed request body"):
        super().__init__(message, status_code=400)


class PayloadTooLargeError(AppError):
    """Request body exceeds the configured limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Request body exceeds limit of {limit} bytes", status_code=413)


class RequestTimeoutError(AppError):
    """Handler did not respond in time."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Request timed out after {timeout:g}s", status_code=504)


def resolve_status(exc: Exception) -> int:
    """
    Get the HTTP status declared by an exception.

    Looks at `status_code` then `status`; anything that is not an
    integer error status resolves to 500.
    """
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 400 <= value <= 599:
            return value
    return 500


def resolve_message(exc: Exception, status: int) -> str:
    """Get a client-safe message for an exception."""
    if isinstance(exc, AppError):
        return exc.message
    if isinstance(exc, StarletteHTTPException):
        return str(exc.detail)
    if status < 500:
        message = getattr(exc, "message", None) or str(exc)
        if message:
            return message
    return GENERIC_MESSAGE


def build_error_response(
    request: Request, exc: Exception, debug: bool
) -> JSONResponse:
    """
    Build the unified error response and log the failure.

    Args:
        request: Request that failed
        exc: Raised exception
        debug: Include exception detail and traceback in the body

    Returns:
        JSONResponse with `{message, status, error?}`
    """
    status = resolve_status(exc)
    message = resolve_message(exc, status)
    where = f"{request.method} {request.url.path}"

    if status >= 500:
        error_log.opt(exception=exc).error(f"{where} -> {status}: {exc!r}")
    else:
        error_log.warning(f"{where} -> {status}: {message}")

    content = {"message": message, "status": status}
    if debug:
        content["error"] = format_error_detail(exc)

    headers: Optional[dict] = None
    if isinstance(exc, StarletteHTTPException):
        headers = getattr(exc, "headers", None)

    return JSONResponse(status_code=status, content=content, headers=headers)


def format_error_detail(exc: Exception) -> str:
    """Exception text plus traceback, for development responses."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def register_error_handlers(app: FastAPI, debug: bool) -> None:
    """
    Route framework-level exceptions through the unified responder.

    Unhandled exceptions are caught by ErrorResponderMiddleware instead of
    a bare `Exception` handler, so they still pass through the rest of the
    middleware stack.
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return build_error_response(request, exc, debug)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return build_error_response(request, exc, debug)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Convert validation errors to the unified error format."""
        errors = exc.errors()
        if any(error.get("type") == "json_invalid" for error in errors):
            return build_error_response(request, MalformedPayloadError(), debug)

        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", []))
            msg = first_error.get("msg", "Validation error")
            message = f"{field}: {msg}" if field else msg
        else:
            message = "Validation error"

        return build_error_response(request, AppError(message, status_code=422), debug)
