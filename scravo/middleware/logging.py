"""
Request Logging Middleware.

One line per request: method, path, status, duration and the caller's
Origin. Client errors log at WARNING, server errors at ERROR.
"""

import time

from fastapi import FastAPI, Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

request_log = logger.bind(module="Request")


def level_for_status(status: int) -> str:
    """Log level for a response status."""
    if status >= 500:
        return "ERROR"
    if status >= 400:
        return "WARNING"
    return "INFO"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log every request after its response is built."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        origin = request.headers.get("origin", "-")
        request_log.log(
            level_for_status(response.status_code),
            f"{request.method} {request.url.path} {response.status_code} "
            f"({elapsed_ms:.0f}ms) origin={origin}",
        )

        return response


def setup_logging(app: FastAPI) -> None:
    """Add the request log as the outermost layer below security headers."""
    app.add_middleware(RequestLogMiddleware)
