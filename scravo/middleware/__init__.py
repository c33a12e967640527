"""
Middleware Module.

Exports middleware setup functions for FastAPI application.
"""

from fastapi import FastAPI

from config.settings import Settings
from scravo.middleware.body import BodyParserMiddleware
from scravo.middleware.cors import CorsAdmissionMiddleware, CorsPolicy, setup_cors
from scravo.middleware.errors import ErrorResponderMiddleware, setup_error_responder
from scravo.middleware.logging import RequestLogMiddleware, setup_logging
from scravo.middleware.security import SecurityHeadersMiddleware, setup_security_headers
from scravo.middleware.timeout import RequestTimeoutMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure all middleware for the application.

    Starlette runs the last added middleware first, so the request passes
    security headers, logging, CORS admission, error responder, timeout and
    body parser in that order.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(BodyParserMiddleware, limit=settings.body_limit_bytes)
    app.add_middleware(RequestTimeoutMiddleware, timeout=settings.request_timeout_seconds)
    setup_error_responder(app, debug=settings.is_development)
    setup_cors(app, settings)
    setup_logging(app)
    setup_security_headers(app)


__all__ = [
    "BodyParserMiddleware",
    "CorsAdmissionMiddleware",
    "CorsPolicy",
    "ErrorResponderMiddleware",
    "RequestLogMiddleware",
    "RequestTimeoutMiddleware",
    "SecurityHeadersMiddleware",
    "setup_middleware",
]
