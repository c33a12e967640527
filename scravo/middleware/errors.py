"""
Error Responder Middleware.

Catches anything the route layer did not handle and answers with the
unified error body.
"""

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from scravo.api.errors import build_error_response


class ErrorResponderMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into error responses."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return build_error_response(request, exc, self.debug)


def setup_error_responder(app: FastAPI, debug: bool) -> None:
    """
    Configure the catch-all error responder.

    Args:
        app: FastAPI application instance
        debug: Include error detail in responses
    """
    app.add_middleware(ErrorResponderMiddleware, debug=debug)
