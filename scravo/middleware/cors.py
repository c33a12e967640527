"""
CORS Admission Middleware.

Decides per request whether the caller's origin may use the API. Unlisted
origins are rejected before any route runs. Every OPTIONS request is answered
here with 200, whether or not it carries Origin or
Access-Control-Request-Method, and never reaches downstream handlers.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import FastAPI, Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from config.settings import Settings, split_csv
from scravo.api.errors import CorsRejectedError, build_error_response

cors_log = logger.bind(module="Cors")


@dataclass(frozen=True)
class CorsPolicy:
    """Immutable CORS configuration."""

    origins: frozenset[str]
    methods: tuple[str, ...]
    headers: tuple[str, ...]
    allow_credentials: bool = True
    origin_predicate: Optional[Callable[[str], bool]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CorsPolicy":
        """Build the policy from application settings."""
        predicate = None
        if settings.cors_origin_regex:
            pattern = re.compile(settings.cors_origin_regex)
            predicate = lambda origin: pattern.fullmatch(origin) is not None  # noqa: E731

        return cls(
            origins=frozenset(settings.allowed_origins),
            methods=split_csv(settings.cors_methods),
            headers=split_csv(settings.cors_headers),
            origin_predicate=predicate,
        )

    def is_allowed(self, origin: Optional[str]) -> bool:
        """
        Check an origin against the allow-list.

        A missing origin (non-browser or same-origin caller) is allowed.
        """
        if not origin:
            return True
        if origin in self.origins:
            return True
        if self.origin_predicate is not None:
            return bool(self.origin_predicate(origin))
        return False

    def response_headers(self, origin: str) -> dict[str, str]:
        """Headers attached to responses for an admitted origin."""
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.methods),
            "Access-Control-Allow-Headers": ", ".join(self.headers),
        }
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers


class CorsAdmissionMiddleware(BaseHTTPMiddleware):
    """Reject unlisted origins and answer preflight requests."""

    def __init__(self, app, policy: CorsPolicy, debug: bool = False):
        super().__init__(app)
        self.policy = policy
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        """Admit, reject or answer the request."""
        origin = request.headers.get("origin")

        if not self.policy.is_allowed(origin):
            cors_log.warning(
                f"Rejected origin {origin} for {request.method} {request.url.path}"
            )
            return build_error_response(request, CorsRejectedError(origin), self.debug)

        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        if origin:
            response.headers.update(self.policy.response_headers(origin))
            response.headers.add_vary_header("Origin")
        elif request.method == "OPTIONS":
            response.headers["Access-Control-Allow-Methods"] = ", ".join(self.policy.methods)
            response.headers["Access-Control-Allow-Headers"] = ", ".join(self.policy.headers)

        return response


def setup_cors(app: FastAPI, settings: Settings) -> CorsPolicy:
    """
    Configure CORS admission for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        The policy in effect
    """
    policy = CorsPolicy.from_settings(settings)
    app.add_middleware(CorsAdmissionMiddleware, policy=policy, debug=settings.is_development)
    cors_log.debug(f"CORS allow-list: {sorted(policy.origins)}")
    return policy
