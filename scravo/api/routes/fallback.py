"""
Not-found fallback, mounted after every other route.

The fallback route has no method list, so any method on an unmatched path
gets the 404 body instead of a 405. A path with a trailing slash that
matches a route once the slash is dropped (`/api/listings/` for a group's
`""` root) is redirected there with 307, which keeps the method and body.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger
from starlette.responses import Response
from starlette.routing import Match

fallback_log = logger.bind(module="NotFound")

FALLBACK_PATH = "/{full_path:path}"


def not_found_response(request: Request) -> JSONResponse:
    """404 body naming the path and method that did not match."""
    fallback_log.warning(f"Route not found: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=404,
        content={
            "message": "Route not found",
            "path": request.url.path,
            "method": request.method,
        },
    )


def find_unslashed_route(request: Request) -> Optional[str]:
    """Path without its trailing slash, if some other route fully matches it."""
    path = request.url.path
    if path == "/" or not path.endswith("/"):
        return None

    scope = dict(request.scope, path=path.rstrip("/") or "/")
    for route in request.app.router.routes:
        if getattr(route, "endpoint", None) is route_not_found:
            continue
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return scope["path"]
    return None


async def route_not_found(request: Request) -> Response:
    target = find_unslashed_route(request)
    if target is not None:
        fallback_log.debug(f"Redirecting {request.url.path} to {target}")
        return RedirectResponse(str(request.url.replace(path=target)), status_code=307)
    return not_found_response(request)


def mount_fallback(app: FastAPI) -> None:
    """Register the fallback; must run after every other route."""
    app.add_route(FALLBACK_PATH, route_not_found, include_in_schema=False)
