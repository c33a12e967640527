"""
Handler group mounting.

Handler groups own all logic under one path prefix and live outside this
package. They are passed in directly or imported from a `module:attribute`
path in settings.
"""

import importlib
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from fastapi import APIRouter, FastAPI
from loguru import logger

from config.settings import Settings

groups_log = logger.bind(module="Routes")


@dataclass(frozen=True)
class HandlerGroup:
    """A path prefix served by an external router."""

    name: str
    prefix: str
    setting: str


# Mount order is match priority
HANDLER_GROUPS = (
    HandlerGroup("auth", "/api/auth", "auth_routes"),
    HandlerGroup("listings", "/api/listings", "listings_routes"),
    HandlerGroup("transactions", "/api/transactions", "transactions_routes"),
)


def endpoint_map(mounted: Sequence[str]) -> dict[str, str]:
    """Group name to prefix for the mounted groups, in mount order."""
    return {group.name: group.prefix for group in HANDLER_GROUPS if group.prefix in mounted}


def import_router(path: str) -> APIRouter:
    """
    Import a router from a `module:attribute` path.

    Raises:
        ValueError: If the path is malformed or the attribute is missing
        TypeError: If the attribute is not an APIRouter
        ImportError: If the module cannot be imported
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Handler group path must look like 'module:attribute', got {path!r}")

    module = importlib.import_module(module_name)
    router = getattr(module, attribute, None)
    if router is None:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}")
    if not isinstance(router, APIRouter):
        raise TypeError(f"{path} is {type(router).__name__}, expected APIRouter")
    return router


def load_handler_groups(settings: Settings) -> dict[str, APIRouter]:
    """Import every handler group configured in settings."""
    groups = {}
    for group in HANDLER_GROUPS:
        path: Optional[str] = getattr(settings, group.setting)
        if path:
            groups[group.name] = import_router(path)
            groups_log.debug(f"Loaded {group.name} handlers from {path}")
    return groups


def mount_handler_groups(app: FastAPI, handler_groups: Mapping[str, APIRouter]) -> list[str]:
    """
    Mount handler groups under their prefixes in priority order.

    Args:
        app: FastAPI application instance
        handler_groups: Routers keyed by group name

    Returns:
        Prefixes that were mounted
    """
    known = {group.name for group in HANDLER_GROUPS}
    unknown = set(handler_groups) - known
    if unknown:
        raise ValueError(f"Unknown handler groups: {sorted(unknown)}")

    mounted = []
    for group in HANDLER_GROUPS:
        router = handler_groups.get(group.name)
        if router is None:
            groups_log.warning(f"No {group.name} handlers configured, {group.prefix} not mounted")
            continue
        app.include_router(router, prefix=group.prefix)
        mounted.append(group.prefix)
    return mounted
