"""API routes module."""

from scravo.api.routes.fallback import mount_fallback
from scravo.api.routes.groups import (
    HANDLER_GROUPS,
    HandlerGroup,
    load_handler_groups,
    mount_handler_groups,
)
from scravo.api.routes.info import router as info_router
from scravo.api.routes.uploads import router as uploads_router

__all__ = [
    "HANDLER_GROUPS",
    "HandlerGroup",
    "info_router",
    "load_handler_groups",
    "mount_fallback",
    "mount_handler_groups",
    "uploads_router",
]
