"""Root and health check routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from scravo import __version__
from scravo.api.dependencies import Database
from scravo.api.routes.groups import endpoint_map

router = APIRouter(tags=["Info"])


@router.get("/")
async def root(request: Request) -> dict:
    """API information and mounted endpoint prefixes."""
    settings = request.app.state.settings
    return {
        "message": "Welcome to Scravo API",
        "version": __version__,
        "environment": settings.node_env,
        "endpoints": endpoint_map(request.app.state.mounted_prefixes),
    }


@router.get("/api/health")
async def health(request: Request, database: Database) -> dict:
    """Health check endpoint."""
    settings = request.app.state.settings
    connected = await database.ping()
    return {
        "status": "OK",
        "environment": settings.node_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if connected else "disconnected",
    }
