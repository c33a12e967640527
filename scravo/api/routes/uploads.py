"""Static file routes for user uploads."""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, Response
from loguru import logger

from scravo.api.routes.fallback import not_found_response

uploads_log = logger.bind(module="Uploads")

router = APIRouter(prefix="/uploads", tags=["Uploads"])


def resolve_upload_path(root: Path, relative: str) -> Optional[Path]:
    """
    Resolve a request path to a file inside the uploads root.

    Args:
        root: Uploads directory
        relative: Path below the /uploads prefix

    Returns:
        Absolute file path, or None if it is missing or escapes the root
    """
    try:
        base = root.resolve()
        candidate = (base / relative).resolve()
    except (OSError, ValueError):
        return None

    if not candidate.is_relative_to(base):
        uploads_log.warning(f"Blocked path outside uploads root: {relative}")
        return None
    if not candidate.is_file():
        return None
    return candidate


@router.api_route("/{file_path:path}", methods=["GET", "HEAD"])
def serve_upload(request: Request, file_path: str) -> Response:
    """Serve a file from the uploads directory."""
    root = Path(request.app.state.settings.uploads_dir)
    target = resolve_upload_path(root, file_path)
    if target is None:
        return not_found_response(request)
    return FileResponse(target)
