import errno
import os
from pathlib import Path
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from logging_config import get_logger

logger = get_logger(__name__)

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}
DEFAULT_MIME_TYPE = "application/octet-stream"
INDEX_FILE = "index.html"


def content_type_for(path: str) -> str:
    return MIME_TYPES.get(os.path.splitext(path)[1].lower(), DEFAULT_MIME_TYPE)


def resolve_asset_path(static_dir: str, request_path: str) -> Optional[Path]:
    """Map a URL path to a file under static_dir, or None if it escapes the directory."""
    root = Path(static_dir).resolve()
    candidate = (root / (request_path.lstrip("/") or INDEX_FILE)).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def create_assets_router(static_dir: str) -> APIRouter:
    """Plain file responder for the game's HTML/JS/CSS; it never touches room state."""
    assets_router = APIRouter(tags=["assets"])

    @assets_router.get("/{request_path:path}", include_in_schema=False)
    def serve_asset(request_path: str):
        file_path = resolve_asset_path(static_dir, request_path)
        if file_path is None:
            logger.warning(f"Rejected asset path outside {static_dir}: {request_path}")
            return HTMLResponse("<h1>404 Not Found</h1>", status_code=404)

        try:
            content = file_path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"Asset not found: {request_path}")
            return HTMLResponse("<h1>404 Not Found</h1>", status_code=404)
        except OSError as e:
            code = errno.errorcode.get(e.errno, "UNKNOWN")
            logger.error(f"Error reading asset {file_path}: {e}")
            return PlainTextResponse(f"Server Error: {code}", status_code=500)

        return Response(content=content, media_type=content_type_for(str(file_path)))

    return assets_router
