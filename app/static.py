# =============================================================================
# app/static.py - Static Asset Gateway
# =============================================================================
# Serves the pre-built frontend bundle in production.
#
# Any GET path that names a file inside the bundle gets that file; every
# other path gets index.html so the browser-side router can take over.
# Must be installed after all API routers: the catch-all matches everything.
# =============================================================================

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import FileResponse

from app.config import ConfigurationError

logger = logging.getLogger(__name__)

ENTRY_DOCUMENT = "index.html"

SERVED_METHODS = {"GET", "HEAD"}
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def resolve_asset(dist_dir: Path, request_path: str) -> Path | None:
    """
    Map a URL path to a file inside the bundle.

    Returns:
        The file path, or None if the path names no file in the bundle
        (including paths that would escape it)
    """
    relative = request_path.lstrip("/")
    if not relative:
        return None

    try:
        candidate = (dist_dir / relative).resolve()
        if not candidate.is_relative_to(dist_dir):
            logger.warning(f"Refusing path outside bundle: {request_path!r}")
            return None
        return candidate if candidate.is_file() else None
    except (OSError, ValueError) as e:
        # NUL bytes, over-long segments: not a file name the bundle can hold
        logger.debug(f"Unusable asset path {request_path!r}: {e}")
        return None


def install_frontend(app: FastAPI, dist_dir: Path) -> None:
    """
    Register the bundle catch-all on `app`.

    Raises:
        ConfigurationError: If the bundle has no entry document
    """
    dist_dir = dist_dir.resolve()
    entry = dist_dir / ENTRY_DOCUMENT
    if not entry.is_file():
        raise ConfigurationError(
            f"Configuration error - frontend bundle missing {entry}; "
            "build the frontend or set FRONTEND_DIST_DIR",
            invalid=["FRONTEND_DIST_DIR"],
        )

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def serve_frontend(request: Request, full_path: str) -> FileResponse:
        # Only reads fall back to the bundle; other verbs stay unmatched
        if request.method not in SERVED_METHODS:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        asset = resolve_asset(dist_dir, full_path)
        return FileResponse(asset or entry)

    logger.info(f"Serving frontend bundle from {dist_dir}")
