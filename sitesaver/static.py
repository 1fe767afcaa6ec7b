from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote

from .errors import PathForbidden, PathNotFound

MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".json": "application/json",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def mime_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_static(request_path: str, root: Path, default_document: str = "index.html") -> tuple[Path, str]:
    """Map a request path to a file below ``root``.

    Raises ``PathForbidden`` when the path resolves outside ``root`` (``..``
    segments, encoded or not, and symlinks pointing out) and ``PathNotFound``
    when there is no such file.
    """
    # split by hand: urlparse reads a leading "//" as a host
    route = request_path.split("?", 1)[0].split("#", 1)[0]
    path = unquote(route)
    if path in {"", "/"}:
        path = default_document
    if "\x00" in path:
        raise PathNotFound(f"Not found: {route}")

    base = Path(root).resolve()
    candidate = (base / path.lstrip("/")).resolve()
    if not candidate.is_relative_to(base):
        raise PathForbidden("Forbidden")

    if candidate.is_dir():
        candidate = candidate / default_document
    if not candidate.is_file():
        raise PathNotFound(f"Not found: {route}")
    return candidate, mime_type_for(candidate)
