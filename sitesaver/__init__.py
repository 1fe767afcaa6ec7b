"""Serve a static site and save editor changes back into its HTML."""

from .config import ServerConfig
from .errors import (
    DocumentMissing,
    MalformedRequestBody,
    MarkerNotFound,
    OpenBracketNotFound,
    PatchError,
    PathForbidden,
    PathNotFound,
    SiteError,
    UnbalancedLiteral,
)
from .patcher import Settings, patch_document, read_literal
from .server import build_server, save_projects
from .static import resolve_static

__version__ = "0.1.0"
