"""Error kinds raised by the patcher, the resolver and the save route.

Each kind carries the HTTP status the request handler answers with.
"""

from __future__ import annotations

from http import HTTPStatus


class SiteError(Exception):
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class PatchError(SiteError):
    """The document does not have the shape the patcher expects."""

    status = HTTPStatus.BAD_REQUEST


class MarkerNotFound(PatchError):
    pass


class OpenBracketNotFound(PatchError):
    pass


class UnbalancedLiteral(PatchError):
    pass


class MalformedRequestBody(SiteError):
    status = HTTPStatus.BAD_REQUEST


class DocumentMissing(SiteError):
    status = HTTPStatus.NOT_FOUND


class PathForbidden(SiteError):
    status = HTTPStatus.FORBIDDEN


class PathNotFound(SiteError):
    status = HTTPStatus.NOT_FOUND
