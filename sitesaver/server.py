#!/usr/bin/env python3
"""Local dev server: serves the site and lets the editor save into index.html.

Run:
  python3 -m sitesaver            (from the site folder)

Open:
  http://localhost:3000/editor.html
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
import tempfile
from dataclasses import replace
from functools import partial
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from .config import HOST, PORT, ServerConfig
from .errors import DocumentMissing, MalformedRequestBody, SiteError
from .patcher import Settings, patch_document, read_literal
from .static import resolve_static

log = logging.getLogger(__name__)

SAVE_ROUTE = "/save-projects"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def parse_save_request(body: bytes) -> tuple[list, Settings]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedRequestBody(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedRequestBody("Request body must be a JSON object.")

    projects = payload.get("projects")
    if not isinstance(projects, list):
        raise MalformedRequestBody('Request body must contain a "projects" array.')

    settings = payload.get("settings")
    if settings is None:
        settings = {}
    elif not isinstance(settings, dict):
        raise MalformedRequestBody('"settings" must be a JSON object.')
    for key in ("bg", "title"):
        value = settings.get(key)
        if value is not None and not isinstance(value, str):
            raise MalformedRequestBody(f'"settings.{key}" must be a string.')
    return projects, Settings(bg=settings.get("bg"), title=settings.get("title"))


def read_document(path: Path) -> str:
    if not path.is_file():
        raise DocumentMissing(f"{path.name} not found in {path.parent}")
    # bytes, not read_text: newline translation would rewrite \r\n
    return path.read_bytes().decode("utf-8")


def write_document(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in one step; readers see old or new, never half."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(text.encode("utf-8"))
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def save_projects(config: ServerConfig, body: bytes) -> dict:
    projects, settings = parse_save_request(body)
    path = config.document_path
    html = read_document(path)
    patched = patch_document(
        html,
        projects,
        settings,
        keyword=config.literal_keyword,
        name=config.literal_name,
        background_image=config.background_image,
        string_aware=config.string_aware,
    )
    write_document(path, patched)
    log.info("Saved %d project(s) to %s", len(projects), config.document)
    return {"ok": True, "count": len(projects)}


class SiteHandler(SimpleHTTPRequestHandler):
    # only copyfile is inherited; paths go through resolve_static, not translate_path

    def __init__(self, *args, config: ServerConfig, **kwargs):
        self.config = config
        super().__init__(*args, **kwargs)

    def __getattr__(self, name):
        # any method without a do_ handler (PUT, DELETE, TRACE, ...) is a 404
        if name.startswith("do_"):
            return self._not_found
        raise AttributeError(name)

    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)

    def end_headers(self):
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        super().end_headers()

    def _json(self, status: HTTPStatus, payload: dict):
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _text(self, status: HTTPStatus, message: str):
        body = message.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _read_body(self) -> bytes:
        try:
            size = int(self.headers.get("Content-Length", "0"))
        except ValueError as exc:
            raise MalformedRequestBody("Invalid Content-Length header.") from exc
        return self.rfile.read(size) if size > 0 else b""

    def _route(self) -> str:
        return self.path.split("?", 1)[0].split("#", 1)[0]

    def _not_found(self):
        # drain any body so closing the socket does not reset the connection
        length = self.headers.get("Content-Length", "0")
        if length.isdigit() and int(length) > 0:
            self.rfile.read(int(length))
        self._text(HTTPStatus.NOT_FOUND, f"Not found: {self._route()}")

    def _serve_static(self):
        try:
            path, mime_type = resolve_static(self.path, self.config.root, self.config.default_document)
            source = path.open("rb")
        except SiteError as exc:
            self._text(exc.status, str(exc))
            return
        except OSError:
            self._not_found()
            return
        with source:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", mime_type)
            self.send_header("Content-Length", str(os.fstat(source.fileno()).st_size))
            self.end_headers()
            if self.command != "HEAD":
                self.copyfile(source, self.wfile)

    def do_OPTIONS(self):
        self.send_response(HTTPStatus.NO_CONTENT)
        self.end_headers()

    def do_GET(self):
        self._serve_static()

    def do_HEAD(self):
        self._serve_static()

    def do_POST(self):
        if self._route() != SAVE_ROUTE:
            self._not_found()
            return
        try:
            result = save_projects(self.config, self._read_body())
        except SiteError as exc:
            log.warning("Save rejected: %s", exc)
            self._json(exc.status, {"ok": False, "error": str(exc)})
            return
        except Exception as exc:  # noqa: BLE001
            log.exception("Save error")
            self._json(HTTPStatus.INTERNAL_SERVER_ERROR, {"ok": False, "error": str(exc)})
            return
        self._json(HTTPStatus.OK, result)


def build_server(config: ServerConfig) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((config.host, config.port), partial(SiteHandler, config=config))


def print_banner(config: ServerConfig) -> None:
    print()
    print(f"  Site:    {config.site_url}")
    print(f"  Editor:  {config.site_url}/editor.html")
    print(f"  Saving:  {config.document_path}")
    print()
    print("  Press Ctrl+C to stop.")
    print()


def check_document(config: ServerConfig) -> int:
    try:
        projects = read_literal(
            read_document(config.document_path),
            config.literal_keyword,
            config.literal_name,
            config.string_aware,
        )
    except (SiteError, ValueError) as exc:
        print(f"{config.document}: {exc}", file=sys.stderr)
        return 1
    print(f"{config.document}: {len(projects)} project(s) in {config.literal_keyword} {config.literal_name}")
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve a static site and save editor changes into its HTML.")
    parser.add_argument("--host", default=HOST, help=f"Host to bind (default: {HOST}).")
    parser.add_argument("--port", type=int, default=PORT, help=f"Port to listen on (default: {PORT}).")
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="Site folder (default: current directory).")
    parser.add_argument("--document", default="index.html", help="HTML file the editor saves into.")
    parser.add_argument("--check", action="store_true", help="Parse the document's literal and exit.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every request.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    config = ServerConfig(host=args.host, port=args.port, root=args.root.resolve(), document=args.document)
    if args.check:
        return check_document(config)

    server = build_server(config)
    print_banner(replace(config, port=server.server_address[1]))
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
