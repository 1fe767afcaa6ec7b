from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

HOST = "127.0.0.1"
PORT = 3000


@dataclass(frozen=True)
class ServerConfig:
    """Everything the server needs, passed explicitly to ``build_server``.

    ``root`` is the site root: static files are only read from below it and
    ``document`` (relative to it) is the HTML file the editor saves into.
    """

    host: str = HOST
    port: int = PORT
    root: Path = field(default_factory=Path.cwd)
    document: str = "index.html"
    default_document: str = "index.html"
    literal_keyword: str = "const"
    literal_name: str = "PROJECTS"
    background_image: str = "Desk_Image.png"
    string_aware: bool = True

    @property
    def document_path(self) -> Path:
        return Path(self.root) / self.document

    @property
    def site_url(self) -> str:
        host = "localhost" if self.host in {"127.0.0.1", "0.0.0.0", ""} else self.host
        return f"http://{host}:{self.port}"
