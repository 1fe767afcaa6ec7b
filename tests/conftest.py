import http.client
import threading

import pytest

from sitesaver.config import ServerConfig
from sitesaver.server import build_server

INDEX_HTML = """<!doctype html>
<html>
<head>
  <meta charset="UTF-8" />
  <title>Stan's World</title>
  <style>
    body { background: url('Desk_Image.png') center / cover; }
  </style>
</head>
<body>
  <div id="grid"></div>
  <script>
    const PROJECTS = [
      {
        "title": "Desk lamp",
        "tags": ["wood", "brass"],
        "image": "lamp.png"
      }
    ];
    render(PROJECTS);
  </script>
</body>
</html>
"""


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "editor.html").write_text("<!doctype html><title>Editor</title>", encoding="utf-8")
    (root / "style.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (root / "assets").mkdir()
    (root / "assets" / "logo.PNG").write_bytes(b"\x89PNG\r\n\x1a\n")
    (tmp_path / "secret.txt").write_text("top secret\n", encoding="utf-8")
    return root


@pytest.fixture
def config(site):
    return ServerConfig(host="127.0.0.1", port=0, root=site)


@pytest.fixture
def server(config):
    httpd = build_server(config)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()
    thread.join(timeout=5)


@pytest.fixture
def request_site(server):
    """Send one raw request to the running server; return (status, headers, body)."""
    host, port = server.server_address[:2]

    def send(method, path, body=None, headers=None):
        conn = http.client.HTTPConnection(host, port, timeout=5)
        try:
            conn.request(method, path, body=body, headers=headers or {})
            response = conn.getresponse()
            return response.status, response.headers, response.read()
        finally:
            conn.close()

    return send
