from __future__ import annotations

import http.server
import threading

import pytest


class _FixedBodyHandler(http.server.BaseHTTPRequestHandler):
    """Answers every GET with ``server.body``, advertising ``server.advertised`` bytes."""

    def do_GET(self) -> None:
        body = self.server.body
        advertised = self.server.advertised
        self.send_response(200)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(body) if advertised is None else advertised))
        self.end_headers()
        self.wfile.write(body)
        self.wfile.flush()
        self.close_connection = True

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def serve_bytes(monkeypatch):
    """Start a loopback HTTP server; returns ``serve(body, advertised=None) -> base_url``."""
    for var in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)
    servers: list[http.server.HTTPServer] = []

    def serve(body: bytes, advertised: int | None = None) -> str:
        server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _FixedBodyHandler)
        server.body = body
        server.advertised = advertised
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_address[1]}"

    yield serve
    for server in servers:
        server.shutdown()
        server.server_close()
