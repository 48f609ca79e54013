"""
Fixtures for acquisition service tests — a local HTTP server.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import pytest

Response = tuple[int, dict[str, str], bytes]


class _Handler(BaseHTTPRequestHandler):
    server: "StubServer"

    def do_GET(self) -> None:
        self._respond(with_body=True)

    def do_HEAD(self) -> None:
        self._respond(with_body=False)

    def _respond(self, with_body: bool) -> None:
        self.server.requests.append({
            "method": self.command,
            "path": self.path,
            "headers": {k.lower(): v for k, v in self.headers.items()},
        })
        route = self.server.routes.get(self.path)
        if route is None:
            status, headers, body = 404, {}, b'{"message": "Not Found"}'
        elif callable(route):
            status, headers, body = route()
        else:
            status, headers, body = route

        self.send_response(status)
        for key, value in headers.items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if with_body:
            self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        pass


class StubServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _Handler)
        self.routes: dict[str, Response | Callable[[], Response]] = {}
        self.requests: list[dict[str, Any]] = []

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"

    def hits(self, path: str) -> int:
        return sum(1 for r in self.requests if r["path"] == path)


def sequence(*responses: Response) -> Callable[[], Response]:
    """Route returning each response in turn, repeating the last."""
    remaining = list(responses)

    def _next() -> Response:
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]

    return _next


@pytest.fixture
def http_server():
    server = StubServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def responses():
    """Expose ``sequence`` to tests without importing conftest."""
    return sequence
