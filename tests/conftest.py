"""Shared fixtures: a virtual clock and a local HTTP server."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable, Tuple

import pytest

from etf_holdings.submissions import SubmissionInfo


class FakeClock:
    """Clock whose ``sleep`` advances virtual time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


Route = Callable[[str, dict], Tuple[int, dict, bytes]]


class _RoutingHandler(BaseHTTPRequestHandler):
    """HTTP handler delegating each GET to the test's route function."""

    route: Route
    requests: list[tuple[str, dict]] = []

    def do_GET(self) -> None:  # pragma: no cover - exercised indirectly
        """Serve the route's answer and record the request."""

        headers = dict(self.headers.items())
        type(self).requests.append((self.path, headers))
        status, response_headers, body = type(self).route(self.path, headers)
        self.send_response(status)
        for key, value in response_headers.items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body:
            self.wfile.write(body)

    def log_message(self, *_args, **_kwargs):  # pragma: no cover - silence server logs
        return None


@contextmanager
def serve(route: Route):
    """Spin up a local HTTP server answering with ``route``."""

    handler = type("Handler", (_RoutingHandler,), {"route": staticmethod(route), "requests": []})
    server = HTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address
        yield f"http://{host}:{port}", handler
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


@pytest.fixture
def http_server():
    return serve


def _build_backlog(dates: list[str], cik: int = 36405) -> list[SubmissionInfo]:
    """Build submissions with distinct accession numbers for ``dates``."""

    return [
        SubmissionInfo(cik, f"00000350010500{i:03d}", date) for i, date in enumerate(dates)
    ]


@pytest.fixture
def make_backlog():
    return _build_backlog
