# tests/conftest.py
"""
Shared fixtures: an in-process echo server and transport patches that
route hostbridge's outbound calls to it.

- sync path:  requests.request  -> FastAPI TestClient(echo_app)
- async path: httpx.AsyncClient -> real AsyncClient over ASGITransport(echo_app)

Parity tests additionally use `live_server`: a loopback http.server that
both real `requests` and real `httpx` talk to, with no transport patched.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Iterator, List, Optional

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

import hostbridge.utils.http_client as hc_mod

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _build_echo_app() -> FastAPI:
    app = FastAPI()

    @app.api_route("/echo", methods=["GET", "POST"])
    async def echo(request: Request) -> PlainTextResponse:
        # GET reflects the raw query string, POST reflects the raw body
        if request.method == "GET":
            return PlainTextResponse(f"GET {request.url.path} {request.url.query}")
        body = await request.body()
        return PlainTextResponse(body.decode("utf-8"))

    @app.get("/get")
    async def get_only() -> PlainTextResponse:
        return PlainTextResponse("get ok")

    @app.post("/post")
    async def post_only() -> PlainTextResponse:
        return PlainTextResponse("post ok")

    @app.api_route("/content-type", methods=["GET", "POST"])
    async def content_type(request: Request) -> PlainTextResponse:
        return PlainTextResponse(request.headers.get("content-type", "none"))

    @app.get("/status/{code}")
    async def status(code: int) -> PlainTextResponse:
        return PlainTextResponse("", status_code=code)

    return app


@pytest.fixture()
def echo_app() -> FastAPI:
    return _build_echo_app()


@dataclass
class SyncCall:
    method: str
    url: str
    data: Optional[bytes]
    timeout: Any


@dataclass
class SyncTransport:
    calls: List[SyncCall] = field(default_factory=list)


@pytest.fixture()
def sync_transport(monkeypatch: pytest.MonkeyPatch, echo_app: FastAPI) -> SyncTransport:
    """
    Mimics requests.request(method, url, data=..., timeout=...) by
    forwarding to the echo app.
    """
    recorder = SyncTransport()
    test_client = TestClient(echo_app)

    def _fake_request(method: str, url: str, data: Optional[bytes] = None, timeout: Any = None, **_: Any):
        recorder.calls.append(SyncCall(method=method, url=url, data=data, timeout=timeout))
        return test_client.request(method, url, content=data)

    monkeypatch.setattr(hc_mod.requests, "request", _fake_request)
    return recorder


@dataclass
class AsyncTransport:
    timeouts: List[Any] = field(default_factory=list)


def _patch_async_client(
    monkeypatch: pytest.MonkeyPatch,
    transport_factory: Callable[[], httpx.AsyncBaseTransport],
) -> AsyncTransport:
    recorder = AsyncTransport()

    def _client_factory(*, timeout: Any) -> httpx.AsyncClient:
        recorder.timeouts.append(timeout)
        return _REAL_ASYNC_CLIENT(transport=transport_factory(), timeout=timeout)

    monkeypatch.setattr(hc_mod.httpx, "AsyncClient", _client_factory)
    return recorder


@pytest.fixture()
def async_transport(monkeypatch: pytest.MonkeyPatch, echo_app: FastAPI) -> AsyncTransport:
    return _patch_async_client(monkeypatch, lambda: httpx.ASGITransport(app=echo_app))


@pytest.fixture()
def patch_async_transport(monkeypatch: pytest.MonkeyPatch):
    """Lets a test install its own httpx transport (e.g. httpx.MockTransport)."""

    def _install(transport_factory: Callable[[], httpx.AsyncBaseTransport]) -> AsyncTransport:
        return _patch_async_client(monkeypatch, transport_factory)

    return _install


class _LiveHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def log_message(self, format: str, *args: Any) -> None:
        return None

    def _reply(self, status: int, body: bytes = b"", content_type: Optional[str] = None, **headers: str) -> None:
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        for name, value in headers.items():
            self.send_header(name.replace("_", "-"), value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _route(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)

        path = self.path.split("?", 1)[0]
        if path == "/old":
            self._reply(301, Location="/new")
        elif path == "/new":
            self._reply(200, b"new ok", "text/plain; charset=utf-8")
        elif path == "/plain-utf8":
            self._reply(200, "héllo".encode("utf-8"), "text/plain")
        elif path == "/truncated":
            # Promise more bytes than are sent, then drop the connection.
            self.send_response(200)
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", "100")
            self.end_headers()
            self.wfile.write(b"short")
            self.wfile.flush()
            self.close_connection = True
        else:
            self._reply(404, b"missing", "text/plain")

    do_GET = _route
    do_POST = _route


@pytest.fixture()
def live_server(monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Base URL (with trailing slash) of a loopback server; proxies disabled."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    server = ThreadingHTTPServer(("127.0.0.1", 0), _LiveHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/"
    finally:
        server.shutdown()
        server.server_close()
