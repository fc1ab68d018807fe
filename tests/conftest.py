"""Pytest configuration and shared fixtures for trctl tests."""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Callable

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from trctl.rpc.accumulator import CommandAccumulator
from trctl.rpc.protocol import SESSION_ID_HEADER, TaggedResponse
from trctl.rpc.request import PendingRequest
from trctl.rpc.router import ResponseRouter
from trctl.utils.console_utils import create_console
from trctl.utils.formatting import UnitFormatter


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("asyncio", "marks tests as async (deselect with '-m \"not asyncio\"')"),
        ("integration", "marks tests as integration tests"),
        ("unit", "marks tests as unit tests"),
        ("cli", "marks tests as CLI tests"),
        ("rpc", "marks tests as RPC engine tests"),
        ("config", "marks tests as configuration tests"),
        ("utils", "marks tests as utility tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep user config files and TRCTL_* variables out of the tests."""
    for name in (
        "TRCTL_HOST",
        "TRCTL_PORT",
        "TRCTL_URL_PATH",
        "TRCTL_USE_SSL",
        "TRCTL_AUTH",
        "TRCTL_NETRC",
        "TRCTL_DEBUG",
        "TRCTL_TIMEOUT",
        "TRCTL_BLOCKLIST_TIMEOUT",
        "TRCTL_MAX_SESSION_RETRIES",
        "TRCTL_LOG_LEVEL",
        "TRCTL_LOG_FILE",
        "TR_AUTH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # setup_logging detaches the package logger from root, which hides it from caplog
    trctl_logger = logging.getLogger("trctl")
    trctl_logger.propagate = True
    trctl_logger.setLevel(logging.NOTSET)


class CapturedConsoles:
    """stdout/stderr consoles writing to in-memory buffers."""

    def __init__(self) -> None:
        self.out_buffer = io.StringIO()
        self.err_buffer = io.StringIO()
        self.out = create_console(file=self.out_buffer)
        self.err = create_console(stderr=True, file=self.err_buffer)

    @property
    def stdout(self) -> str:
        return self.out_buffer.getvalue()

    @property
    def stderr(self) -> str:
        return self.err_buffer.getvalue()


@pytest.fixture
def consoles() -> CapturedConsoles:
    """Rich consoles whose output the test can read back."""
    return CapturedConsoles()


class RecordingDispatcher:
    """Dispatcher double: records payloads and answers from a table."""

    def __init__(self, replies: dict[str, Any] | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.replies = replies or {}

    async def execute(self, pending: PendingRequest) -> TaggedResponse:
        self.sent.append(json.loads(pending.to_json()))
        reply = self.replies.get(pending.method)
        if isinstance(reply, Exception):
            raise reply
        envelope = dict(reply) if reply else {"result": "success", "arguments": {}}
        if pending.tag is not None:
            envelope.setdefault("tag", pending.tag)
        return TaggedResponse(**envelope)

    def methods(self) -> list[str]:
        return [p["method"] for p in self.sent]


@pytest.fixture
def make_accumulator(consoles):
    """Factory for an accumulator wired to a recording dispatcher."""

    def _make(replies=None):
        dispatcher = RecordingDispatcher(replies)
        router = ResponseRouter(
            consoles.out, consoles.err, "localhost:9091/transmission/rpc/", UnitFormatter()
        )
        return CommandAccumulator(dispatcher, router, consoles.err), dispatcher

    return _make


Reply = Any  # dict of arguments, a full envelope, or a web.Response


class FakeDaemon:
    """In-process stand-in for the daemon's RPC endpoint.

    Enforces the session-id handshake, records every request that gets
    past it, and answers from ``replies`` keyed by method name. A reply
    may be an arguments dict, a callable taking the request payload, or a
    ready ``web.Response``.
    """

    def __init__(self) -> None:
        self.session_id = "fake-session-1"
        self.require_session = True
        self.replies: dict[str, Reply | Callable[[dict[str, Any]], Reply]] = {}
        self.requests: list[dict[str, Any]] = []
        self.raw_bodies: list[str] = []
        self.headers: list[dict[str, str]] = []
        self.conflicts = 0
        self.url = ""

    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]

    async def handle(self, request: web.Request) -> web.StreamResponse:
        body = await request.text()
        self.raw_bodies.append(body)
        self.headers.append(dict(request.headers))

        if self.require_session and request.headers.get(SESSION_ID_HEADER) != self.session_id:
            self.conflicts += 1
            return web.Response(
                status=409,
                headers={SESSION_ID_HEADER: self.session_id},
                text="<h1>409: Conflict</h1>",
            )

        payload = json.loads(body)
        self.requests.append(payload)

        reply = self.replies.get(payload["method"], {})
        if callable(reply):
            reply = reply(payload)
        if isinstance(reply, web.StreamResponse):
            return reply

        if isinstance(reply, dict) and "result" in reply:
            envelope = dict(reply)
        else:
            envelope = {"result": "success", "arguments": reply or {}}
        if "tag" in payload and "tag" not in envelope:
            envelope["tag"] = payload["tag"]
        return web.json_response(envelope)


@pytest_asyncio.fixture
async def fake_daemon():
    """Fake daemon served on a local port for the duration of one test."""
    daemon = FakeDaemon()
    app = web.Application()
    app.router.add_post("/transmission/rpc/", daemon.handle)
    server = TestServer(app)
    await server.start_server()
    daemon.url = f"{server.host}:{server.port}/transmission/rpc/"
    try:
        yield daemon
    finally:
        await server.close()
