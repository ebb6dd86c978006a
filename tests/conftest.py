"""Pytest configuration and fixtures for webmctl tests."""

from __future__ import annotations

import tempfile
import threading
import time
from collections.abc import Callable, Sequence
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Generator

import pytest

from webmctl.core.status import UploadStatus
from webmctl.models.settings import UploadSettings
from webmctl.uploaders.coordinator import UploadCoordinator
from webmctl.uploaders.transport import ChunkRequest, Transport


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def submit_eventually(coordinator, data, length=None, timeout: float = 5.0) -> UploadStatus:
    """Submit, retrying while the worker briefly holds the lock."""
    deadline = time.monotonic() + timeout
    status = coordinator.submit(data, length)
    while status is UploadStatus.UPLOAD_IN_PROGRESS and time.monotonic() < deadline:
        time.sleep(0.005)
        status = coordinator.submit(data, length)
    return status


class StubTransport(Transport):
    """In-memory transport that records every call.

    Args:
        steps: Progress values reported per transfer; defaults to
            ``0, len/2, len``.
        gate: If set, ``perform`` holds the transfer open until the event is
            set, reporting progress while it waits so stop requests are seen.
        error: Exception raised at the end of ``perform``.
        observer: Called after each progress report.
    """

    def __init__(
        self,
        *,
        steps: Sequence[int] | None = None,
        gate: threading.Event | None = None,
        error: Exception | None = None,
        observer: Callable[[int], None] | None = None,
    ) -> None:
        super().__init__()
        self.steps = steps
        self.gate = gate
        self.error = error
        self.observer = observer
        self.started = threading.Event()
        self.calls = 0
        self.closed = False
        self.aborted = False
        self.headers: list[tuple[str, str]] = []
        self.requests: list[ChunkRequest] = []
        self.payloads_at_start: list[bytes] = []
        self.payloads_at_end: list[bytes] = []

    def open(self, url: str, headers: Sequence[tuple[str, str]]) -> None:
        self._url = url
        self.headers = list(headers)

    def close(self) -> None:
        self.closed = True

    def abort(self) -> None:
        self.aborted = True

    def _progress(self, value: int) -> None:
        self.report_progress(value)
        if self.observer:
            self.observer(value)

    def perform(self, request: ChunkRequest) -> int:
        self.calls += 1
        self.requests.append(request)
        self.payloads_at_start.append(bytes(request.payload))
        self.started.set()

        steps = self.steps if self.steps is not None else [0, request.length // 2, request.length]
        for value in steps:
            self._progress(value)

        if self.gate is not None:
            last = steps[-1] if steps else 0
            while not self.gate.wait(0.01):
                self._progress(last)

        self.payloads_at_end.append(bytes(request.payload))
        if self.error is not None:
            raise self.error
        self.report_response(b"OK")
        return 200


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings() -> UploadSettings:
    """Minimal upload settings."""
    return UploadSettings(
        target_url="http://x.test/up",
        headers={"X-Stream": "cam1"},
        form_variables={"session": "abc", "seq": "1"},
        local_file="live.webm",
    )


@pytest.fixture
def stub() -> StubTransport:
    """Non-failing stub transport."""
    return StubTransport()


@pytest.fixture
def make_coordinator(settings: UploadSettings) -> Generator[Callable[..., UploadCoordinator], None, None]:
    """Build initialized, running coordinators and stop them after the test."""
    created: list[UploadCoordinator] = []

    def factory(transport: Transport, *, run: bool = True) -> UploadCoordinator:
        coordinator = UploadCoordinator(lambda: transport)
        coordinator.init(settings)
        if run:
            coordinator.run()
        created.append(coordinator)
        return coordinator

    yield factory

    for coordinator in created:
        coordinator.stop()


class _StallingHandler(BaseHTTPRequestHandler):
    """Reads the request body, then holds the response until released."""

    def do_POST(self) -> None:
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self.server.received.set()  # type: ignore[attr-defined]
        self.server.release.wait(30)  # type: ignore[attr-defined]

    def log_message(self, format: str, *args) -> None:
        pass


@pytest.fixture
def stalling_server(monkeypatch) -> Generator[ThreadingHTTPServer, None, None]:
    """Local HTTP server that accepts a POST body but never answers it.

    Exposes ``url``, and ``received`` (set once a body has been read).
    """
    for var in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(var, raising=False)

    server = ThreadingHTTPServer(("127.0.0.1", 0), _StallingHandler)
    server.received = threading.Event()  # type: ignore[attr-defined]
    server.release = threading.Event()  # type: ignore[attr-defined]
    server.url = f"http://127.0.0.1:{server.server_address[1]}/up"  # type: ignore[attr-defined]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.release.set()  # type: ignore[attr-defined]
    server.shutdown()
    server.server_close()


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test

profiles:
  test:
    url: https://media.example.org/upload
    verify_ssl: false
    timeout: 30
    chunk_size: 65536
    headers:
      Authorization: Bearer abc
    form_variables:
      stream: cam1

  production:
    url: https://live.example.org/upload
    verify_ssl: true
    timeout: 60
"""
