"""Transports that POST a single chunk as multipart form data.

The coordinator drives a transport through ``perform`` and receives progress
and response data back through the hooks registered with ``set_hooks``. A
hook returning ``HookResult.ABORT`` ends the transfer early.

This is an internal implementation detail. Use ``Uploader`` from
``webmctl.services.uploads`` as the public API.
"""

from __future__ import annotations

import logging
import socket
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from typing import Any
from dataclasses import dataclass, field
from enum import Enum

import httpx

from webmctl.core.exceptions import (
    HeaderConfigError,
    TransferAbortedError,
    TransferError,
    TransportInitError,
    UrlConfigError,
)
from webmctl.uploaders.constants import (
    CHUNK_CONTENT_TYPE,
    CHUNK_FORM_NAME,
    DEFAULT_TIMEOUT,
    UPLOAD_SLICE_SIZE,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Hooks
# =============================================================================


class HookResult(Enum):
    """Value returned by transport hooks."""

    CONTINUE = "continue"
    ABORT = "abort"


ProgressHook = Callable[[int], HookResult]
ResponseHook = Callable[[bytes], HookResult]


# =============================================================================
# Request
# =============================================================================


@dataclass(frozen=True)
class ChunkRequest:
    """One multipart POST: form fields in order, then the chunk file field."""

    payload: bytes | memoryview
    filename: str
    form_fields: Sequence[tuple[str, str]] = field(default_factory=tuple)
    field_name: str = CHUNK_FORM_NAME
    content_type: str = CHUNK_CONTENT_TYPE

    @property
    def length(self) -> int:
        return len(self.payload)


# =============================================================================
# Transport Interface
# =============================================================================


class Transport(ABC):
    """Wire-level collaborator used by ``UploadCoordinator``.

    Implementations must call the progress hook with the cumulative number of
    chunk bytes sent (never decreasing within one ``perform``) and the response
    hook with each block of response body received. Either hook returning
    ``HookResult.ABORT`` must end the transfer with ``TransferAbortedError``.
    """

    def __init__(self) -> None:
        self._progress_hook: ProgressHook | None = None
        self._response_hook: ResponseHook | None = None
        self._url = ""

    @property
    def url(self) -> str:
        return self._url

    def set_hooks(
        self,
        *,
        progress: ProgressHook | None = None,
        response: ResponseHook | None = None,
    ) -> None:
        """Register the progress and response-data hooks."""
        self._progress_hook = progress
        self._response_hook = response

    @abstractmethod
    def open(self, url: str, headers: Sequence[tuple[str, str]]) -> None:
        """Apply the target URL and request headers.

        Raises:
            UrlConfigError: If the URL cannot be used.
            HeaderConfigError: If a header cannot be used.
            TransportInitError: If the underlying client cannot be created.
        """

    @abstractmethod
    def perform(self, request: ChunkRequest) -> int:
        """POST one chunk and return the response status code.

        Raises:
            TransferAbortedError: If a hook requested an abort.
            TransferError: If the transfer failed.
        """

    def close(self) -> None:
        """Release transport resources."""

    def abort(self) -> None:
        """Interrupt an in-flight ``perform`` from another thread.

        Called after the stop flag is set. A transfer blocked on the network
        must end with ``TransferAbortedError`` without waiting for the next hook
        call. The default does nothing.
        """

    def report_progress(self, bytes_sent: int) -> None:
        """Forward cumulative progress to the hook, raising on abort."""
        if self._progress_hook and self._progress_hook(bytes_sent) is HookResult.ABORT:
            raise TransferAbortedError(self._url)

    def report_response(self, data: bytes) -> None:
        """Forward response bytes to the hook, raising on abort."""
        if self._response_hook and self._response_hook(data) is HookResult.ABORT:
            raise TransferAbortedError(self._url)


# =============================================================================
# httpx Transport
# =============================================================================


class HttpxTransport(Transport):
    """Transport backed by a single reusable ``httpx.Client``.

    The multipart body is encoded by httpx, then streamed in fixed-size
    slices so progress can be reported between writes.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        slice_size: int = UPLOAD_SLICE_SIZE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__()
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.slice_size = max(1, slice_size)
        self._transport = transport
        self._client: httpx.Client | None = None
        self._target: httpx.URL | None = None
        self._headers: httpx.Headers | None = None
        self._socket: socket.socket | None = None
        self._aborted = threading.Event()

    def open(self, url: str, headers: Sequence[tuple[str, str]]) -> None:
        try:
            target = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise UrlConfigError(url, str(e)) from e
        if target.scheme not in ("http", "https") or not target.host:
            raise UrlConfigError(url, "URL must be absolute http(s)")

        try:
            request_headers = httpx.Headers(list(headers))
        except (AttributeError, TypeError, ValueError) as e:
            raise HeaderConfigError(repr(headers), str(e)) from e

        try:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                transport=self._transport,
                follow_redirects=False,
            )
        except (OSError, TypeError, ValueError) as e:
            raise TransportInitError(str(e)) from e

        self._target = target
        self._headers = request_headers
        self._url = url

    def abort(self) -> None:
        """Shut down the connection socket so blocked reads and writes return."""
        self._aborted.set()
        sock = self._socket
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            logger.debug("socket shutdown on abort failed: %s", e)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def perform(self, request: ChunkRequest) -> int:
        if self._client is None or self._target is None:
            raise TransferError(self._url, "transport is not open")
        if self._aborted.is_set():
            raise TransferAbortedError(self._url)

        payload = bytes(request.payload)
        built = self._client.build_request(
            "POST",
            self._target,
            headers=self._headers,
            data=dict(request.form_fields),
            files={request.field_name: (request.filename, payload, request.content_type)},
        )
        body = built.read()
        offset = self._payload_offset(body, payload, built.headers.get("content-type", ""))

        streamed = httpx.Request(
            "POST",
            built.url,
            headers=built.headers,
            content=self._iter_body(body, offset, len(payload)),
            extensions={**built.extensions, "trace": self._trace},
        )

        try:
            response = self._client.send(streamed, stream=True)
            try:
                for data in response.iter_bytes():
                    logger.debug("from server: %r", data[:200])
                    self.report_response(data)
            finally:
                response.close()
        except TransferError:
            raise
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self._aborted.is_set():
                raise TransferAbortedError(self._url) from e
            raise TransferError(self._url, f"{type(e).__name__}: {e}") from e

        logger.debug("server response code: %d", response.status_code)
        if not response.is_success:
            logger.warning("Upload to %s returned HTTP %d", self._url, response.status_code)
        return response.status_code

    def _trace(self, event: str, info: dict[str, Any]) -> None:
        """Remember the socket of each new connection so ``abort`` can reach it."""
        if event == "connection.connect_tcp.complete":
            stream = info.get("return_value")
            if stream is not None:
                self._socket = stream.get_extra_info("socket")

    def _payload_offset(self, body: bytes, payload: bytes, content_type: str) -> int:
        """Locate the chunk bytes inside the encoded multipart body.

        The chunk field is always the last part, so it ends right before the
        closing boundary.
        """
        boundary = content_type.partition("boundary=")[2].strip('"').encode("ascii")
        suffix_len = len(b"\r\n--" + boundary + b"--\r\n")
        start = len(body) - suffix_len - len(payload)
        if not boundary or start < 0 or body[start : start + len(payload)] != payload:
            raise TransferError(self._url, "unexpected multipart framing")
        return start

    def _iter_body(self, body: bytes, offset: int, length: int) -> Iterator[bytes]:
        """Yield body slices, reporting chunk bytes written after each one."""
        self.report_progress(0)
        written = 0
        for start in range(0, len(body), self.slice_size):
            piece = body[start : start + self.slice_size]
            yield piece
            written += len(piece)
            self.report_progress(min(max(written - offset, 0), length))
