"""Background upload engine.

``UploadCoordinator`` owns one worker thread, a single-slot ``TransferBuffer``,
the transfer stats, and the stop flag. Producers hand it chunks through
``submit``; the worker posts each one with a ``Transport`` and goes back to
waiting.

Locking: every piece of shared state (buffer ownership, stats, complete flag,
stop flag) is guarded by ``_lock``. ``submit`` and ``is_complete`` only ever
try the lock without blocking, so a producer thread is never held up by the
worker. The worker drops the lock for the duration of ``Transport.perform``.

This is an internal implementation detail. Use ``Uploader`` from
``webmctl.services.uploads`` as the public API.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from webmctl.core.exceptions import (
    AlreadyClaimedError,
    InvalidArgumentError,
    TransferAbortedError,
    TransferError,
    TransportInitError,
    WebmCtlError,
)
from webmctl.core.logging import LogContext
from webmctl.core.status import UploadStatus
from webmctl.core.validation import validate_form_variables, validate_headers, validate_target_url
from webmctl.models.progress import UploadStats, WorkerState
from webmctl.models.settings import UploadSettings
from webmctl.uploaders.buffer import TransferBuffer
from webmctl.uploaders.constants import EXPECT_HEADER
from webmctl.uploaders.transport import ChunkRequest, HookResult, HttpxTransport, Transport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Transport]


class UploadCoordinator:
    """Single-worker chunk uploader.

    Lifecycle: ``init`` -> ``run`` -> any number of ``submit`` calls ->
    ``stop``. A coordinator cannot be restarted after ``stop``.
    """

    def __init__(self, transport_factory: TransportFactory | None = None) -> None:
        self._transport_factory = transport_factory or HttpxTransport
        self._transport: Transport | None = None
        self._settings: UploadSettings | None = None

        self._lock = threading.Lock()
        self._buffer_ready = threading.Condition(self._lock)
        self._buffer = TransferBuffer()
        self._thread: threading.Thread | None = None

        self._stop = False
        self._upload_complete = True
        self._state = WorkerState.IDLE

        self._bytes_sent = 0
        self._bytes_per_second = 0.0
        self._start_time = time.monotonic()

        self._transfers = 0
        self._failures = 0
        self._last_error: WebmCtlError | None = None

    # =========================================================================
    # Setup
    # =========================================================================

    @property
    def settings(self) -> UploadSettings | None:
        return self._settings

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def init(self, settings: UploadSettings | Mapping[str, Any] | None) -> None:
        """Validate settings and prepare the transport.

        Args:
            settings: Session settings. A mapping is validated into
                ``UploadSettings``.

        Raises:
            InvalidArgumentError: If settings are missing or empty.
            UrlConfigError: If the target URL is unusable.
            HeaderConfigError: If a custom header is unusable.
            TransportInitError: If the transport cannot be created.
            RuntimeError: If called after ``run`` or ``stop``.
        """
        if self._thread is not None or self._stop:
            raise RuntimeError("UploadCoordinator.init called after run or stop")
        if not settings:
            raise InvalidArgumentError("Upload settings are required", field="settings")
        try:
            if isinstance(settings, UploadSettings):
                settings = settings.model_copy(deep=True)
            else:
                settings = UploadSettings.model_validate(dict(settings))
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Invalid upload settings: {e}", field="settings") from e

        if not settings.target_url:
            raise InvalidArgumentError("Target URL is required", field="target_url")

        url = validate_target_url(settings.target_url)
        headers = validate_headers(settings.headers)
        validate_form_variables(settings.form_variables)

        try:
            transport = self._transport_factory()
        except WebmCtlError:
            raise
        except Exception as e:
            raise TransportInitError(str(e)) from e

        # Empty Expect header disables 100-continue handshakes
        header_list = [(EXPECT_HEADER, "")] + list(headers.items())
        transport.open(url, header_list)
        transport.set_hooks(progress=self._on_progress, response=self._on_response_data)

        if self._transport is not None:
            self._transport.close()
        self._transport = transport
        self._settings = settings
        self._reset_stats()
        logger.debug("uploader initialized for %s", url)

    def run(self) -> None:
        """Start the background worker.

        Raises:
            RuntimeError: If called before ``init`` or more than once.
        """
        if self._transport is None:
            raise RuntimeError("UploadCoordinator.run called before init")
        if self._thread is not None:
            raise RuntimeError("UploadCoordinator.run called twice; worker already started")

        self._thread = threading.Thread(
            target=self._upload_thread,
            name="webmctl-uploader",
            daemon=True,
        )
        self._thread.start()

    # =========================================================================
    # Producer API
    # =========================================================================

    def submit(self, data: bytes | bytearray | memoryview, length: int | None = None) -> UploadStatus:
        """Hand a chunk to the worker without blocking.

        Returns:
            ``ACCEPTED`` when the chunk was taken, ``UPLOAD_IN_PROGRESS`` when a
            chunk is in flight or the coordinator is busy, ``STOPPING`` once
            ``stop`` has been called, ``INVALID_ARGUMENT`` for empty input.
        """
        if not self._lock.acquire(blocking=False):
            return UploadStatus.UPLOAD_IN_PROGRESS
        try:
            if self._stop:
                return UploadStatus.STOPPING
            try:
                self._buffer.try_claim(data, length)
            except AlreadyClaimedError:
                return UploadStatus.UPLOAD_IN_PROGRESS
            except InvalidArgumentError as e:
                logger.debug("rejected chunk: %s", e)
                return UploadStatus.INVALID_ARGUMENT

            self._upload_complete = False
            logger.debug("waking uploader with %d bytes", self._buffer.length)
            self._buffer_ready.notify()
            return UploadStatus.ACCEPTED
        finally:
            self._lock.release()

    def stats(self) -> UploadStats:
        """Return a consistent snapshot of the current transfer stats."""
        with self._lock:
            return UploadStats(
                bytes_sent=self._bytes_sent,
                bytes_per_second=self._bytes_per_second,
            )

    def is_complete(self) -> bool:
        """Poll the transfer-complete flag without blocking.

        Reports ``False`` whenever the lock is busy, even if nothing is
        pending.
        """
        if not self._lock.acquire(blocking=False):
            return False
        try:
            return self._upload_complete
        finally:
            self._lock.release()

    def stop(self) -> None:
        """Stop the worker and wait for it to exit.

        An in-flight transfer is aborted at its next hook call. Safe to call
        more than once.
        """
        with self._lock:
            self._stop = True
            self._buffer_ready.notify_all()

        if self._transport is not None:
            self._transport.abort()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

        if self._transport is not None:
            self._transport.close()
        self._state = WorkerState.TERMINATED

    # =========================================================================
    # Transport Hooks
    # =========================================================================

    def _stop_requested(self) -> bool:
        with self._lock:
            return self._stop

    def _on_progress(self, bytes_sent: int) -> HookResult:
        """Record cumulative progress; abort the transfer on stop."""
        with self._lock:
            if self._stop:
                logger.debug("stop requested during upload")
                return HookResult.ABORT
            self._bytes_sent = int(bytes_sent)
            elapsed = time.monotonic() - self._start_time
            self._bytes_per_second = bytes_sent / elapsed if elapsed > 0 else 0.0
        return HookResult.CONTINUE

    def _on_response_data(self, data: bytes) -> HookResult:
        """Discard response bytes; abort the transfer on stop."""
        if self._stop_requested():
            logger.debug("stop requested while reading response")
            return HookResult.ABORT
        return HookResult.CONTINUE

    # =========================================================================
    # Worker
    # =========================================================================

    def _reset_stats(self) -> None:
        with self._lock:
            self._bytes_sent = 0
            self._bytes_per_second = 0.0
            self._start_time = time.monotonic()

    def _wait_for_user_data(self) -> bool:
        """Idle until a chunk is claimed or stop is requested.

        Returns:
            True if there is a chunk to upload.
        """
        with self._lock:
            while not self._stop and not self._buffer.is_claimed:
                self._buffer_ready.wait()
            return not self._stop

    def _upload(self) -> None:
        """Post the claimed chunk, then release the buffer."""
        transport = self._transport
        settings = self._settings
        if transport is None or settings is None:
            raise RuntimeError("UploadCoordinator worker started before init")

        request = ChunkRequest(
            payload=self._buffer.view(),
            filename=settings.local_file,
            form_fields=tuple(settings.form_variables.items()),
        )
        self._reset_stats()
        self._state = WorkerState.TRANSFERRING
        self._transfers += 1

        try:
            with LogContext(
                "chunk upload",
                logger,
                nbytes=request.length,
                expected=(TransferAbortedError,),
                transfer=self._transfers,
            ):
                status_code = transport.perform(request)
            logger.debug("chunk upload %d complete, HTTP %d", self._transfers, status_code)
        except TransferAbortedError:
            logger.info("chunk upload %d aborted by stop request", self._transfers)
        except TransferError as e:
            self._failures += 1
            self._last_error = e
            logger.warning(
                "chunk upload %d failed (%d failures so far): %s", self._transfers, self._failures, e
            )
        except Exception as e:
            self._failures += 1
            self._last_error = TransferError(transport.url, f"{type(e).__name__}: {e}")
            logger.exception("unexpected error during chunk upload")
        finally:
            with self._lock:
                self._buffer.release()
                self._upload_complete = True
            self._state = WorkerState.IDLE

    def _upload_thread(self) -> None:
        logger.debug("upload worker running")
        while self._wait_for_user_data():
            self._upload()
        self._state = WorkerState.TERMINATED
        logger.debug("upload worker done")
