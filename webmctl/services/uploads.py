"""Upload service for webmctl.

``Uploader`` is the public face of the upload engine. ``upload_file`` drives
an uploader over a local (optionally still growing) WebM file, one chunk at a
time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from webmctl.core.exceptions import UploadError
from webmctl.core.status import UploadStatus
from webmctl.models.progress import OperationPhase, UploadProgress, UploadStats, UploadSummary
from webmctl.models.settings import UploadSettings
from webmctl.uploaders.common import FileReader
from webmctl.uploaders.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_WAIT_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
)
from webmctl.uploaders.coordinator import TransportFactory, UploadCoordinator

logger = logging.getLogger(__name__)


# =============================================================================
# Uploader
# =============================================================================


class Uploader:
    """Chunked HTTP uploader.

    Thin wrapper around one ``UploadCoordinator``. Typical use::

        uploader = Uploader()
        uploader.init(UploadSettings(target_url="https://example.org/up"))
        uploader.run()
        if uploader.submit(chunk) is UploadStatus.ACCEPTED:
            ...
        uploader.stop()
    """

    def __init__(self, transport_factory: TransportFactory | None = None) -> None:
        self._transport_factory = transport_factory
        self._coordinator: UploadCoordinator | None = None

    def __enter__(self) -> Uploader:
        return self

    def __exit__(self, *args: Any) -> None:
        if self._coordinator is not None:
            self._coordinator.stop()

    def _require(self) -> UploadCoordinator:
        if self._coordinator is None:
            raise RuntimeError("Uploader used before init")
        return self._coordinator

    def init(self, settings: UploadSettings | Mapping[str, Any] | None) -> None:
        """Create the coordinator and apply settings.

        Raises:
            InvalidArgumentError: If settings are missing or empty.
            UrlConfigError: If the target URL is unusable.
            HeaderConfigError: If a custom header is unusable.
            TransportInitError: If the transport cannot be created.
            RuntimeError: If the worker of an earlier ``init`` is still running.
        """
        if self._coordinator is not None and self._coordinator.is_running:
            raise RuntimeError("Uploader.init called while the worker is running; call stop first")
        coordinator = UploadCoordinator(self._transport_factory)
        coordinator.init(settings)
        self._coordinator = coordinator

    def run(self) -> None:
        """Start the background upload worker."""
        self._require().run()

    def submit(self, data: bytes | bytearray | memoryview, length: int | None = None) -> UploadStatus:
        """Hand a chunk to the uploader without blocking."""
        if self._coordinator is None:
            return UploadStatus.INVALID_ARGUMENT
        return self._coordinator.submit(data, length)

    def stats(self) -> UploadStats:
        """Return current transfer stats."""
        return self._require().stats()

    def is_complete(self) -> bool:
        """True when no chunk is pending (see ``UploadCoordinator.is_complete``)."""
        if self._coordinator is None:
            return False
        return self._coordinator.is_complete()

    def stop(self) -> None:
        """Stop the worker and wait for it to exit."""
        self._require().stop()


# =============================================================================
# File Upload Session
# =============================================================================


def _wait_until_ready(
    uploader: Uploader,
    *,
    timeout: float,
    poll_interval: float,
    on_poll: Callable[[UploadStats], None] | None = None,
) -> None:
    """Poll until the uploader reports no pending chunk.

    Raises:
        UploadError: If the uploader stays busy longer than ``timeout``.
    """
    deadline = time.monotonic() + timeout
    while not uploader.is_complete():
        if on_poll:
            on_poll(uploader.stats())
        if time.monotonic() >= deadline:
            raise UploadError(f"Chunk upload did not finish within {timeout:.0f}s")
        time.sleep(poll_interval)


def _submit_when_ready(
    uploader: Uploader,
    data: bytes,
    *,
    timeout: float,
    poll_interval: float,
    on_poll: Callable[[UploadStats], None] | None = None,
) -> None:
    """Submit a chunk, retrying while the uploader is busy.

    Raises:
        UploadError: If the uploader is stopping or stays busy too long.
    """
    deadline = time.monotonic() + timeout
    while True:
        _wait_until_ready(uploader, timeout=timeout, poll_interval=poll_interval, on_poll=on_poll)
        status = uploader.submit(data)
        if status is UploadStatus.ACCEPTED:
            return
        if status is not UploadStatus.UPLOAD_IN_PROGRESS:
            raise UploadError(f"Chunk rejected: {status.value}")
        if time.monotonic() >= deadline:
            raise UploadError(f"Uploader stayed busy for {timeout:.0f}s")
        time.sleep(poll_interval)


def upload_file(
    uploader: Uploader,
    path: Path | str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    follow: bool = False,
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    chunk_timeout: float = DEFAULT_CHUNK_WAIT_TIMEOUT,
    progress_callback: Callable[[UploadProgress], None] | None = None,
) -> UploadSummary:
    """Upload a file through a running uploader, one chunk per POST.

    Args:
        uploader: Initialized and running uploader.
        path: File to read.
        chunk_size: Bytes per chunk.
        follow: Keep reading as the file grows until it stays unchanged for
            ``idle_timeout`` seconds.
        idle_timeout: Seconds of no growth that end a followed session.
        poll_interval: Seconds between readiness polls.
        chunk_timeout: Seconds to wait for any single chunk.
        progress_callback: Optional callback for progress updates.

    Returns:
        UploadSummary with results. Individual chunk failures are not visible
        to the session; only timeouts and rejections are reported.
    """
    path = Path(path)
    start_time = time.time()
    errors: list[str] = []
    chunks = 0
    total_bytes = 0
    chunk_bytes = 0

    def report(phase: OperationPhase, stats: UploadStats | None = None, message: str = "") -> None:
        """Invoke the progress callback if provided."""
        if progress_callback:
            progress_callback(
                UploadProgress(
                    phase=phase,
                    chunk_index=chunks,
                    bytes_sent=stats.bytes_sent if stats else 0,
                    chunk_bytes=chunk_bytes,
                    total_bytes=total_bytes,
                    bytes_per_second=stats.bytes_per_second if stats else 0.0,
                    message=message,
                )
            )

    def on_poll(stats: UploadStats) -> None:
        report(OperationPhase.UPLOADING, stats)

    report(OperationPhase.PREPARING, message=f"Opening {path.name}")

    try:
        with FileReader(path) as reader:
            idle_since = time.monotonic()
            while True:
                data = reader.read(chunk_size)
                if data:
                    idle_since = time.monotonic()
                    _submit_when_ready(
                        uploader,
                        data,
                        timeout=chunk_timeout,
                        poll_interval=poll_interval,
                        on_poll=on_poll,
                    )
                    chunks += 1
                    chunk_bytes = len(data)
                    total_bytes += len(data)
                    logger.debug("submitted chunk %d (%d bytes)", chunks, len(data))
                    report(OperationPhase.UPLOADING, message=f"Submitted chunk {chunks}")
                    continue

                if not follow or time.monotonic() - idle_since >= idle_timeout:
                    break
                report(OperationPhase.WAITING, message="Waiting for more data")
                time.sleep(poll_interval)

        _wait_until_ready(uploader, timeout=chunk_timeout, poll_interval=poll_interval, on_poll=on_poll)
    except UploadError as e:
        errors.append(str(e))

    success = not errors
    report(
        OperationPhase.COMPLETE if success else OperationPhase.ERROR,
        message="Upload complete!" if success else f"Upload stopped: {errors[0]}",
    )
    if not success:
        logger.warning("Upload of %s stopped after %d chunks", path, chunks)

    return UploadSummary(
        success=success,
        chunks_submitted=chunks,
        total_bytes=total_bytes,
        duration=time.time() - start_time,
        file_path=str(path),
        errors=errors,
    )
