"""Logging utilities for webmctl.

All webmctl modules log through ``logging.getLogger(__name__)``, so everything
lives under the ``webmctl`` logger. ``setup_logging`` attaches one stderr
handler there; ``LogContext`` times a single operation such as a chunk upload.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import IO, Any, Optional

# =============================================================================
# Constants
# =============================================================================

PACKAGE_LOGGER = "webmctl"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


# =============================================================================
# Logger Setup
# =============================================================================


class _PackageHandler(logging.StreamHandler):
    """Handler installed by ``setup_logging``.

    Without an explicit stream it writes to whatever ``sys.stderr`` is at emit
    time.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        super().__init__(stream)
        self._fixed = stream

    @property  # type: ignore[override]
    def stream(self) -> IO[str]:
        return self._fixed or sys.stderr

    @stream.setter
    def stream(self, value: Optional[IO[str]]) -> None:
        self._fixed = value


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure the ``webmctl`` logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Base logging level.
        quiet: If True, only show errors.
        verbose: If True, show debug messages (including the worker thread name).
        stream: Destination; defaults to stderr.

    Returns:
        The package logger.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, _PackageHandler):
            logger.removeHandler(handler)

    handler = _PackageHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Log Context
# =============================================================================


class LogContext:
    """Time one operation and log how it ended.

    Start is logged at DEBUG, success at INFO with the elapsed time and, when
    ``nbytes`` is given, the average rate. Exceptions listed in ``expected``
    are logged at INFO; anything else at ERROR. Exceptions always propagate.

    Example::

        with LogContext("chunk upload", logger, nbytes=len(chunk), transfer=3):
            transport.perform(request)
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        *,
        nbytes: Optional[int] = None,
        expected: tuple[type[BaseException], ...] = (),
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.nbytes = nbytes
        self.expected = expected
        self.context = context
        self._started: Optional[float] = None

    def __enter__(self) -> LogContext:
        self._started = time.monotonic()
        self.logger.debug("Starting %s (%s)", self.operation, self._context_str())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        elapsed = self.elapsed
        if exc_type is None:
            self.logger.info(
                "%s completed in %.2fs%s (%s)",
                self.operation,
                elapsed,
                self._rate_str(elapsed),
                self._context_str(),
            )
        elif self.expected and issubclass(exc_type, self.expected):
            self.logger.info("%s ended after %.2fs: %s", self.operation, elapsed, exc_val)
        else:
            self.logger.error("%s failed after %.2fs: %s", self.operation, elapsed, exc_val)

    @property
    def elapsed(self) -> float:
        """Seconds since the context was entered."""
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started

    def _context_str(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.context.items())

    def _rate_str(self, elapsed: float) -> str:
        if self.nbytes is None or elapsed <= 0:
            return ""
        return f", {self.nbytes / elapsed / (1024 * 1024):.2f} MB/s"

