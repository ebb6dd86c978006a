"""Common utilities for uploader modules."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Optional

from webmctl.core.exceptions import FileReadError, InvalidArgumentError

logger = logging.getLogger(__name__)


class FileReader:
    """Sequential chunked reader over a local file.

    The file may still be growing while it is read: reaching EOF only means
    no more bytes are available yet, and a later ``read`` may return data.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None
        self._at_eof = False
        self.bytes_read = 0

    def __enter__(self) -> FileReader:
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def at_eof(self) -> bool:
        """True if the last read hit the current end of the file."""
        return self._at_eof

    def open(self) -> None:
        """Open the file for reading.

        Raises:
            FileReadError: If the file cannot be opened.
        """
        if self._file is not None:
            return
        try:
            self._file = self.path.open("rb")
        except OSError as e:
            raise FileReadError(str(self.path), e.strerror or str(e)) from e
        logger.debug("opened %s", self.path)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def read(self, num_bytes: int) -> bytes:
        """Read up to ``num_bytes`` from the current position.

        Returns:
            The bytes read; empty when no data is available yet.

        Raises:
            InvalidArgumentError: If ``num_bytes`` is not positive.
            FileReadError: If the file is not open or the read fails.
        """
        if num_bytes <= 0:
            raise InvalidArgumentError("Read size must be positive", field="num_bytes", value=num_bytes)
        if self._file is None:
            raise FileReadError(str(self.path), "file is not open")
        try:
            data = self._file.read(num_bytes)
        except OSError as e:
            raise FileReadError(str(self.path), e.strerror or str(e)) from e

        self._at_eof = len(data) < num_bytes
        self.bytes_read += len(data)
        return data


def iter_chunks(path: Path | str, chunk_size: int) -> Iterator[bytes]:
    """Yield consecutive chunks of a file until EOF.

    Args:
        path: File to read.
        chunk_size: Maximum bytes per chunk.

    Yields:
        Non-empty chunks; only the last may be shorter than ``chunk_size``.
    """
    with FileReader(path) as reader:
        while True:
            data = reader.read(chunk_size)
            if data:
                yield data
            if reader.at_eof:
                break
