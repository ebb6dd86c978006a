"""Single-slot handoff buffer shared by producer and upload worker.

This is an internal implementation detail of ``UploadCoordinator``.
"""

from __future__ import annotations

import threading

from webmctl.core.exceptions import AlreadyClaimedError, InvalidArgumentError, NotClaimedError


class TransferBuffer:
    """Holds at most one pending chunk.

    Ownership moves FREE -> CLAIMED on ``try_claim`` and back on ``release``.
    The claim is a non-blocking acquire of an ownership lock, so two claims
    can never both succeed without a release in between. Each claim
    stores an owned copy of the chunk.
    """

    def __init__(self) -> None:
        self._owner = threading.Lock()
        self._data = b""
        self._length = 0

    @property
    def is_claimed(self) -> bool:
        return self._owner.locked()

    @property
    def length(self) -> int:
        return self._length

    def try_claim(self, data: bytes | bytearray | memoryview, length: int | None = None) -> None:
        """Copy ``data[:length]`` into the slot and mark it claimed.

        Args:
            data: Chunk bytes.
            length: Number of leading bytes to take; defaults to all of ``data``.

        Raises:
            InvalidArgumentError: If the effective length is zero, negative, or
                larger than ``data``.
            AlreadyClaimedError: If a chunk is already in the slot.
        """
        if data is None:
            raise InvalidArgumentError("Chunk data is required", field="data")
        try:
            view = memoryview(data).cast("B")
        except TypeError as e:
            raise InvalidArgumentError(f"Chunk data must be bytes-like: {e}", field="data") from e
        if length is None:
            length = len(view)
        if length <= 0:
            raise InvalidArgumentError("Chunk length must be positive", field="length", value=length)
        if length > len(view):
            raise InvalidArgumentError(
                "Chunk length exceeds data size", field="length", value=length
            )

        if not self._owner.acquire(blocking=False):
            raise AlreadyClaimedError(self._length)

        self._data = view[:length].tobytes()
        self._length = length

    def release(self) -> None:
        """Mark the slot free.

        Raises:
            NotClaimedError: If the slot is already free.
        """
        try:
            self._owner.release()
        except RuntimeError:
            raise NotClaimedError("release") from None

    def view(self) -> memoryview:
        """Return a read-only view of the claimed chunk.

        Raises:
            NotClaimedError: If the slot is free.
        """
        if not self._owner.locked():
            raise NotClaimedError("view")
        return memoryview(self._data)
