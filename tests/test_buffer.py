"""Tests for webmctl.uploaders.buffer module."""

from __future__ import annotations

import threading

import pytest

from webmctl.core.exceptions import AlreadyClaimedError, InvalidArgumentError, NotClaimedError
from webmctl.core.status import UploadStatus
from webmctl.uploaders.buffer import TransferBuffer


class TestTransferBuffer:
    """Tests for single-slot buffer ownership."""

    def test_starts_unclaimed(self):
        buffer = TransferBuffer()
        assert buffer.is_claimed is False
        assert buffer.length == 0

    def test_claim_copies_data(self):
        buffer = TransferBuffer()
        source = bytearray(b"abcdef")
        buffer.try_claim(source)
        source[0:3] = b"xyz"
        assert bytes(buffer.view()) == b"abcdef"
        assert buffer.length == 6

    def test_claim_with_explicit_length(self):
        buffer = TransferBuffer()
        buffer.try_claim(b"abcdef", 3)
        assert bytes(buffer.view()) == b"abc"

    def test_second_claim_rejected(self):
        buffer = TransferBuffer()
        buffer.try_claim(b"first")

        with pytest.raises(AlreadyClaimedError) as exc_info:
            buffer.try_claim(b"second")

        assert exc_info.value.status is UploadStatus.UPLOAD_IN_PROGRESS
        assert bytes(buffer.view()) == b"first"

    def test_release_allows_new_claim(self):
        buffer = TransferBuffer()
        buffer.try_claim(b"first")
        buffer.release()
        buffer.try_claim(b"second")
        assert bytes(buffer.view()) == b"second"

    def test_release_unclaimed_raises(self):
        with pytest.raises(NotClaimedError):
            TransferBuffer().release()

    def test_view_unclaimed_raises(self):
        with pytest.raises(NotClaimedError):
            TransferBuffer().view()

    @pytest.mark.parametrize(
        "data,length",
        [(None, None), (b"", None), (b"abc", 0), (b"abc", -1), (b"abc", 4)],
    )
    def test_invalid_input(self, data, length):
        buffer = TransferBuffer()
        with pytest.raises(InvalidArgumentError):
            buffer.try_claim(data, length)
        assert buffer.is_claimed is False

    def test_concurrent_claims_single_winner(self):
        buffer = TransferBuffer()
        barrier = threading.Barrier(8)
        winners: list[int] = []
        lock = threading.Lock()

        def contend(index: int) -> None:
            barrier.wait()
            try:
                buffer.try_claim(bytes([index]) * 4)
            except AlreadyClaimedError:
                return
            with lock:
                winners.append(index)

        threads = [threading.Thread(target=contend, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(winners) == 1
        assert bytes(buffer.view()) == bytes([winners[0]]) * 4
