"""Tests for webmctl.uploaders.common module."""

from __future__ import annotations

from pathlib import Path

import pytest

from webmctl.core.exceptions import FileReadError, InvalidArgumentError
from webmctl.uploaders.common import FileReader, iter_chunks


class TestFileReader:
    """Tests for the sequential chunk reader."""

    def test_reads_in_order(self, temp_dir: Path):
        path = temp_dir / "stream.webm"
        path.write_bytes(b"abcdefghij")

        with FileReader(path) as reader:
            assert reader.read(4) == b"abcd"
            assert reader.at_eof is False
            assert reader.read(4) == b"efgh"
            assert reader.read(4) == b"ij"
            assert reader.at_eof is True
            assert reader.bytes_read == 10

    def test_exact_multiple_sets_eof_on_next_read(self, temp_dir: Path):
        path = temp_dir / "stream.webm"
        path.write_bytes(b"abcd")

        with FileReader(path) as reader:
            assert reader.read(4) == b"abcd"
            assert reader.at_eof is False
            assert reader.read(4) == b""
            assert reader.at_eof is True

    def test_reads_appended_data_after_eof(self, temp_dir: Path):
        path = temp_dir / "growing.webm"
        path.write_bytes(b"abc")

        with FileReader(path) as reader:
            assert reader.read(10) == b"abc"
            assert reader.at_eof is True
            with open(path, "ab") as f:
                f.write(b"def")
            assert reader.read(10) == b"def"

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileReadError) as exc_info:
            FileReader(temp_dir / "missing.webm").open()
        assert "missing.webm" in str(exc_info.value)

    def test_read_before_open(self, temp_dir: Path):
        with pytest.raises(FileReadError):
            FileReader(temp_dir / "x.webm").read(10)

    @pytest.mark.parametrize("size", [0, -5])
    def test_invalid_size(self, temp_dir: Path, size):
        path = temp_dir / "x.webm"
        path.write_bytes(b"x")
        with FileReader(path) as reader:
            with pytest.raises(InvalidArgumentError):
                reader.read(size)

    def test_close_is_idempotent(self, temp_dir: Path):
        path = temp_dir / "x.webm"
        path.write_bytes(b"x")
        reader = FileReader(path)
        reader.open()
        reader.close()
        reader.close()


class TestIterChunks:
    """Tests for iter_chunks helper."""

    def test_splits_file(self, temp_dir: Path):
        path = temp_dir / "x.webm"
        path.write_bytes(b"0123456789")
        assert list(iter_chunks(path, 4)) == [b"0123", b"4567", b"89"]

    def test_exact_multiple(self, temp_dir: Path):
        path = temp_dir / "x.webm"
        path.write_bytes(b"01234567")
        assert list(iter_chunks(path, 4)) == [b"0123", b"4567"]

    def test_empty_file(self, temp_dir: Path):
        path = temp_dir / "x.webm"
        path.write_bytes(b"")
        assert list(iter_chunks(path, 4)) == []
