"""Tests for webmctl.models, status codes and exceptions."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from webmctl.core.exceptions import (
    AlreadyClaimedError,
    FileReadError,
    HeaderConfigError,
    InvalidArgumentError,
    TransferAbortedError,
    TransferError,
    TransportInitError,
    UploadError,
    UrlConfigError,
    WebmCtlError,
)
from webmctl.core.output import format_bytes
from webmctl.core.status import UploadStatus
from webmctl.models.progress import OperationPhase, UploadProgress, UploadStats, UploadSummary
from webmctl.models.settings import UploadSettings

# =============================================================================
# Settings Tests
# =============================================================================


class TestUploadSettings:
    """Tests for UploadSettings model."""

    def test_defaults(self):
        settings = UploadSettings(target_url="http://x.test/up")
        assert settings.headers == {}
        assert settings.form_variables == {}
        assert settings.local_file == "chunk.webm"

    def test_frozen(self):
        settings = UploadSettings(target_url="http://x.test/up")
        with pytest.raises(ValidationError):
            settings.target_url = "http://other.test"

    def test_extra_forbidden(self):
        with pytest.raises(ValidationError):
            UploadSettings(target_url="http://x.test/up", retries=3)

    def test_values_kept_verbatim(self):
        settings = UploadSettings(target_url="http://x.test/up", form_variables={"note": " padded "})
        assert settings.form_variables["note"] == " padded "

    def test_to_dict(self):
        data = UploadSettings(target_url="http://x.test/up", local_file="a.webm").to_dict()
        assert data == {
            "target_url": "http://x.test/up",
            "headers": {},
            "form_variables": {},
            "local_file": "a.webm",
        }


# =============================================================================
# Progress Tests
# =============================================================================


class TestUploadStats:
    """Tests for UploadStats snapshot."""

    def test_defaults(self):
        stats = UploadStats()
        assert stats.bytes_sent == 0
        assert stats.bytes_per_second == 0.0

    def test_mb_sent(self):
        assert UploadStats(bytes_sent=2 * 1024 * 1024).mb_sent == 2.0

    def test_to_dict(self):
        assert UploadStats(10, 2.5).to_dict() == {"bytes_sent": 10, "bytes_per_second": 2.5}


class TestUploadProgress:
    """Tests for UploadProgress."""

    def test_chunk_percent(self):
        progress = UploadProgress(phase=OperationPhase.UPLOADING, bytes_sent=25, chunk_bytes=100)
        assert progress.chunk_percent == 25.0

    def test_chunk_percent_empty(self):
        assert UploadProgress(phase=OperationPhase.PREPARING).chunk_percent == 0.0

    def test_is_complete(self):
        assert UploadProgress(phase=OperationPhase.COMPLETE).is_complete is True
        assert UploadProgress(phase=OperationPhase.ERROR).is_complete is False

    def test_session_bytes_sent(self):
        progress = UploadProgress(
            phase=OperationPhase.UPLOADING, bytes_sent=40, chunk_bytes=100, total_bytes=300
        )
        assert progress.session_bytes_sent == 240

    def test_session_bytes_sent_clamped(self):
        # previous chunk was larger than the one just accepted
        stale = UploadProgress(
            phase=OperationPhase.UPLOADING, bytes_sent=500, chunk_bytes=100, total_bytes=600
        )
        assert stale.session_bytes_sent == 600
        empty = UploadProgress(phase=OperationPhase.UPLOADING, chunk_bytes=50)
        assert empty.session_bytes_sent == 0


class TestUploadSummary:
    """Tests for UploadSummary."""

    def test_throughput(self):
        summary = UploadSummary(
            success=True, chunks_submitted=2, total_bytes=4 * 1024 * 1024, duration=2.0
        )
        assert summary.total_mb == 4.0
        assert summary.throughput_mbps == 2.0

    def test_zero_duration(self):
        summary = UploadSummary(success=True, chunks_submitted=0, total_bytes=0, duration=0)
        assert summary.throughput_mbps == 0.0


# =============================================================================
# Status / Exception Tests
# =============================================================================


class TestUploadStatus:
    """Tests for UploadStatus."""

    @pytest.mark.parametrize(
        "status",
        [UploadStatus.SUCCESS, UploadStatus.ACCEPTED, UploadStatus.UPLOAD_IN_PROGRESS, UploadStatus.STOPPING],
    )
    def test_not_errors(self, status):
        assert status.is_error is False

    @pytest.mark.parametrize(
        "status",
        [
            UploadStatus.INVALID_ARGUMENT,
            UploadStatus.TRANSPORT_INIT_FAILED,
            UploadStatus.URL_CONFIG_FAILED,
            UploadStatus.HEADER_CONFIG_FAILED,
            UploadStatus.TRANSFER_FAILED,
        ],
    )
    def test_errors(self, status):
        assert status.is_error is True


class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "error,status",
        [
            (InvalidArgumentError("bad"), UploadStatus.INVALID_ARGUMENT),
            (UrlConfigError("x"), UploadStatus.URL_CONFIG_FAILED),
            (HeaderConfigError("X-A"), UploadStatus.HEADER_CONFIG_FAILED),
            (TransportInitError(), UploadStatus.TRANSPORT_INIT_FAILED),
            (TransferError("http://x.test"), UploadStatus.TRANSFER_FAILED),
            (TransferAbortedError("http://x.test"), UploadStatus.STOPPING),
            (AlreadyClaimedError(4), UploadStatus.UPLOAD_IN_PROGRESS),
        ],
    )
    def test_status_mapping(self, error, status):
        assert isinstance(error, WebmCtlError)
        assert error.status is status

    def test_transfer_error_message(self):
        error = TransferError("http://x.test/up", "ConnectError: refused")
        assert "http://x.test/up" in str(error)
        assert "refused" in str(error)
        assert isinstance(error, UploadError)

    def test_details_in_str(self):
        error = FileReadError("/tmp/a.webm", "No such file")
        assert error.details == {"file": "/tmp/a.webm"}
        assert "file=/tmp/a.webm" in str(error)


# =============================================================================
# Output Helper Tests
# =============================================================================


class TestFormatBytes:
    """Tests for webmctl.core.output.format_bytes."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, "0 B"), (512, "512 B"), (1536, "1.5 KiB"), (1024 * 1024, "1.0 MiB"), (3 * 1024**3, "3.0 GiB")],
    )
    def test_units(self, value, expected):
        assert format_bytes(value) == expected
