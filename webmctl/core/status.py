"""Status codes reported by the upload engine."""

from __future__ import annotations

from enum import Enum


class UploadStatus(Enum):
    """Outcome kinds for uploader operations.

    Configuration failures are raised as exceptions carrying one of these
    values; producer-facing calls such as ``submit`` return them directly.
    """

    SUCCESS = "success"
    ACCEPTED = "accepted"
    UPLOAD_IN_PROGRESS = "upload_in_progress"
    STOPPING = "stopping"
    INVALID_ARGUMENT = "invalid_argument"
    TRANSPORT_INIT_FAILED = "transport_init_failed"
    URL_CONFIG_FAILED = "url_config_failed"
    HEADER_CONFIG_FAILED = "header_config_failed"
    TRANSFER_FAILED = "transfer_failed"

    @property
    def is_error(self) -> bool:
        """Check if the status reports a failure."""
        return self not in (
            UploadStatus.SUCCESS,
            UploadStatus.ACCEPTED,
            UploadStatus.UPLOAD_IN_PROGRESS,
            UploadStatus.STOPPING,
        )
