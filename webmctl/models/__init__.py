"""Data models for webmctl."""

from webmctl.models.progress import (
    OperationPhase,
    UploadProgress,
    UploadStats,
    UploadSummary,
    WorkerState,
)
from webmctl.models.settings import UploadSettings

__all__ = [
    "OperationPhase",
    "UploadProgress",
    "UploadSettings",
    "UploadStats",
    "UploadSummary",
    "WorkerState",
]
