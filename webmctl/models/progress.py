"""Progress models for tracking upload status.

Provides the stats snapshot shared with producers, worker states, and the
progress/summary records reported by file upload sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class WorkerState(Enum):
    """States of the background upload worker."""

    IDLE = "idle"
    TRANSFERRING = "transferring"
    TERMINATED = "terminated"


class OperationPhase(Enum):
    """Phases reported by a file upload session."""

    PREPARING = "preparing"
    WAITING = "waiting"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class UploadStats:
    """Snapshot of the transfer in progress."""

    bytes_sent: int = 0
    bytes_per_second: float = 0.0

    @property
    def mb_sent(self) -> float:
        """Return megabytes sent."""
        return self.bytes_sent / (1024 * 1024)

    def to_dict(self) -> dict[str, float]:
        return {"bytes_sent": self.bytes_sent, "bytes_per_second": self.bytes_per_second}


@dataclass
class UploadProgress:
    """Progress of a file upload session."""

    phase: OperationPhase
    chunk_index: int = 0
    bytes_sent: int = 0
    chunk_bytes: int = 0
    total_bytes: int = 0
    bytes_per_second: float = 0.0
    message: str = ""

    @property
    def chunk_percent(self) -> float:
        """Calculate completion percentage of the current chunk."""
        if self.chunk_bytes == 0:
            return 0.0
        return (self.bytes_sent / self.chunk_bytes) * 100

    @property
    def session_bytes_sent(self) -> int:
        """Bytes of the whole session sent so far, clamped to ``total_bytes``.

        Right after a chunk is accepted ``bytes_sent`` may still hold the
        previous chunk's count until the worker picks the new one up.
        """
        done = self.total_bytes - self.chunk_bytes + self.bytes_sent
        return min(max(done, 0), self.total_bytes)

    @property
    def is_complete(self) -> bool:
        """Check if the session is complete."""
        return self.phase == OperationPhase.COMPLETE


@dataclass
class UploadSummary:
    """Summary of a file upload session."""

    success: bool
    chunks_submitted: int
    total_bytes: int
    duration: float
    file_path: str = ""
    errors: List[str] = field(default_factory=list)

    @property
    def total_mb(self) -> float:
        """Return total megabytes submitted."""
        return self.total_bytes / (1024 * 1024)

    @property
    def throughput_mbps(self) -> float:
        """Calculate session throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_mb / self.duration
