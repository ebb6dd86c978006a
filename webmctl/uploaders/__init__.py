"""Upload engine for webmctl.

This module provides the pieces behind ``Uploader``:
- Single-slot transfer buffer shared by producer and worker
- Background coordinator owning the worker thread and stop protocol
- Transports that POST one chunk as multipart form data

These are internal implementation details. Use ``Uploader`` from
``webmctl.services.uploads`` as the public API.
"""

from webmctl.uploaders.buffer import TransferBuffer
from webmctl.uploaders.common import FileReader, iter_chunks
from webmctl.uploaders.constants import (
    CHUNK_CONTENT_TYPE,
    CHUNK_FORM_NAME,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT,
)
from webmctl.uploaders.coordinator import UploadCoordinator
from webmctl.uploaders.transport import (
    ChunkRequest,
    HookResult,
    HttpxTransport,
    Transport,
)

__all__ = [
    # Constants
    "CHUNK_CONTENT_TYPE",
    "CHUNK_FORM_NAME",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_TIMEOUT",
    # Engine
    "TransferBuffer",
    "UploadCoordinator",
    # Transports
    "ChunkRequest",
    "HookResult",
    "HttpxTransport",
    "Transport",
    # Files
    "FileReader",
    "iter_chunks",
]
