"""webmctl - A chunked HTTP uploader for live WebM streams.

A caller hands the uploader successive segments of a growing stream; a single
background worker POSTs each one as multipart form data and reports progress
and throughput back to the caller.
"""

__version__ = "0.1.0"

from webmctl.core.exceptions import (
    ConfigurationError,
    HeaderConfigError,
    InvalidArgumentError,
    TransferError,
    TransportInitError,
    UrlConfigError,
    WebmCtlError,
)
from webmctl.core.status import UploadStatus
from webmctl.models.progress import UploadStats
from webmctl.models.settings import UploadSettings
from webmctl.services.uploads import Uploader, upload_file

__all__ = [
    "__version__",
    "Uploader",
    "UploadSettings",
    "UploadStats",
    "UploadStatus",
    "upload_file",
    "WebmCtlError",
    "ConfigurationError",
    "InvalidArgumentError",
    "UrlConfigError",
    "HeaderConfigError",
    "TransportInitError",
    "TransferError",
]
