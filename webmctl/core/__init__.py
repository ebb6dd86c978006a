"""Core modules for webmctl."""

from webmctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from webmctl.core.exceptions import (
    AlreadyClaimedError,
    ConfigurationError,
    FileReadError,
    HeaderConfigError,
    InvalidArgumentError,
    NotClaimedError,
    TransferAbortedError,
    TransferError,
    TransportInitError,
    UploadError,
    UrlConfigError,
    ValidationError,
    WebmCtlError,
)
from webmctl.core.logging import LogContext, get_logger, setup_logging
from webmctl.core.status import UploadStatus
from webmctl.core.validation import (
    validate_chunk_size,
    validate_form_variables,
    validate_headers,
    validate_target_url,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "WebmCtlError",
    "ConfigurationError",
    "ValidationError",
    "InvalidArgumentError",
    "UrlConfigError",
    "HeaderConfigError",
    "TransportInitError",
    "UploadError",
    "TransferError",
    "TransferAbortedError",
    "AlreadyClaimedError",
    "NotClaimedError",
    "FileReadError",
    # Status
    "UploadStatus",
    # Validation
    "validate_target_url",
    "validate_headers",
    "validate_form_variables",
    "validate_chunk_size",
    "validate_timeout",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
]
