"""Exception hierarchy for webmctl.

Provides typed exceptions for different failure modes with clear error messages.
Exceptions raised by the upload engine carry the ``UploadStatus`` they map to.
"""

from __future__ import annotations

from typing import Any

from webmctl.core.status import UploadStatus


class WebmCtlError(Exception):
    """Base exception for all webmctl errors."""

    status: UploadStatus | None = None

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(WebmCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(WebmCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidArgumentError(ValidationError):
    """Null, empty, or out-of-range argument."""

    status = UploadStatus.INVALID_ARGUMENT


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class UrlConfigError(InvalidURLError):
    """Target URL could not be applied to the transport."""

    status = UploadStatus.URL_CONFIG_FAILED


class HeaderConfigError(ValidationError):
    """Custom HTTP headers could not be applied to the transport."""

    status = UploadStatus.HEADER_CONFIG_FAILED

    def __init__(self, header: str, reason: str = ""):
        msg = f"Invalid header: {header}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="header", value=header)
        self.header = header
        self.reason = reason


# =============================================================================
# Transport Errors
# =============================================================================


class TransportInitError(WebmCtlError):
    """Transport could not be created or configured."""

    status = UploadStatus.TRANSPORT_INIT_FAILED

    def __init__(self, reason: str = ""):
        msg = "Transport initialization failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.reason = reason


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(WebmCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class TransferError(UploadError):
    """A single chunk transfer failed."""

    status = UploadStatus.TRANSFER_FAILED

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Transfer to {url} failed"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, details={"url": url})
        self.url = url
        self.cause = cause


class TransferAbortedError(TransferError):
    """Transfer was aborted by a stop request."""

    status = UploadStatus.STOPPING

    def __init__(self, url: str):
        super().__init__(url, "aborted by stop request")


# =============================================================================
# Buffer Errors
# =============================================================================


class BufferStateError(WebmCtlError):
    """Transfer buffer used in the wrong ownership state."""


class AlreadyClaimedError(BufferStateError):
    """Buffer is already holding an in-flight chunk."""

    status = UploadStatus.UPLOAD_IN_PROGRESS

    def __init__(self, length: int):
        super().__init__("Transfer buffer already claimed", {"length": length})
        self.length = length


class NotClaimedError(BufferStateError):
    """Buffer was released or viewed while free."""

    def __init__(self, operation: str):
        super().__init__(f"Transfer buffer is not claimed ({operation})")
        self.operation = operation


# =============================================================================
# File Errors
# =============================================================================


class FileReadError(WebmCtlError):
    """Failed to open or read a local file."""

    def __init__(self, file_path: str, reason: str = ""):
        msg = f"Failed to read file: {file_path}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, {"file": file_path})
        self.file_path = file_path
        self.reason = reason
