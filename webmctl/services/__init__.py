"""Service layer for webmctl operations."""

from webmctl.services.uploads import Uploader, upload_file

__all__ = ["Uploader", "upload_file"]
