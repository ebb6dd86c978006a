"""Per-session uploader configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LOCAL_FILE = "chunk.webm"


class UploadSettings(BaseModel):
    """Settings consumed by ``UploadCoordinator.init``.

    Instances are frozen; the coordinator keeps its own deep copy so later
    changes to the caller's mappings never reach an active session.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    target_url: str = Field(..., description="Destination URL for each chunk POST")
    headers: dict[str, str] = Field(default_factory=dict, description="Literal HTTP headers")
    form_variables: dict[str, str] = Field(
        default_factory=dict, description="Extra multipart fields sent before the chunk"
    )
    local_file: str = Field(
        DEFAULT_LOCAL_FILE, description="Filename declared for the chunk form field"
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump()
