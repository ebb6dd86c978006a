"""Configuration management for webmctl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from webmctl.core.exceptions import ConfigurationError, ProfileNotFoundError
from webmctl.models.settings import DEFAULT_LOCAL_FILE, UploadSettings
from webmctl.uploaders.constants import DEFAULT_CHUNK_SIZE, DEFAULT_TIMEOUT

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "webmctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "WEBMCTL_URL"
ENV_PROFILE = "WEBMCTL_PROFILE"
ENV_VERIFY_SSL = "WEBMCTL_VERIFY_SSL"
ENV_TIMEOUT = "WEBMCTL_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for an upload endpoint."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    form_variables: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    timeout: int = DEFAULT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "chunk_size": self.chunk_size,
        }
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.form_variables:
            data["form_variables"] = dict(self.form_variables)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            form_variables={str(k): str(v) for k, v in (data.get("form_variables") or {}).items()},
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            chunk_size=data.get("chunk_size", DEFAULT_CHUNK_SIZE),
        )

    def to_settings(self, local_file: str | None = None) -> UploadSettings:
        """Build uploader settings from this profile.

        Args:
            local_file: Filename declared for uploaded chunks.

        Returns:
            UploadSettings for ``Uploader.init``.
        """
        return UploadSettings(
            target_url=self.url,
            headers=dict(self.headers),
            form_variables=dict(self.form_variables),
            local_file=local_file or DEFAULT_LOCAL_FILE,
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file exists but cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
                raise ConfigurationError(f"Failed to load config: {e}")

        # Environment variable overrides
        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            try:
                timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT)))
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be an integer", field="timeout", value=os.getenv(ENV_TIMEOUT)
                )

            base = config.profiles.get("default")
            config.profiles["default"] = Profile(
                url=url,
                headers=dict(base.headers) if base else {},
                form_variables=dict(base.form_variables) if base else {},
                verify_ssl=verify_ssl,
                timeout=timeout,
                chunk_size=base.chunk_size if base else DEFAULT_CHUNK_SIZE,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Args:
            name: Profile name. If None, uses default_profile.

        Returns:
            Profile configuration.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        form_variables: Optional[dict[str, str]] = None,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Profile:
        """Add or update a profile.

        Returns:
            Created profile.
        """
        profile = Profile(
            url=url,
            headers=dict(headers or {}),
            form_variables=dict(form_variables or {}),
            verify_ssl=verify_ssl,
            timeout=timeout,
            chunk_size=chunk_size,
        )
        self.profiles[name] = profile
        return profile
