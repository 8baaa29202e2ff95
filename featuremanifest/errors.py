"""Fatal error types raised while reading, writing or configuring manifests."""
from __future__ import annotations

from pathlib import Path


class ManifestError(Exception):
    """Base class for unrecoverable manifest failures."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class ManifestReadError(ManifestError):
    """Raised when the manifest file cannot be read."""


class ManifestParseError(ManifestError):
    """Raised when manifest content is not a valid feature document."""


class ManifestWriteError(ManifestError):
    """Raised when the manifest cannot be persisted."""


class ConfigError(ManifestError):
    """Raised when a settings file exists but is not a valid YAML mapping."""
