"""Errors raised by heicsort."""

from pathlib import Path


class HeicsortError(Exception):
    """Base exception for heicsort."""


class TraversalError(HeicsortError):
    """Raised when the source tree cannot be walked. Aborts the run."""


class MetadataError(HeicsortError):
    """Raised when a file's metadata cannot be decoded."""

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"could not decode metadata of {path}: {cause}")


class DestinationExistsError(HeicsortError):
    """Raised when overwrite protection refuses to replace a file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"destination already exists: {path}")


class ServerConfigError(HeicsortError):
    """Raised when the HTTP server cannot be configured (e.g. TLS material)."""
