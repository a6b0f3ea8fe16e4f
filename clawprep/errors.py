"""Exceptions raised by clawprep."""

from __future__ import annotations

from pathlib import Path


class ClawprepError(Exception):
    """Base exception for clawprep errors."""

    pass


class ConfigWriteError(ClawprepError):
    """Raised when the configuration directory or file cannot be written."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause.strerror or cause}")
