"""Errors raised while provisioning guideline files."""
from __future__ import annotations

from pathlib import Path


class ProvisionError(Exception):
    """Base class for provisioning failures."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SourceNotFound(ProvisionError):
    """The file or directory to copy is missing from the installed package."""


class DestinationNotWritable(ProvisionError):
    """The target location could not be created or replaced."""


class ConfigError(ProvisionError):
    """The project configuration file is unreadable or malformed."""


class DestinationNotReadable(ProvisionError):
    """An existing project copy could not be read for comparison."""
