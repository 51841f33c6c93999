from __future__ import annotations

from typing import Any


class IconsSyncError(RuntimeError):
    """Base class for errors that abort a sync run."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(IconsSyncError):
    """Missing credential, bad Figma link or malformed config file."""


class RemoteError(IconsSyncError):
    """Figma API unreachable, non-2xx answer or unexpected payload."""


class InventoryError(IconsSyncError):
    """The local inventory file exists but cannot be read back."""


class StorageError(IconsSyncError):
    """Writing to the output directory failed or a path escapes it."""
