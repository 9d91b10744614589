"""Error types raised by vaultsearch components.

Library code raises these; only the CLI and the results browser turn them
into user-facing messages.
"""

from __future__ import annotations


class VaultSearchError(Exception):
    """Base class for all vaultsearch errors."""


class SearchFailure(VaultSearchError):
    """``rg`` is unavailable or exited with a genuine error."""


class MetadataReadFailure(VaultSearchError):
    """A document's front matter could not be read or parsed."""

    def __init__(self, path, reason: str) -> None:
        super().__init__(f"cannot read metadata from {path}: {reason}")
        self.path = path
        self.reason = reason


class DocumentReadFailure(VaultSearchError):
    """A document could not be read for preview."""


class EditorProcessFailure(VaultSearchError):
    """The external editor could not be launched."""


class StalePathFailure(VaultSearchError):
    """A selected path is no longer among the current search results."""


class TerminalSessionError(VaultSearchError):
    """Raw mode was acquired or released out of order."""


class VaultError(VaultSearchError):
    """A vault maintenance command failed."""
