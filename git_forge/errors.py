"""Exception types shared across git-forge.

Every error meant for the user derives from ``GitForgeError``; the CLI turns
those into a one-line message and a non-zero exit.
"""

from __future__ import annotations


class GitForgeError(Exception):
    """Base class for user-facing failures."""


class ForgeError(GitForgeError):
    """Forge API request, authentication, or detection failure."""


class GitError(GitForgeError):
    """A git subprocess failed or produced unusable output."""


class ConfigError(GitForgeError):
    """Configuration could not be read, written, or addressed."""


class EditorError(GitForgeError):
    """The message editor could not be launched or returned nothing usable."""


class SelectionError(GitForgeError):
    """Interactive selection ended without an item."""


class SelectionAborted(SelectionError):
    def __init__(self) -> None:
        super().__init__("Selection aborted")


class InvalidSelection(SelectionError):
    def __init__(self, index: int | None = None) -> None:
        super().__init__("Invalid selection")
        self.index = index


__all__ = [
    "ConfigError",
    "EditorError",
    "ForgeError",
    "GitError",
    "GitForgeError",
    "InvalidSelection",
    "SelectionAborted",
    "SelectionError",
]
