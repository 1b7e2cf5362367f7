"""Typed exception hierarchy for Markdown Sync.

All exceptions inherit from MarkdownSyncError so callers can catch every
sync failure in one place. Fatal errors (configuration, collisions) propagate
to the caller; per-file errors are collected into the sync result.
"""

from pathlib import Path
from typing import List, Optional, Union


class MarkdownSyncError(Exception):
    """Base exception for all Markdown Sync errors."""
    pass


class ConfigurationError(MarkdownSyncError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.problems = list(problems or [])
        if self.problems:
            message = message + ":\n  - " + "\n  - ".join(self.problems)
        super().__init__(message)


class CollisionError(MarkdownSyncError):
    """Raised before any write when output would collide with another identity."""

    def __init__(self, collisions: List[Path]):
        self.collisions = list(collisions)
        listing = "\n".join(str(c) for c in self.collisions)
        super().__init__(
            f"Collision detected: {len(self.collisions)} file(s) would conflict "
            f"with other users. Resolve manually:\n{listing}"
        )


class FrontmatterError(MarkdownSyncError):
    """Raised when a note's YAML frontmatter cannot be parsed."""

    def __init__(self, file_path: Union[str, Path], message: str):
        super().__init__(f"Frontmatter error in {file_path}: {message}")
        self.file_path = file_path
        self.message = message


class FilesystemError(MarkdownSyncError):
    """Raised when filesystem operations fail (read, write, copy, delete)."""

    def __init__(self, file_path: Union[str, Path], operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class EmbedNotFoundError(MarkdownSyncError):
    """Raised when an embedded file cannot be found anywhere in the source tree."""

    def __init__(self, filename: str, source_dir: Union[str, Path]):
        super().__init__(
            f"File embed not found: {filename}. Searched in: {source_dir}"
        )
        self.filename = filename
        self.source_dir = source_dir


class TransformHookError(MarkdownSyncError):
    """Raised when a user-supplied transform hook fails."""

    def __init__(self, hook_name: str, file_path: Union[str, Path], original: Exception):
        super().__init__(
            f"Transform hook '{hook_name}' failed for {file_path}: {original}"
        )
        self.hook_name = hook_name
        self.file_path = file_path
        self.original = original
