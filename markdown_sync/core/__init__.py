"""Core components for Markdown Sync."""

from markdown_sync.core.errors import (
    CollisionError,
    ConfigurationError,
    EmbedNotFoundError,
    FilesystemError,
    FrontmatterError,
    MarkdownSyncError,
    TransformHookError,
)
from markdown_sync.core.models import (
    AnyValue,
    FileEmbed,
    FileError,
    FrontmatterData,
    OneOfSubstrings,
    Route,
    SourceFile,
    SyncConfig,
    SyncResult,
    SyncStatus,
    TransformationConfig,
    TransformationResult,
    TransformContext,
    UnresolvedLink,
    WikilinkBehavior,
)
from markdown_sync.core.processor import ContentProcessor, transform_frontmatter
from markdown_sync.core.scanner import Scanner, scan
from markdown_sync.core.sync import clean, status, sync

__all__ = [
    "AnyValue",
    "CollisionError",
    "ConfigurationError",
    "ContentProcessor",
    "EmbedNotFoundError",
    "FileEmbed",
    "FileError",
    "FilesystemError",
    "FrontmatterData",
    "FrontmatterError",
    "MarkdownSyncError",
    "OneOfSubstrings",
    "Route",
    "Scanner",
    "SourceFile",
    "SyncConfig",
    "SyncResult",
    "SyncStatus",
    "TransformationConfig",
    "TransformationResult",
    "TransformContext",
    "TransformHookError",
    "UnresolvedLink",
    "WikilinkBehavior",
    "clean",
    "scan",
    "status",
    "sync",
    "transform_frontmatter",
]
