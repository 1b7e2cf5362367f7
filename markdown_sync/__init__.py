"""
Markdown Sync - Sync personal markdown notes into a shared repository

Multiplexes several contributors into one output tree without collisions,
with support for:
- Path- and tag-based routing
- Wikilink resolution to canonical URLs
- Frontmatter projection and content properties
- Embedded file copying
"""

from markdown_sync.config import load_config
from markdown_sync.core.errors import CollisionError, ConfigurationError, MarkdownSyncError
from markdown_sync.core.models import Route, SourceFile, SyncConfig, SyncResult, SyncStatus, TransformationConfig
from markdown_sync.core.sync import clean, status, sync
from markdown_sync.core.scanner import scan

__version__ = "0.1.0"

__all__ = [
    "CollisionError",
    "ConfigurationError",
    "MarkdownSyncError",
    "Route",
    "SourceFile",
    "SyncConfig",
    "SyncResult",
    "SyncStatus",
    "TransformationConfig",
    "clean",
    "load_config",
    "scan",
    "status",
    "sync",
]
