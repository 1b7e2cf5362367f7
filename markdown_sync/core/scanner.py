"""Source scanning: find, filter and route the notes eligible for syncing."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from markdown_sync.core.errors import ConfigurationError, MarkdownSyncError, TransformHookError
from markdown_sync.core.frontmatter import read_frontmatter
from markdown_sync.core.models import (
    NOTE_EXTENSION,
    FileError,
    FrontmatterData,
    Route,
    SourceFile,
    SyncConfig,
    TransformContext,
)
from markdown_sync.core.routing import match_route, matches_any
from markdown_sync.core.walk import iter_files

logger = logging.getLogger(__name__)


class Scanner:
    """Discovers and routes notes eligible for syncing from a source tree.

    Files whose frontmatter cannot be read are skipped and recorded in
    ``errors``; they never abort the scan.
    """

    def __init__(self, config: SyncConfig):
        self.config = config
        self.source_dir = Path(config.source_dir)
        self.errors: List[FileError] = []

    def scan(self) -> List[SourceFile]:
        """Find all routed notes under the source directory.

        Returns:
            SourceFile descriptors in source tree order

        Raises:
            ConfigurationError: If the source directory does not exist
        """
        if not self.source_dir.is_dir():
            raise ConfigurationError(f"Source directory not found: {self.source_dir}")

        self.errors = []
        source_files = []

        for absolute_path in iter_files(self.source_dir, suffix=NOTE_EXTENSION):
            relative_path = absolute_path.relative_to(self.source_dir).as_posix()

            if matches_any(relative_path, self.config.exclude):
                logger.debug(f"Excluded by pattern: {relative_path}")
                continue

            try:
                frontmatter = read_frontmatter(absolute_path)
            except MarkdownSyncError as e:
                logger.warning(f"Skipping {relative_path}: {e}")
                self.errors.append(FileError(path=absolute_path, error=e))
                continue

            is_eligible, reason = self.is_eligible(frontmatter)
            if not is_eligible:
                logger.debug(f"Skipping {relative_path}: {reason}")
                continue

            route = match_route(relative_path, frontmatter.tags, self.config.routes)
            if route is None:
                logger.debug(f"No matching route: {relative_path}")
                continue

            try:
                output_path = self.output_path_for(absolute_path, relative_path, route, frontmatter.props)
            except TransformHookError as e:
                logger.warning(f"Skipping {relative_path}: {e}")
                self.errors.append(FileError(path=absolute_path, error=e))
                continue

            source_files.append(SourceFile(
                absolute_path=absolute_path,
                relative_path=relative_path,
                tags=tuple(frontmatter.tags),
                route=route,
                output_path=output_path,
            ))

        logger.info(f"Scanned {len(source_files)} routed file(s) in {self.source_dir}")
        return source_files

    def is_eligible(self, frontmatter: FrontmatterData) -> Tuple[bool, str]:
        """Check a note against the required tags and properties.

        Args:
            frontmatter: Parsed note metadata

        Returns:
            Tuple of (is_eligible, reason)
        """
        note_tags = set(frontmatter.tags)
        missing_tags = [tag for tag in self.config.require_tags if tag not in note_tags]
        if missing_tags:
            return False, f"Missing required tags: {', '.join(missing_tags)}"

        for prop, required in self.config.require_props.items():
            if prop not in frontmatter.props or frontmatter.props[prop] is None:
                return False, f"Missing required property: {prop}"
            if not required.matches(frontmatter.props[prop]):
                return False, f"Property '{prop}' does not match required value"

        return True, "OK"

    def output_path_for(self, source_path: Path, relative_path: str, route: Route, props: Dict[str, Any]) -> Path:
        """Compute the destination of a note: <output>/<route>/<stem>.<identity><ext>.

        Raises:
            TransformHookError: If the configured filename hook fails
        """
        stem = source_path.stem
        ext = source_path.suffix

        filename_transform = self.config.transformations.filename_transform
        if filename_transform is not None:
            context = TransformContext(file_path=relative_path, frontmatter=props)
            try:
                stem = str(filename_transform(stem, context))
            except Exception as e:
                raise TransformHookError("filename_transform", relative_path, e) from e

        if self.config.user_id_enabled:
            filename = f"{stem}.{self.config.user_id}{ext}"
        else:
            filename = f"{stem}{ext}"

        return Path(self.config.output_dir) / route.output_path / filename


def scan(config: SyncConfig, errors: Optional[List[FileError]] = None) -> List[SourceFile]:
    """Scan the source tree and return routed notes.

    Args:
        config: Merged sync configuration
        errors: Optional list that receives per-file scan errors

    Returns:
        List of SourceFile descriptors
    """
    scanner = Scanner(config)
    source_files = scanner.scan()
    if errors is not None:
        errors.extend(scanner.errors)
    return source_files
