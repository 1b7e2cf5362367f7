"""Sync orchestration: scan, check collisions, write, and retire orphans.

A run either completes, aborts before any write (collisions), or finishes
with per-file errors recorded in the result. Partial work is never rolled
back.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from markdown_sync.core.embeds import transform_file_embeds
from markdown_sync.core.errors import CollisionError, FilesystemError, MarkdownSyncError
from markdown_sync.core.frontmatter import build_output, read_note
from markdown_sync.core.links import build_link_map_for
from markdown_sync.core.models import (
    NOTE_EXTENSION,
    FileError,
    SourceFile,
    SyncConfig,
    SyncResult,
    SyncStatus,
    UnresolvedLink,
)
from markdown_sync.core.processor import ContentProcessor
from markdown_sync.core.scanner import scan
from markdown_sync.core.walk import iter_files

logger = logging.getLogger(__name__)


def identity_suffix(user_id: str, ext: str = NOTE_EXTENSION) -> str:
    """Filename suffix marking output owned by an identity: '.<user_id><ext>'."""
    return f".{user_id}{ext}"


def _sibling_names(directory: Path, listings: Dict[Path, Optional[List[str]]]) -> List[str]:
    if directory not in listings:
        try:
            listings[directory] = [p.name for p in directory.iterdir() if p.is_file()]
        except FileNotFoundError:
            listings[directory] = None
        except OSError as e:
            logger.warning(f"Cannot list {directory} for collision check: {e}")
            listings[directory] = None
    return listings[directory] or []


def detect_collisions(source_files: Iterable[SourceFile], user_id: str) -> List[Path]:
    """Find output paths that clash with another identity's output.

    <base>.<user_id><ext> collides with an existing sibling <base>.<other><ext>
    for any other identity. Two source files routed to the same output path
    also collide.

    Args:
        source_files: Scanned files for the current identity
        user_id: Current identity

    Returns:
        Colliding output paths, in scan order
    """
    collisions: List[Path] = []
    seen: Set[Path] = set()
    listings: Dict[Path, Optional[List[str]]] = {}

    for source_file in source_files:
        output_path = source_file.output_path
        if output_path in seen:
            collisions.append(output_path)
            continue
        seen.add(output_path)

        ext = output_path.suffix
        suffix = identity_suffix(user_id, ext)
        if not output_path.name.endswith(suffix):
            continue
        base_name = output_path.name[:-len(suffix)]

        for name in _sibling_names(output_path.parent, listings):
            if name == output_path.name or not name.endswith(ext):
                continue
            stem = name[:-len(ext)] if ext else name
            if '.' not in stem:
                continue
            other_base, other_user = stem.rsplit('.', 1)
            if other_base == base_name and other_user != user_id:
                collisions.append(output_path)
                break

    return collisions


def find_user_files(output_dir: Path, user_id: str) -> List[Path]:
    """Every file under the output tree carrying the identity's suffix."""
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        return []
    return list(iter_files(output_dir, suffix=identity_suffix(user_id)))


def find_orphaned_files(output_dir: Path, user_id: str, current_output_paths: Set[Path]) -> List[Path]:
    """The identity's output files that no current source file produces."""
    return [
        path for path in find_user_files(output_dir, user_id)
        if path not in current_output_paths
    ]


class SyncRunner:
    """Drives one sync run over a fixed configuration.

    State lives only for the duration of the run; nothing is cached between
    runs.
    """

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose

    def run(self) -> SyncResult:
        """Run the full pipeline.

        Returns:
            SyncResult with counts and collected per-file errors

        Raises:
            CollisionError: If any output would collide; nothing is written
        """
        config = self.config
        result = SyncResult()

        source_files = scan(config, result.errors)
        link_map = build_link_map_for(config)

        if config.user_id_enabled:
            collisions = detect_collisions(source_files, config.user_id)
            if collisions:
                result.collisions = collisions
                raise CollisionError(collisions)

        processor = ContentProcessor(link_map, config.transformations)
        unresolved: List[UnresolvedLink] = []

        for source_file in source_files:
            try:
                errors = self._write_file(source_file, processor, result, unresolved)
            except MarkdownSyncError as e:
                errors = [e]

            for error in errors:
                logger.warning(f"Failed to sync {source_file.relative_path}: {error}")
                result.errors.append(FileError(path=source_file.absolute_path, error=error))

        if config.user_id_enabled:
            self._remove_orphans(source_files, result)

        result.unresolved_links_count = len(unresolved)
        if self.verbose:
            result.unresolved_links = unresolved
            for link in unresolved:
                logger.info(f"Unresolved wikilink {link.wikilink} in {link.file_path}")

        logger.info(
            f"Sync complete: {result.copied} copied, {result.deleted} deleted, "
            f"{result.files_copied} embedded file(s), {result.unresolved_links_count} unresolved link(s)"
        )
        return result

    def _write_file(
        self,
        source_file: SourceFile,
        processor: ContentProcessor,
        result: SyncResult,
        unresolved: List[UnresolvedLink],
    ) -> List[Exception]:
        """Transform one note and write it to its output path.

        Embed errors abandon this file's write and are returned.

        Raises:
            MarkdownSyncError: On read, transform or write failure
        """
        frontmatter, body = read_note(source_file.absolute_path)
        transformed = processor.process(body, frontmatter.props, source_file.relative_path)

        embeds = transform_file_embeds(
            transformed.content, self.config.source_dir, self.config.output_dir
        )
        if embeds.errors:
            return embeds.errors

        output = build_output(transformed.frontmatter, embeds.content)
        output_path = source_file.output_path
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding='utf-8')
        except OSError as e:
            raise FilesystemError(output_path, 'write', str(e)) from e

        logger.debug(f"Wrote {source_file.relative_path} -> {output_path}")
        result.copied += 1
        result.files_copied += len(embeds.copied_files)
        unresolved.extend(transformed.unresolved_links)
        return []

    def _remove_orphans(self, source_files: List[SourceFile], result: SyncResult) -> None:
        current = {source_file.output_path for source_file in source_files}
        for orphan in find_orphaned_files(self.config.output_dir, self.config.user_id, current):
            try:
                orphan.unlink()
            except OSError as e:
                error = FilesystemError(orphan, 'delete', str(e))
                logger.warning(str(error))
                result.errors.append(FileError(path=orphan, error=error))
                continue
            logger.debug(f"Deleted orphan {orphan}")
            result.deleted += 1


def sync(config: SyncConfig, verbose: bool = False) -> SyncResult:
    """Sync routed source notes into the output tree for the configured identity."""
    return SyncRunner(config, verbose=verbose).run()


def status(config: SyncConfig) -> SyncStatus:
    """Compute what a sync would copy, delete and collide with, without writing."""
    result = SyncStatus()
    result.to_copy = scan(config, result.errors)

    if config.user_id_enabled:
        result.collisions = detect_collisions(result.to_copy, config.user_id)
        current = {source_file.output_path for source_file in result.to_copy}
        result.to_delete = find_orphaned_files(config.output_dir, config.user_id, current)

    return result


def clean(config: SyncConfig) -> int:
    """Delete all of the identity's output files, ignoring routes.

    Returns:
        Number of files deleted
    """
    if not config.user_id_enabled:
        logger.warning("Identity suffixes are disabled; nothing identifies owned output to clean")
        return 0

    deleted = 0
    for path in find_user_files(config.output_dir, config.user_id):
        try:
            path.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
            continue
        deleted += 1

    logger.info(f"Cleaned {deleted} file(s) for {config.user_id}")
    return deleted
