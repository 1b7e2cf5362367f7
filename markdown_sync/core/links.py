"""Link resolution: map source notes to canonical URLs and rewrite wikilinks."""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from markdown_sync.core.embeds import is_embed_target
from markdown_sync.core.errors import MarkdownSyncError
from markdown_sync.core.frontmatter import read_frontmatter
from markdown_sync.core.models import (
    NOTE_EXTENSION,
    LinkMap,
    SyncConfig,
    UnresolvedLink,
    WikilinkBehavior,
)
from markdown_sync.core.routing import matches_any
from markdown_sync.core.walk import iter_files

logger = logging.getLogger(__name__)

# Pattern for wikilinks: [[target]] or [[target|display]]
WIKILINK_PATTERN = re.compile(r'\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')

# Same spans, including a leading embed marker
COLLAPSE_PATTERN = re.compile(r'!?\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')


def build_link_map(
    source_dir: Path,
    exclude: Iterable[str] = (),
    url_property: str = "link_to",
    overrides: Optional[Dict[str, str]] = None,
) -> LinkMap:
    """Build the relative-path -> URL map from every note in the source tree.

    Routing is ignored: any non-excluded note can be a link target. An
    override for a path takes precedence over its frontmatter property.

    Args:
        source_dir: Root of the source tree
        exclude: Glob patterns of relative paths to skip
        url_property: Frontmatter property holding a note's URL
        overrides: Explicit relative-path -> URL entries

    Returns:
        LinkMap keyed by '/'-separated relative paths
    """
    source_dir = Path(source_dir)
    overrides = overrides or {}
    exclude = list(exclude)
    link_map: LinkMap = {}

    for absolute_path in iter_files(source_dir, suffix=NOTE_EXTENSION):
        relative_path = absolute_path.relative_to(source_dir).as_posix()

        if matches_any(relative_path, exclude):
            continue

        if overrides.get(relative_path):
            link_map[relative_path] = overrides[relative_path]
            continue

        try:
            frontmatter = read_frontmatter(absolute_path)
        except MarkdownSyncError as e:
            logger.debug(f"No link target for {relative_path}: {e}")
            continue

        url = frontmatter.props.get(url_property)
        if url:
            link_map[relative_path] = str(url)

    logger.info(f"Built link map with {len(link_map)} resolvable note(s)")
    return link_map


def build_link_map_for(config: SyncConfig) -> LinkMap:
    """Build the link map described by a sync configuration."""
    transformations = config.transformations
    return build_link_map(
        config.source_dir,
        exclude=config.exclude,
        url_property=transformations.url_property or "link_to",
        overrides=transformations.link_overrides,
    )


def lookup_key(target: str) -> str:
    """Link map key for a wikilink target, appending the note extension if missing."""
    if target.endswith(NOTE_EXTENSION):
        return target
    return target + NOTE_EXTENSION


def transform_wikilinks(
    content: str,
    link_map: LinkMap,
    behavior: WikilinkBehavior,
    current_file_path: str,
) -> Tuple[str, List[UnresolvedLink]]:
    """Rewrite [[target]] and [[target|display]] spans using the link map.

    - resolve: resolved spans become markdown links; unresolved ones are kept
      verbatim and recorded.
    - remove: resolved spans become links; unresolved ones are deleted and
      recorded.
    - preserve: content is returned unchanged and nothing is recorded.

    Targets are looked up first; a miss whose target carries a non-note
    extension is an embed and is left for the embed pass.

    Args:
        content: Text to rewrite
        link_map: Relative path -> URL map
        behavior: How to treat wikilinks
        current_file_path: Recorded on each unresolved link

    Returns:
        Tuple of (transformed content, unresolved links)
    """
    behavior = WikilinkBehavior(behavior)
    if behavior is WikilinkBehavior.PRESERVE:
        return content, []

    unresolved: List[UnresolvedLink] = []

    def replace_link(match: re.Match) -> str:
        target = match.group(1).strip()
        display = match.group(2)

        url = link_map.get(lookup_key(target))
        if not url:
            if is_embed_target(target):
                return match.group(0)
            unresolved.append(UnresolvedLink(wikilink=match.group(0), file_path=current_file_path))
            return "" if behavior is WikilinkBehavior.REMOVE else match.group(0)

        link_text = display.strip() if display else target
        return f"[{link_text}]({url})"

    result = WIKILINK_PATTERN.sub(replace_link, content)
    return result, unresolved


def collapse_wikilinks(content: str) -> str:
    """Replace any remaining wikilink markup with its display text.

    [[Link]] -> Link, [[Link.md]] -> Link, [[Link|Display Text]] -> Display Text,
    ![[photo.png]] -> photo.png
    """
    def replace_link(match: re.Match) -> str:
        display = match.group(2)
        if display:
            return display.strip()
        target = match.group(1).strip()
        if target.endswith(NOTE_EXTENSION):
            target = target[:-len(NOTE_EXTENSION)]
        return target

    return COLLAPSE_PATTERN.sub(replace_link, content)
