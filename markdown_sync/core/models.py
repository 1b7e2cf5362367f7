"""Data models for Markdown Sync."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

NOTE_EXTENSION = ".md"


class WikilinkBehavior(str, Enum):
    """How unresolved (or all) wikilinks are treated in note bodies."""
    RESOLVE = "resolve"
    REMOVE = "remove"
    PRESERVE = "preserve"


@dataclass(frozen=True)
class Route:
    """Routing rule mapping a path glob and/or tag to an output subdirectory.

    At least one of source_path and tag is set. When both are set, both
    conditions must hold for the route to match.
    """
    output_path: str
    source_path: Optional[str] = None
    tag: Optional[str] = None


@dataclass(frozen=True)
class AnyValue:
    """Required property matches when present with any value."""

    def matches(self, value: Any) -> bool:
        return True


@dataclass(frozen=True)
class OneOfSubstrings:
    """Required property matches when its string form contains any option."""
    options: tuple

    def matches(self, value: Any) -> bool:
        actual = str(value)
        return any(option in actual for option in self.options)


RequiredValue = Union[AnyValue, OneOfSubstrings]


@dataclass(frozen=True)
class TransformContext:
    """Context handed to user hooks: the note being written and its raw frontmatter."""
    file_path: str
    frontmatter: Dict[str, Any]


PropertyHook = Callable[[Any, TransformContext], Any]
ContentHook = Callable[[str, TransformContext], str]
FilenameHook = Callable[[str, TransformContext], str]


@dataclass(frozen=True)
class TransformationConfig:
    """Settings for rewriting frontmatter, wikilinks and content."""
    url_property: str = "link_to"
    content_properties: tuple = ()
    passthrough_properties: tuple = ()
    wikilink_behavior: WikilinkBehavior = WikilinkBehavior.RESOLVE
    link_overrides: Dict[str, str] = field(default_factory=dict)
    property_transforms: Dict[str, PropertyHook] = field(default_factory=dict)
    content_transform: Optional[ContentHook] = None
    filename_transform: Optional[FilenameHook] = None


@dataclass(frozen=True)
class SyncConfig:
    """Merged configuration consumed by every sync operation."""
    user_id: str
    source_dir: Path
    output_dir: Path
    routes: tuple
    exclude: tuple = ()
    require_tags: tuple = ()
    require_props: Dict[str, RequiredValue] = field(default_factory=dict)
    transformations: TransformationConfig = field(default_factory=TransformationConfig)
    user_id_enabled: bool = True


@dataclass
class FrontmatterData:
    """Parsed note metadata - what we learn from reading the file once.

    tags is normalized (leading '#' stripped, trimmed, empties dropped);
    props is the raw metadata map, unmodified.
    """
    tags: List[str]
    props: Dict[str, Any]


@dataclass(frozen=True)
class SourceFile:
    """A routed source note and the output path it will be written to."""
    absolute_path: Path
    relative_path: str
    tags: tuple
    route: Route
    output_path: Path


LinkMap = Dict[str, str]


@dataclass(frozen=True)
class UnresolvedLink:
    """A wikilink with no entry in the link map."""
    wikilink: str
    file_path: str


@dataclass
class TransformationResult:
    """Result of transforming a note's frontmatter and content."""
    content: str
    frontmatter: Dict[str, Any]
    unresolved_links: List[UnresolvedLink]


@dataclass(frozen=True)
class FileEmbed:
    """A reference to a non-note file found in note content."""
    original_syntax: str
    filename: str
    is_image: bool
    display_text: Optional[str] = None


@dataclass
class FileEmbedResult:
    """Result of rewriting file embeds in one note."""
    content: str
    copied_files: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)


@dataclass
class FileError:
    """An error that occurred while processing a single file.

    Used for errors at any phase: scanning, transforming, writing or deleting.
    """
    path: Path
    error: Exception

    def __str__(self) -> str:
        return str(self.error)


@dataclass
class SyncResult:
    """Result of a sync operation."""
    copied: int = 0
    deleted: int = 0
    files_copied: int = 0
    collisions: List[Path] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)
    unresolved_links_count: int = 0
    unresolved_links: List[UnresolvedLink] = field(default_factory=list)


@dataclass
class SyncStatus:
    """What a sync would change, computed without writing anything."""
    to_copy: List[SourceFile] = field(default_factory=list)
    to_delete: List[Path] = field(default_factory=list)
    collisions: List[Path] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)
