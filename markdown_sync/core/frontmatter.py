"""YAML frontmatter parsing and serialization for markdown notes."""

import re
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from markdown_sync.core.errors import FilesystemError, FrontmatterError
from markdown_sync.core.models import FrontmatterData

# Leading metadata block between --- delimiters; the block body may be empty
FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)

TAG_SEPARATOR_PATTERN = re.compile(r'[\s,]+')


def split_frontmatter(text: str, file_path: Union[str, Path] = "<string>") -> Tuple[Dict[str, Any], str]:
    """Split a note into its frontmatter mapping and body.

    Args:
        text: Full file content
        file_path: Path used in error messages

    Returns:
        Tuple of (frontmatter dict, body). Notes without a metadata block
        yield an empty dict and the text unchanged.

    Raises:
        FrontmatterError: If the metadata block is not valid YAML or not a mapping
    """
    if text.startswith('\ufeff'):
        text = text[1:]

    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text

    try:
        frontmatter = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(file_path, f"Invalid YAML: {e}") from e

    if frontmatter is None:
        frontmatter = {}
    if not isinstance(frontmatter, dict):
        raise FrontmatterError(
            file_path,
            f"Frontmatter must be a mapping, got {type(frontmatter).__name__}",
        )

    return frontmatter, text[match.end():]


def normalize_tag(tag: str) -> str:
    """Strip a single leading '#' and surrounding whitespace."""
    if tag.startswith('#'):
        tag = tag[1:]
    return tag.strip()


def extract_tags(frontmatter: Dict[str, Any]) -> List[str]:
    """Extract normalized tags from frontmatter.

    Handles both list and string formats. Lists keep only string elements;
    strings are split on commas and/or whitespace.

    Args:
        frontmatter: Parsed frontmatter dict

    Returns:
        List of tag strings, order preserved
    """
    tag_data = frontmatter.get('tags')
    if not tag_data:
        return []

    if isinstance(tag_data, str):
        tokens = TAG_SEPARATOR_PATTERN.split(tag_data)
    elif isinstance(tag_data, list):
        tokens = [tag for tag in tag_data if isinstance(tag, str)]
    else:
        return []

    tags = (normalize_tag(token) for token in tokens)
    return [tag for tag in tags if tag]


def parse_frontmatter(text: str, file_path: Union[str, Path] = "<string>") -> Tuple[FrontmatterData, str]:
    """Parse a note into FrontmatterData and body text."""
    props, body = split_frontmatter(text, file_path)
    return FrontmatterData(tags=extract_tags(props), props=props), body


def read_note(file_path: Path) -> Tuple[FrontmatterData, str]:
    """Read a note from disk and parse it.

    Raises:
        FilesystemError: If the file cannot be read
        FrontmatterError: If its frontmatter is malformed
    """
    try:
        text = Path(file_path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(file_path, 'read', str(e)) from e
    return parse_frontmatter(text, file_path)


def read_frontmatter(file_path: Path) -> FrontmatterData:
    """Read only the metadata of a note."""
    data, _ = read_note(file_path)
    return data


def build_output(frontmatter: Dict[str, Any], content: str) -> str:
    """Serialize output frontmatter and body into the final note text.

    Args:
        frontmatter: Output frontmatter (rendered in insertion order)
        content: Transformed note body

    Returns:
        Complete markdown string; empty frontmatter is not rendered
    """
    if frontmatter:
        frontmatter_str = yaml.dump(
            frontmatter,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
        body = content.rstrip('\n')
        return f"---\n{frontmatter_str}---\n{body}\n"
    else:
        return content.rstrip('\n') + "\n"
