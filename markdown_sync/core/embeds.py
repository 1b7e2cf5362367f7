"""File embeds: copy referenced non-note files and rewrite their syntax."""

import logging
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from markdown_sync.core.errors import EmbedNotFoundError, FilesystemError
from markdown_sync.core.models import NOTE_EXTENSION, FileEmbed, FileEmbedResult
from markdown_sync.core.walk import iter_files_breadth_first

logger = logging.getLogger(__name__)

FILES_DIR = "_files"

IMAGE_EXTENSIONS = frozenset({'.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.bmp', '.ico'})

# Pattern for file embeds: ![[file.ext]], [[file.ext]], optionally with |display
EMBED_PATTERN = re.compile(r'(!?)\[\[([^\]|]+?\.\w+)\s*(?:\|([^\]]+))?\]\]')

EXTENSION_PATTERN = re.compile(r'\.\w+$')


def _extension(filename: str) -> str:
    match = EXTENSION_PATTERN.search(filename)
    return match.group(0).lower() if match else ""


def is_embed_target(target: str) -> bool:
    """Whether a [[target]] names a non-note file rather than a note."""
    ext = _extension(target.strip())
    return bool(ext) and ext != NOTE_EXTENSION


def find_file_embeds(content: str) -> List[FileEmbed]:
    """Find all embeds of non-note files in content.

    An embed is an image when written with '!' or when its extension is a
    recognized image type.
    """
    embeds = []
    for match in EMBED_PATTERN.finditer(content):
        filename = match.group(2).strip()
        ext = _extension(filename)
        if ext == NOTE_EXTENSION:
            continue

        display = match.group(3)
        embeds.append(FileEmbed(
            original_syntax=match.group(0),
            filename=filename,
            is_image=match.group(1) == "!" or ext in IMAGE_EXTENSIONS,
            display_text=display.strip() if display else None,
        ))
    return embeds


def find_file_in_source(source_dir: Path, filename: str) -> Optional[Path]:
    """Find a file anywhere in the source tree by exact name.

    Breadth-first, so the shallowest match wins; matches at the same depth
    resolve in sorted path order. A filename with a directory part is tried
    as a path relative to the source root first.
    """
    source_dir = Path(source_dir)
    if '/' in filename:
        direct = source_dir / filename
        if direct.is_file():
            return direct

    name = Path(filename).name
    for file_path in iter_files_breadth_first(source_dir):
        if file_path.name == name:
            return file_path
    return None


def copy_embedded_file(source_file: Path, source_dir: Path, output_dir: Path) -> str:
    """Copy a file into <output>/_files/, preserving its path under the source root.

    Returns:
        The copy's '/'-separated path relative to the output root

    Raises:
        FilesystemError: If the copy fails
    """
    relative_path = Path(source_file).relative_to(source_dir)
    destination = Path(output_dir) / FILES_DIR / relative_path

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source_file, destination)
    except OSError as e:
        raise FilesystemError(source_file, 'copy', str(e)) from e

    return (Path(FILES_DIR) / relative_path).as_posix()


def transform_file_embeds(content: str, source_dir: Path, output_dir: Path) -> FileEmbedResult:
    """Copy embedded files to the output tree and rewrite embeds as links.

    Every embed is located before anything is copied. If any embedded file
    is missing, nothing is copied, the content is returned unchanged and an
    EmbedNotFoundError per missing name is reported; the caller must not
    write the note.

    Args:
        content: Note content
        source_dir: Root of the source tree
        output_dir: Root of the output tree

    Returns:
        FileEmbedResult with rewritten content, copied paths and errors
    """
    embeds = find_file_embeds(content)
    if not embeds:
        return FileEmbedResult(content=content)

    located: Dict[str, Path] = {}
    missing: List[str] = []
    for embed in embeds:
        if embed.filename in located or embed.filename in missing:
            continue
        found = find_file_in_source(source_dir, embed.filename)
        if found is None:
            missing.append(embed.filename)
        else:
            located[embed.filename] = found

    errors: List[Exception] = [EmbedNotFoundError(name, source_dir) for name in missing]

    if errors:
        return FileEmbedResult(content=content, errors=errors)

    copied: Dict[str, str] = {}
    for filename, source_file in located.items():
        try:
            copied[filename] = copy_embedded_file(source_file, source_dir, output_dir)
            logger.debug(f"Copied embed {filename} -> {copied[filename]}")
        except FilesystemError as e:
            errors.append(e)

    def replace_embed(match: re.Match) -> str:
        filename = match.group(2).strip()
        output_path = copied.get(filename)
        if output_path is None:
            return match.group(0)

        is_image = match.group(1) == "!" or _extension(filename) in IMAGE_EXTENSIONS
        display = match.group(3)
        text = display.strip() if display else Path(filename).stem
        if is_image:
            return f"![{text}](/{output_path})"
        return f"[{text}](/{output_path})"

    result = EMBED_PATTERN.sub(replace_embed, content)
    return FileEmbedResult(content=result, copied_files=list(copied.values()), errors=errors)
