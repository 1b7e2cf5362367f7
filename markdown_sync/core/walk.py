"""Directory traversal with an explicit work list.

Unreadable directories are logged and skipped; the walk continues with the
remaining entries. Symlinked directories are not descended into.
"""

import logging
import os
from collections import deque
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


def _list_dir(directory: Path) -> Optional[Tuple[List[Path], List[Path]]]:
    """Return (subdirectories, files) of a directory, sorted by name."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.warning(f"Skipping unreadable directory {directory}: {e}")
        return None

    dirs = []
    files = []
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                dirs.append(Path(entry.path))
            elif entry.is_file():
                files.append(Path(entry.path))
        except OSError as e:
            logger.warning(f"Skipping unreadable entry {entry.path}: {e}")
    return dirs, files


def iter_files(root: Path, suffix: Optional[str] = None) -> Iterator[Path]:
    """Yield files under root depth-first in sorted order.

    Args:
        root: Directory to walk
        suffix: Only yield files whose name ends with this suffix

    Yields:
        Absolute file paths
    """
    stack = [Path(root)]
    while stack:
        listing = _list_dir(stack.pop())
        if listing is None:
            continue
        dirs, files = listing
        for file_path in files:
            if suffix is None or file_path.name.endswith(suffix):
                yield file_path
        # Reversed so the alphabetically first directory is visited next
        stack.extend(reversed(dirs))


def iter_files_breadth_first(root: Path) -> Iterator[Path]:
    """Yield files under root level by level, shallowest first."""
    queue = deque([Path(root)])
    while queue:
        listing = _list_dir(queue.popleft())
        if listing is None:
            continue
        dirs, files = listing
        yield from files
        queue.extend(dirs)
