"""Glob matching and first-match-wins routing of source notes."""

import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern, Sequence

from markdown_sync.core.models import Route

# Wildcards never match a leading dot in a path segment (hidden files/dirs)
_NO_DOT = r'(?!\.)'
_SEGMENT = r'[^/]*'


def _find_closing(pattern: str, start: int, open_char: str, close_char: str) -> int:
    """Index of the bracket closing the one at start, or -1."""
    depth = 0
    for i in range(start, len(pattern)):
        if pattern[i] == open_char:
            depth += 1
        elif pattern[i] == close_char:
            depth -= 1
            if depth == 0:
                return i
    return -1


def _split_alternatives(body: str) -> list:
    """Split brace contents on top-level commas."""
    parts = []
    depth = 0
    current = []
    for char in body:
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
        if char == ',' and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)
    parts.append(''.join(current))
    return parts


def _translate(pattern: str, segment_start: bool = True) -> str:
    out = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]
        at_start = segment_start if i == 0 else pattern[i - 1] == '/'

        if char == '*':
            is_globstar = (
                pattern.startswith('**', i)
                and at_start
                and (i + 2 == n or pattern[i + 2] == '/')
            )
            if is_globstar:
                if i + 2 == n:
                    out.append(rf'(?:{_NO_DOT}{_SEGMENT}(?:/{_NO_DOT}{_SEGMENT})*)?')
                    i += 2
                else:
                    out.append(rf'(?:{_NO_DOT}{_SEGMENT}/)*')
                    i += 3
                continue
            while i < n and pattern[i] == '*':
                i += 1
            out.append((_NO_DOT if at_start else '') + _SEGMENT)
            continue

        if char == '?':
            out.append((_NO_DOT if at_start else '') + '[^/]')
        elif char == '[':
            end = pattern.find(']', i + 2)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1:end].replace('\\', '\\\\')
                if body.startswith('!'):
                    body = '^' + body[1:]
                out.append(f'[{body}]')
                i = end
        elif char == '{':
            end = _find_closing(pattern, i, '{', '}')
            if end == -1:
                out.append(re.escape(char))
            else:
                options = _split_alternatives(pattern[i + 1:end])
                translated = [_translate(option, at_start) for option in options]
                out.append('(?:' + '|'.join(translated) + ')')
                i = end
        else:
            out.append(re.escape(char))
        i += 1

    return ''.join(out)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Pattern:
    """Compile a glob pattern into a regex over '/'-separated relative paths.

    Supports '*', '?', '[...]', '{a,b}' and '**' path segments.
    """
    return re.compile(r'\A' + _translate(pattern) + r'\Z')


def glob_match(relative_path: str, pattern: str) -> bool:
    """Check whether a relative path matches a glob pattern."""
    return compile_glob(pattern).match(relative_path) is not None


def matches_any(relative_path: str, patterns: Iterable[str]) -> bool:
    """Check whether a relative path matches any of the glob patterns."""
    return any(glob_match(relative_path, pattern) for pattern in patterns)


def is_route_match(relative_path: str, tags: Iterable[str], route: Route) -> bool:
    """Check a single route.

    A route with both source_path and tag requires both conditions.
    """
    if not route.source_path and not route.tag:
        return False

    if route.source_path and not glob_match(relative_path, route.source_path):
        return False

    if route.tag and route.tag not in set(tags):
        return False

    return True


def match_route(relative_path: str, tags: Iterable[str], routes: Sequence[Route]) -> Optional[Route]:
    """Return the first route (by list order) matching the note, or None."""
    tag_set = frozenset(tags)
    for route in routes:
        if is_route_match(relative_path, tag_set, route):
            return route
    return None
