"""Transform hook factories for Markdown Sync.

These factories create hooks with the fixed signature
``(value, context) -> value`` used for property, content and filename
rewriting. ``context`` is a TransformContext carrying the note's path and
raw frontmatter.
"""

import importlib
import re
from typing import Any, Callable, Dict

import inflection
import titlecase as tc

from markdown_sync.core.links import collapse_wikilinks
from markdown_sync.core.models import TransformContext

TransformHook = Callable[[Any, TransformContext], Any]


def identity() -> TransformHook:
    """Create a pass-through hook that returns its value unchanged."""
    def transform(value: Any, context: TransformContext) -> Any:
        return value
    return transform


def titlecase() -> TransformHook:
    """Create a hook converting strings to proper title case.

    Uses the titlecase library. Semicolons are replaced with colons since
    they break YAML parsing of titles in some generators.
    """
    def transform(value: Any, context: TransformContext) -> Any:
        if not isinstance(value, str):
            return value
        return tc.titlecase(value).replace(';', ':')
    return transform


def slugify() -> TransformHook:
    """Create a hook turning strings into URL slugs ("My Note" -> "my-note")."""
    def transform(value: Any, context: TransformContext) -> Any:
        if not isinstance(value, str):
            return value
        return inflection.parameterize(value)
    return transform


def lowercase() -> TransformHook:
    def transform(value: Any, context: TransformContext) -> Any:
        return value.lower() if isinstance(value, str) else value
    return transform


def strip_wikilinks() -> TransformHook:
    """Create a hook that collapses [[target|display]] markup to plain text."""
    def transform(value: Any, context: TransformContext) -> Any:
        if not isinstance(value, str):
            return value
        return collapse_wikilinks(value)
    return transform


def compose(*hooks: TransformHook) -> TransformHook:
    """Chain hooks left to right, each receiving the same context."""
    def transform(value: Any, context: TransformContext) -> Any:
        for hook in hooks:
            value = hook(value, context)
        return value
    return transform


BUILTIN_HOOKS: Dict[str, Callable[[], TransformHook]] = {
    'identity': identity,
    'titlecase': titlecase,
    'slugify': slugify,
    'lowercase': lowercase,
    'strip_wikilinks': strip_wikilinks,
}

# "package.module:function"
IMPORT_REFERENCE_PATTERN = re.compile(r'^[\w.]+:[\w]+$')


def resolve_hook(reference: str) -> TransformHook:
    """Resolve a hook named in configuration.

    Args:
        reference: A built-in hook name, a '+'-joined chain of names, or an
            import reference "package.module:function"

    Returns:
        The hook callable

    Raises:
        ValueError: If the reference names no known hook
    """
    reference = reference.strip()
    if '+' in reference:
        return compose(*(resolve_hook(part) for part in reference.split('+')))

    if reference in BUILTIN_HOOKS:
        return BUILTIN_HOOKS[reference]()

    if IMPORT_REFERENCE_PATTERN.match(reference):
        module_name, attr = reference.split(':')
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ValueError(f"Cannot import hook module '{module_name}': {e}") from e
        hook = getattr(module, attr, None)
        if not callable(hook):
            raise ValueError(f"Hook '{reference}' is not a callable")
        return hook

    known = ', '.join(sorted(BUILTIN_HOOKS))
    raise ValueError(f"Unknown hook '{reference}' (built-in hooks: {known})")
