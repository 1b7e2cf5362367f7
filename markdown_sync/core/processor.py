"""Content processor for transforming notes into their published form."""

import json
import logging
import re
from typing import Any, Dict, List

from markdown_sync.core.errors import TransformHookError
from markdown_sync.core.links import collapse_wikilinks, transform_wikilinks
from markdown_sync.core.models import (
    LinkMap,
    SyncConfig,
    TransformationConfig,
    TransformationResult,
    TransformContext,
    UnresolvedLink,
    WikilinkBehavior,
)

logger = logging.getLogger(__name__)

PROPERTY_ITEM_SEPARATOR = re.compile(r'[,\n]+')

CONTENT_SEPARATOR = "\n\n---\n\n"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def format_property_value_as_list(value: Any) -> List[str]:
    """Coerce a frontmatter value into list items.

    Strings split on commas/newlines, lists stringify each element, mappings
    become a single JSON item and other scalars their string form.
    """
    if value is None:
        return []

    if isinstance(value, str):
        items = PROPERTY_ITEM_SEPARATOR.split(value)
    elif isinstance(value, list):
        items = [_stringify(item) for item in value]
    elif isinstance(value, dict):
        return [json.dumps(value, default=str, ensure_ascii=False)]
    else:
        items = [_stringify(value)]

    items = (item.strip() for item in items)
    return [item for item in items if item]


def capitalize_first_letter(text: str) -> str:
    return text[:1].upper() + text[1:]


class ContentProcessor:
    """Processes note content and frontmatter for publishing.

    Handles:
    - Content property injection (frontmatter rendered as heading + list)
    - Wikilink to markdown link conversion
    - Custom content and property hooks
    - Passthrough frontmatter projection
    """

    def __init__(self, link_map: LinkMap, transformations: TransformationConfig):
        """Initialize ContentProcessor.

        Args:
            link_map: Relative path -> URL map for the whole source tree
            transformations: Property lists, wikilink behavior and hooks
        """
        self.link_map = link_map
        self.transformations = transformations

    def process(self, content: str, frontmatter: Dict[str, Any], file_path: str) -> TransformationResult:
        """Transform a note's body and frontmatter.

        Args:
            content: Note body without frontmatter
            frontmatter: Raw frontmatter of the note
            file_path: Path of the note, recorded on unresolved links and
                handed to hooks

        Returns:
            TransformationResult with the assembled content, the projected
            frontmatter and unresolved links (content properties first)

        Raises:
            TransformHookError: If a content or property hook fails
        """
        context = TransformContext(file_path=file_path, frontmatter=frontmatter)
        unresolved: List[UnresolvedLink] = []

        blocks, property_unresolved = self._render_content_properties(frontmatter, file_path)
        unresolved.extend(property_unresolved)

        behavior = self.transformations.wikilink_behavior or WikilinkBehavior.RESOLVE
        body, body_unresolved = transform_wikilinks(content, self.link_map, behavior, file_path)
        unresolved.extend(body_unresolved)

        if blocks:
            body = "\n\n".join(blocks) + CONTENT_SEPARATOR + body

        content_transform = self.transformations.content_transform
        if content_transform is not None:
            try:
                body = content_transform(body, context)
            except Exception as e:
                raise TransformHookError("content_transform", file_path, e) from e

        return TransformationResult(
            content=body,
            frontmatter=self._project_frontmatter(frontmatter, context),
            unresolved_links=unresolved,
        )

    def _render_content_properties(self, frontmatter: Dict[str, Any], file_path: str):
        """Render configured content properties as '## Heading' + bullet list blocks.

        Wikilinks are always resolved here; any left unresolved collapse to
        their display text.
        """
        blocks = []
        unresolved: List[UnresolvedLink] = []

        for prop in self.transformations.content_properties:
            if prop not in frontmatter:
                continue

            list_items = []
            for item in format_property_value_as_list(frontmatter[prop]):
                resolved, missing = transform_wikilinks(
                    item, self.link_map, WikilinkBehavior.RESOLVE, file_path
                )
                unresolved.extend(missing)
                cleaned = collapse_wikilinks(resolved).strip()
                if cleaned:
                    list_items.append(f"- {cleaned}")

            if list_items:
                heading = f"## {capitalize_first_letter(prop)}"
                blocks.append("\n".join([heading, ""] + list_items))

        return blocks, unresolved

    def _project_frontmatter(self, frontmatter: Dict[str, Any], context: TransformContext) -> Dict[str, Any]:
        """Keep only passthrough properties, applying property hooks to string values."""
        output: Dict[str, Any] = {}
        property_transforms = self.transformations.property_transforms

        for prop in self.transformations.passthrough_properties:
            if prop not in frontmatter:
                continue

            value = frontmatter[prop]
            hook = property_transforms.get(prop)
            if hook is not None and isinstance(value, str):
                try:
                    value = hook(value, context)
                except Exception as e:
                    raise TransformHookError(f"property_transforms.{prop}", context.file_path, e) from e

            output[prop] = value

        return output


def transform_frontmatter(
    content: str,
    frontmatter: Dict[str, Any],
    link_map: LinkMap,
    config: SyncConfig,
    file_path: str,
) -> TransformationResult:
    """Transform one note's content and frontmatter under a sync configuration."""
    return ContentProcessor(link_map, config.transformations).process(content, frontmatter, file_path)
