"""YAML configuration loading, merging and validation.

Two files are merged into one SyncConfig:

Repository config (``markdown-sync.config.yaml`` in the repo root, committed):
    output_dir: ./notes
    routes:
      - source_path: "Logs/**/*.md"
        output_path: logs
      - tag: working
        output_path: projects
    exclude: ["**/templates/**"]
    require_tags: [public]
    require_props:
      status: [published, review]
      title: "*"
    transformations:
      url_property: link_to
      content_properties: [references]
      passthrough_properties: [title, date]
      wikilink_behavior: resolve
      link_overrides: {"About.md": "https://example.com/about"}
      property_transforms: {title: titlecase}
      content_transform: "mypackage.hooks:add_footer"
      filename_transform: slugify

User config (``.markdown-sync.user.yaml`` in the repo root or home directory):
    source_dir: ~/Documents/Notes
    user_id: alice

Repository values win when defined; user values are the fallback.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from markdown_sync.core.errors import ConfigurationError, FilesystemError, MarkdownSyncError
from markdown_sync.core.models import (
    AnyValue,
    OneOfSubstrings,
    RequiredValue,
    Route,
    SyncConfig,
    TransformationConfig,
    WikilinkBehavior,
)
from markdown_sync.identity import detect_user_id
from markdown_sync.transforms.hooks import resolve_hook

logger = logging.getLogger(__name__)

REPO_CONFIG_NAME = "markdown-sync.config.yaml"
USER_CONFIG_NAME = ".markdown-sync.user.yaml"

ANY_VALUE = "*"


class ConfigLoader:
    """Handles configuration file loading, merging and validation."""

    # Used when no repository config file exists
    DEFAULT_OUTPUT_DIR = "./notes"
    DEFAULT_ROUTES = [{'source_path': '**/*.md', 'output_path': '.'}]

    def __init__(self, repo_root: Optional[Path] = None, home_dir: Optional[Path] = None):
        """Initialize ConfigLoader.

        Args:
            repo_root: Repository root holding the repository config (default: cwd)
            home_dir: Fallback location of the user config (default: home directory)
        """
        self.repo_root = Path(repo_root or Path.cwd()).resolve()
        self.home_dir = Path(home_dir or Path.home())

    def load(self) -> SyncConfig:
        """Load, merge and validate both configuration files.

        Returns:
            SyncConfig with every field populated

        Raises:
            ConfigurationError: If configuration is missing or invalid
            FilesystemError: If a config file exists but cannot be read
        """
        repo_path = self.repo_root / REPO_CONFIG_NAME
        if repo_path.is_file():
            repo_config = self._read_yaml(repo_path)
        else:
            logger.debug(f"No repository config at {repo_path}; using defaults")
            repo_config = {}

        user_path = self.find_user_config()
        user_config = self._read_yaml(user_path) if user_path else {}

        return self.merge(repo_config, user_config, user_path.parent if user_path else self.repo_root)

    def find_user_config(self) -> Optional[Path]:
        """Locate the user config: repository root first, then home directory."""
        for directory in (self.repo_root, self.home_dir):
            candidate = directory / USER_CONFIG_NAME
            if candidate.is_file():
                return candidate
        return None

    @staticmethod
    def _read_yaml(config_path: Path) -> Dict[str, Any]:
        try:
            content = config_path.read_text(encoding='utf-8')
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e)) from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration in {config_path} must be a YAML mapping, got {type(data).__name__}"
            )
        return data

    def merge(self, repo: Dict[str, Any], user: Dict[str, Any], user_config_dir: Path) -> SyncConfig:
        """Merge repository and user settings into a validated SyncConfig.

        Args:
            repo: Parsed repository config
            user: Parsed user config
            user_config_dir: Directory relative source_dir values resolve against

        Raises:
            ConfigurationError: Listing every problem found
        """
        problems: List[str] = []

        def pick(key: str, default: Any = None) -> Any:
            if repo.get(key) is not None:
                return repo[key]
            if user.get(key) is not None:
                return user[key]
            return default

        try:
            user_id = detect_user_id(
                user.get('user_id') or repo.get('user_id'),
                gitconfig_path=self.home_dir / ".gitconfig",
            )
        except ConfigurationError as e:
            problems.append(str(e))
            user_id = ""

        source_dir = self._resolve_source_dir(user.get('source_dir'), user_config_dir, problems)
        output_dir = self._resolve_output_dir(repo.get('output_dir') or self.DEFAULT_OUTPUT_DIR, problems)

        raw_routes = repo.get('routes') or user.get('routes') or self.DEFAULT_ROUTES
        routes = self._parse_routes(raw_routes, problems)

        require_props = self._parse_require_props(pick('require_props', {}), problems)
        transformations = self._parse_transformations(
            repo.get('transformations') or {}, user.get('transformations') or {}, problems
        )

        if problems:
            raise ConfigurationError("Configuration validation failed", problems)

        return SyncConfig(
            user_id=user_id,
            source_dir=source_dir,
            output_dir=output_dir,
            routes=tuple(routes),
            exclude=tuple(str(p) for p in pick('exclude', [])),
            require_tags=tuple(str(t) for t in pick('require_tags', [])),
            require_props=require_props,
            transformations=transformations,
            user_id_enabled=bool(pick('user_id_enabled', True)),
        )

    @staticmethod
    def _resolve_source_dir(value: Any, base: Path, problems: List[str]) -> Path:
        if not value:
            problems.append(
                f"Source directory not configured. Set source_dir in {USER_CONFIG_NAME} "
                "(repo root or home directory)"
            )
            return Path()

        path = Path(os.path.expanduser(str(value)))
        if not path.is_absolute():
            path = base / path
        if not path.is_dir():
            problems.append(f"Source directory not found: {path}")
        elif not os.access(path, os.R_OK):
            problems.append(f"Source directory not readable: {path}")
        return path

    def _resolve_output_dir(self, value: Any, problems: List[str]) -> Path:
        path = Path(os.path.expanduser(str(value)))
        if not path.is_absolute():
            path = self.repo_root / path
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            problems.append(f"Output directory not writable and cannot be created: {value} ({e})")
        return path

    @staticmethod
    def _parse_routes(raw_routes: Any, problems: List[str]) -> List[Route]:
        if not isinstance(raw_routes, list) or not raw_routes:
            problems.append("At least one route is required")
            return []

        routes = []
        for index, raw in enumerate(raw_routes):
            if not isinstance(raw, dict):
                problems.append(f"Route {index + 1} must be a mapping")
                continue
            output_path = raw.get('output_path')
            if not output_path or not isinstance(output_path, str):
                problems.append(f"Route {index + 1} must specify output_path")
                continue
            source_path = raw.get('source_path')
            tag = raw.get('tag')
            if not source_path and not tag:
                problems.append(f"Route {index + 1} must specify source_path, tag, or both")
                continue
            if isinstance(tag, str):
                tag = tag.lstrip('#')
            routes.append(Route(
                output_path=output_path,
                source_path=str(source_path) if source_path else None,
                tag=str(tag) if tag else None,
            ))
        return routes

    @staticmethod
    def _parse_require_props(raw: Any, problems: List[str]) -> Dict[str, RequiredValue]:
        if not isinstance(raw, dict):
            problems.append("require_props must be a mapping of property to value(s)")
            return {}

        parsed: Dict[str, RequiredValue] = {}
        for prop, value in raw.items():
            if value == ANY_VALUE:
                parsed[prop] = AnyValue()
            elif isinstance(value, list):
                parsed[prop] = OneOfSubstrings(tuple(str(v) for v in value))
            elif value is not None:
                parsed[prop] = OneOfSubstrings((str(value),))
            else:
                problems.append(f"require_props.{prop} needs a value, a list of values, or \"*\"")
        return parsed

    @staticmethod
    def _parse_transformations(
        repo: Dict[str, Any], user: Dict[str, Any], problems: List[str]
    ) -> TransformationConfig:
        def pick(key: str, default: Any) -> Any:
            if repo.get(key) is not None:
                return repo[key]
            if user.get(key) is not None:
                return user[key]
            return default

        behavior_value = pick('wikilink_behavior', WikilinkBehavior.RESOLVE.value)
        try:
            behavior = WikilinkBehavior(behavior_value)
        except ValueError:
            problems.append(
                f"wikilink_behavior must be one of resolve, remove, preserve (got {behavior_value!r})"
            )
            behavior = WikilinkBehavior.RESOLVE

        link_overrides = {
            **{str(k): str(v) for k, v in (user.get('link_overrides') or {}).items()},
            **{str(k): str(v) for k, v in (repo.get('link_overrides') or {}).items()},
        }

        def load_hook(name: str, reference: Any):
            try:
                return resolve_hook(str(reference))
            except (ValueError, MarkdownSyncError) as e:
                problems.append(f"{name}: {e}")
                return None

        property_transforms = {}
        for prop, reference in (pick('property_transforms', {}) or {}).items():
            hook = load_hook(f"property_transforms.{prop}", reference)
            if hook is not None:
                property_transforms[prop] = hook

        content_ref = pick('content_transform', None)
        filename_ref = pick('filename_transform', None)

        return TransformationConfig(
            url_property=str(pick('url_property', 'link_to')),
            content_properties=tuple(pick('content_properties', [])),
            passthrough_properties=tuple(pick('passthrough_properties', [])),
            wikilink_behavior=behavior,
            link_overrides=link_overrides,
            property_transforms=property_transforms,
            content_transform=load_hook('content_transform', content_ref) if content_ref else None,
            filename_transform=load_hook('filename_transform', filename_ref) if filename_ref else None,
        )


def load_config(repo_root: Optional[Path] = None, home_dir: Optional[Path] = None) -> SyncConfig:
    """Load the merged configuration for a repository."""
    return ConfigLoader(repo_root, home_dir).load()
