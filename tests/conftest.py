"""Shared fixtures for Markdown Sync tests."""

from pathlib import Path

import pytest

from markdown_sync.core.models import Route, SyncConfig


@pytest.fixture
def workspace(tmp_path):
    """Create empty source and output directories."""
    source = tmp_path / "source"
    output = tmp_path / "output"
    source.mkdir()
    output.mkdir()
    return source, output


@pytest.fixture
def write_file():
    """Return a helper that writes a file, creating parent directories."""
    def write(path: Path, content: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return write


@pytest.fixture
def make_config(workspace):
    """Return a factory for SyncConfig bound to the workspace directories."""
    source, output = workspace

    def factory(routes=None, user_id="alice", **kwargs) -> SyncConfig:
        if routes is None:
            routes = [Route(source_path="**/*.md", output_path="notes")]
        return SyncConfig(
            user_id=user_id,
            source_dir=source,
            output_dir=output,
            routes=tuple(routes),
            **kwargs,
        )
    return factory
