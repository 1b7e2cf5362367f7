"""Tests for the mdsync command-line interface."""

import pytest
import yaml
from typer.testing import CliRunner

from markdown_sync.cli import app
from markdown_sync.config import REPO_CONFIG_NAME, USER_CONFIG_NAME

runner = CliRunner()


@pytest.fixture
def repo(tmp_path, monkeypatch, write_file):
    """A repository with both config files and a small source tree."""
    monkeypatch.delenv("MARKDOWN_SYNC_USER", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    repo_root = tmp_path / "repo"
    source = tmp_path / "vault"

    write_file(source / "Logs" / "daily.md", "# Daily\n\n[[missing]]\n")
    write_file(source / "project.md", "---\ntags: [work]\n---\n# Project\n")
    write_file(repo_root / REPO_CONFIG_NAME, yaml.safe_dump({
        "output_dir": "./notes",
        "routes": [
            {"source_path": "Logs/**/*.md", "output_path": "logs"},
            {"tag": "work", "output_path": "projects"},
        ],
    }))
    write_file(repo_root / USER_CONFIG_NAME, yaml.safe_dump({
        "source_dir": str(source),
        "user_id": "alice",
    }))
    return repo_root


def invoke(repo_root, *args):
    return runner.invoke(app, ["--repo-root", str(repo_root), *args])


class TestCli:
    """Tests for mdsync commands."""

    def test_config(self, repo):
        result = invoke(repo, "config")
        assert result.exit_code == 0
        assert "alice" in result.output
        assert "Logs/**/*.md" in result.output

    def test_scan(self, repo):
        result = invoke(repo, "scan")
        assert result.exit_code == 0
        assert "Found 2 file(s)" in result.output
        assert "project.md" in result.output

    def test_status_makes_no_changes(self, repo):
        result = invoke(repo, "status")
        assert result.exit_code == 0
        assert "Files to copy: 2" in result.output
        assert not (repo / "notes" / "logs" / "daily.alice.md").exists()

    def test_sync(self, repo):
        result = invoke(repo, "sync")
        assert result.exit_code == 0
        assert "Copied: 2 file(s)" in result.output
        assert "1 unresolved" in result.output
        assert (repo / "notes" / "logs" / "daily.alice.md").exists()
        assert (repo / "notes" / "projects" / "project.alice.md").exists()

    def test_sync_verbose_lists_unresolved_links(self, repo):
        result = invoke(repo, "sync", "--verbose")
        assert result.exit_code == 0
        assert "[[missing]]" in result.output

    def test_sync_collision_exits_nonzero(self, repo, write_file):
        write_file(repo / "notes" / "logs" / "daily.bob.md", "bob")
        result = invoke(repo, "sync")
        assert result.exit_code == 1
        assert "Collision detected" in result.output
        assert not (repo / "notes" / "logs" / "daily.alice.md").exists()

    def test_status_collision_exits_nonzero(self, repo, write_file):
        write_file(repo / "notes" / "logs" / "daily.bob.md", "bob")
        result = invoke(repo, "status")
        assert result.exit_code == 1
        assert "COLLISIONS DETECTED" in result.output

    def test_clean(self, repo):
        invoke(repo, "sync")
        result = invoke(repo, "clean")
        assert result.exit_code == 0
        assert "Deleted 2 file(s)" in result.output
        assert not (repo / "notes" / "logs" / "daily.alice.md").exists()

    def test_configuration_error(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MARKDOWN_SYNC_USER", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        result = invoke(tmp_path, "sync")
        assert result.exit_code == 1
        assert "Error" in result.output
