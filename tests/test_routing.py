"""Tests for glob matching and route selection."""

import pytest

from markdown_sync.core.models import Route
from markdown_sync.core.routing import glob_match, is_route_match, match_route, matches_any


class TestGlobMatch:
    """Tests for glob pattern semantics."""

    @pytest.mark.parametrize("path", ["Logs/daily.md", "Logs/2024/01/daily.md"])
    def test_globstar_matches_any_depth(self, path):
        assert glob_match(path, "Logs/**/*.md")

    def test_globstar_requires_prefix(self):
        assert not glob_match("Other/daily.md", "Logs/**/*.md")

    def test_leading_globstar_matches_root(self):
        assert glob_match("project.md", "**/*.md")
        assert glob_match("a/b/c.md", "**/*.md")

    def test_single_star_stays_in_segment(self):
        assert glob_match("note.md", "*.md")
        assert not glob_match("a/note.md", "*.md")

    def test_trailing_globstar(self):
        assert glob_match("templates/x.md", "**/templates/**")
        assert glob_match("a/templates/b/x.md", "**/templates/**")
        assert not glob_match("a/template/x.md", "**/templates/**")

    def test_question_mark(self):
        assert glob_match("note1.md", "note?.md")
        assert not glob_match("note12.md", "note?.md")

    def test_brace_alternatives(self):
        assert glob_match("Journal/x.md", "{Logs,Journal}/*.md")
        assert glob_match("Logs/x.md", "{Logs,Journal}/*.md")
        assert not glob_match("Other/x.md", "{Logs,Journal}/*.md")

    def test_character_class(self):
        assert glob_match("a.md", "[ab].md")
        assert not glob_match("c.md", "[ab].md")
        assert glob_match("c.md", "[!ab].md")

    def test_hidden_segments_not_matched_by_wildcards(self):
        assert not glob_match(".obsidian/x.md", "**/*.md")
        assert not glob_match(".hidden.md", "*.md")

    def test_literal_dots_escaped(self):
        assert not glob_match("notexmd", "note.md")

    def test_matches_any(self):
        assert matches_any("drafts/x.md", ["*.txt", "drafts/**"])
        assert not matches_any("x.md", [])


class TestMatchRoute:
    """Tests for first-match-wins routing."""

    routes = [
        Route(source_path="Logs/**/*.md", output_path="logs"),
        Route(tag="working", output_path="projects"),
        Route(source_path="**/*.md", output_path="misc"),
    ]

    def test_path_route(self):
        assert match_route("Logs/daily.md", [], self.routes).output_path == "logs"

    def test_tag_route(self):
        assert match_route("project.md", ["working"], self.routes).output_path == "projects"

    def test_first_match_wins(self):
        route = match_route("Logs/daily.md", ["working"], self.routes)
        assert route.output_path == "logs"

    def test_fallback_route(self):
        assert match_route("other.md", [], self.routes).output_path == "misc"

    def test_no_match(self):
        assert match_route("other.md", [], self.routes[:2]) is None

    def test_tag_comparison_is_exact(self):
        assert match_route("x.md", ["Working"], self.routes[:2]) is None

    def test_tag_order_does_not_matter(self):
        a = match_route("x.md", ["one", "working"], self.routes)
        b = match_route("x.md", ["working", "one"], self.routes)
        assert a == b

    def test_combined_route_requires_both(self):
        route = Route(source_path="Work/**/*.md", tag="public", output_path="pub")
        assert is_route_match("Work/a.md", ["public"], route)
        assert not is_route_match("Work/a.md", [], route)
        assert not is_route_match("Home/a.md", ["public"], route)

    def test_route_without_conditions_never_matches(self):
        assert not is_route_match("a.md", ["x"], Route(output_path="out"))
