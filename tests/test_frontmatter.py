"""Tests for frontmatter parsing and output building."""

import pytest

from markdown_sync.core.errors import FilesystemError, FrontmatterError
from markdown_sync.core.frontmatter import (
    build_output,
    extract_tags,
    parse_frontmatter,
    read_note,
    split_frontmatter,
)


class TestSplitFrontmatter:
    """Tests for splitting notes into metadata and body."""

    def test_splits_mapping_and_body(self):
        text = "---\ntitle: Hello\ntags: [a, b]\n---\nBody text\n"
        frontmatter, body = split_frontmatter(text)
        assert frontmatter == {"title": "Hello", "tags": ["a", "b"]}
        assert body == "Body text\n"

    def test_no_frontmatter_returns_text_unchanged(self):
        text = "# Heading\n\nJust content.\n"
        frontmatter, body = split_frontmatter(text)
        assert frontmatter == {}
        assert body == text

    def test_empty_block(self):
        frontmatter, body = split_frontmatter("---\n---\nBody")
        assert frontmatter == {}
        assert body == "Body"

    def test_horizontal_rule_in_body_is_not_frontmatter(self):
        text = "Intro\n\n---\n\nMore"
        frontmatter, body = split_frontmatter(text)
        assert frontmatter == {}
        assert body == text

    def test_byte_order_mark_is_ignored(self):
        frontmatter, body = split_frontmatter("\ufeff---\ntitle: T\n---\nBody")
        assert frontmatter == {"title": "T"}
        assert body == "Body"

    def test_malformed_yaml_raises(self):
        with pytest.raises(FrontmatterError) as exc_info:
            split_frontmatter("---\ntitle: [unclosed\n---\nBody", "broken.md")
        assert "broken.md" in str(exc_info.value)

    def test_non_mapping_raises(self):
        with pytest.raises(FrontmatterError):
            split_frontmatter("---\n- a\n- b\n---\nBody")


class TestExtractTags:
    """Tests for tag normalization."""

    def test_list_tags(self):
        assert extract_tags({"tags": ["work", "personal"]}) == ["work", "personal"]

    def test_list_strips_hash_and_whitespace(self):
        assert extract_tags({"tags": ["#work", " personal ", "#"]}) == ["work", "personal"]

    def test_list_drops_non_strings(self):
        assert extract_tags({"tags": ["work", 42, None, "home"]}) == ["work", "home"]

    def test_string_split_on_commas_and_whitespace(self):
        assert extract_tags({"tags": "#a, b  #c"}) == ["a", "b", "c"]

    def test_string_with_leading_separator(self):
        assert extract_tags({"tags": ", a,,b"}) == ["a", "b"]

    def test_missing_or_null_tags(self):
        assert extract_tags({}) == []
        assert extract_tags({"tags": None}) == []

    def test_unsupported_type(self):
        assert extract_tags({"tags": {"a": 1}}) == []

    def test_case_preserved(self):
        assert extract_tags({"tags": ["Work"]}) == ["Work"]


class TestParseFrontmatter:
    """Tests for parse_frontmatter and read_note."""

    def test_parse_returns_tags_and_props(self):
        data, body = parse_frontmatter("---\ntags: work\nstatus: draft\n---\nBody")
        assert data.tags == ["work"]
        assert data.props == {"tags": "work", "status": "draft"}
        assert body == "Body"

    def test_read_note(self, tmp_path):
        note = tmp_path / "note.md"
        note.write_text("---\ntags: [x]\n---\nContent\n", encoding="utf-8")
        data, body = read_note(note)
        assert data.tags == ["x"]
        assert body == "Content\n"

    def test_read_missing_note_raises(self, tmp_path):
        with pytest.raises(FilesystemError) as exc_info:
            read_note(tmp_path / "missing.md")
        assert exc_info.value.operation == "read"


class TestBuildOutput:
    """Tests for serializing notes."""

    def test_with_frontmatter(self):
        output = build_output({"title": "T"}, "Body\n\n")
        assert output == "---\ntitle: T\n---\nBody\n"

    def test_without_frontmatter(self):
        assert build_output({}, "Body") == "Body\n"

    def test_preserves_key_order(self):
        output = build_output({"b": 1, "a": 2}, "x")
        assert output == "---\nb: 1\na: 2\n---\nx\n"

    def test_output_parses_back(self):
        output = build_output({"title": "Über", "tags": ["a", "b"]}, "Body")
        frontmatter, body = split_frontmatter(output)
        assert frontmatter == {"title": "Über", "tags": ["a", "b"]}
        assert body == "Body\n"
