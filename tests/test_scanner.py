"""Tests for source scanning and output path computation."""

import pytest

from markdown_sync.core.errors import ConfigurationError, FrontmatterError, TransformHookError
from markdown_sync.core.models import AnyValue, OneOfSubstrings, Route, TransformationConfig
from markdown_sync.core.scanner import Scanner, scan
from markdown_sync.transforms.hooks import slugify


class TestScanner:
    """Tests for Scanner."""

    @pytest.fixture
    def routes(self):
        return [
            Route(source_path="Logs/**/*.md", output_path="logs"),
            Route(tag="work", output_path="projects"),
        ]

    def test_routes_files_to_identity_suffixed_paths(self, workspace, make_config, write_file, routes):
        source, output = workspace
        write_file(source / "Logs" / "daily.md", "# Daily\n")
        write_file(source / "project.md", "---\ntags: [work]\n---\n# Project\n")

        files = scan(make_config(routes=routes))

        by_name = {f.relative_path: f for f in files}
        assert set(by_name) == {"Logs/daily.md", "project.md"}
        assert by_name["Logs/daily.md"].output_path == output / "logs" / "daily.alice.md"
        assert by_name["project.md"].output_path == output / "projects" / "project.alice.md"
        assert by_name["project.md"].tags == ("work",)
        assert by_name["project.md"].route.output_path == "projects"

    def test_unrouted_files_skipped(self, workspace, make_config, write_file, routes):
        source, _ = workspace
        write_file(source / "random.md", "# Random\n")
        assert scan(make_config(routes=routes)) == []

    def test_non_markdown_files_ignored(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "image.png", "binary")
        write_file(source / "note.md", "x")
        files = scan(make_config())
        assert [f.relative_path for f in files] == ["note.md"]

    def test_exclude_patterns(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "templates" / "daily.md", "x")
        write_file(source / "note.md", "x")
        files = scan(make_config(exclude=("**/templates/**",)))
        assert [f.relative_path for f in files] == ["note.md"]

    def test_require_tags_needs_all(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "both.md", "---\ntags: [public, done]\n---\n")
        write_file(source / "one.md", "---\ntags: [public]\n---\n")
        files = scan(make_config(require_tags=("public", "done")))
        assert [f.relative_path for f in files] == ["both.md"]

    def test_require_props_any_value(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "with.md", "---\ntitle: Hello\n---\n")
        write_file(source / "null.md", "---\ntitle:\n---\n")
        write_file(source / "without.md", "x")
        files = scan(make_config(require_props={"title": AnyValue()}))
        assert [f.relative_path for f in files] == ["with.md"]

    def test_require_props_substring_match(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "published.md", "---\nstatus: published\n---\n")
        write_file(source / "review.md", "---\nstatus: in review\n---\n")
        write_file(source / "draft.md", "---\nstatus: draft\n---\n")
        files = scan(make_config(require_props={"status": OneOfSubstrings(("pub", "review"))}))
        assert sorted(f.relative_path for f in files) == ["published.md", "review.md"]

    def test_malformed_frontmatter_recorded_and_skipped(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "broken.md", "---\ntitle: [unclosed\n---\n")
        write_file(source / "good.md", "x")

        scanner = Scanner(make_config())
        files = scanner.scan()

        assert [f.relative_path for f in files] == ["good.md"]
        assert len(scanner.errors) == 1
        assert scanner.errors[0].path == source / "broken.md"
        assert isinstance(scanner.errors[0].error, FrontmatterError)

    def test_scan_collects_errors_into_list(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "broken.md", "---\n- a\n---\n")
        errors = []
        scan(make_config(), errors)
        assert len(errors) == 1

    def test_identity_disabled(self, workspace, make_config, write_file):
        source, output = workspace
        write_file(source / "note.md", "x")
        files = scan(make_config(user_id_enabled=False))
        assert files[0].output_path == output / "notes" / "note.md"

    def test_dot_route_writes_to_output_root(self, workspace, make_config, write_file):
        source, output = workspace
        write_file(source / "sub" / "note.md", "x")
        files = scan(make_config(routes=[Route(source_path="**/*.md", output_path=".")]))
        assert files[0].output_path == output / "note.alice.md"

    def test_filename_transform(self, workspace, make_config, write_file):
        source, output = workspace
        write_file(source / "My Note.md", "x")
        config = make_config(transformations=TransformationConfig(filename_transform=slugify()))
        files = scan(config)
        assert files[0].output_path == output / "notes" / "my-note.alice.md"

    def test_failing_filename_transform_recorded(self, workspace, make_config, write_file):
        source, _ = workspace
        write_file(source / "note.md", "x")

        def explode(value, context):
            raise RuntimeError("boom")

        scanner = Scanner(make_config(transformations=TransformationConfig(filename_transform=explode)))
        assert scanner.scan() == []
        assert isinstance(scanner.errors[0].error, TransformHookError)

    def test_scan_order_is_deterministic(self, workspace, make_config, write_file):
        source, _ = workspace
        for name in ["b.md", "a.md", "sub/c.md"]:
            write_file(source / name, "x")
        first = [f.relative_path for f in scan(make_config())]
        second = [f.relative_path for f in scan(make_config())]
        assert first == second == ["a.md", "b.md", "sub/c.md"]

    def test_symlinked_directory_cycle_not_followed(self, workspace, make_config, write_file):
        source, output = workspace
        write_file(source / "a" / "note.md", "x")
        (source / "a" / "self").symlink_to(source / "a", target_is_directory=True)

        files = scan(make_config())

        assert [f.relative_path for f in files] == ["a/note.md"]

    def test_missing_source_dir(self, workspace, make_config):
        source, _ = workspace
        source.rmdir()
        with pytest.raises(ConfigurationError):
            scan(make_config())
