"""Command-line entry point for the mdsync command.

Thin glue over the core operations: loads configuration, calls
scan/status/sync/clean and renders the results with Rich.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from markdown_sync.config import load_config
from markdown_sync.core.errors import CollisionError, MarkdownSyncError
from markdown_sync.core.models import OneOfSubstrings, SyncConfig
from markdown_sync.core.scanner import scan
from markdown_sync.core.sync import clean, status, sync

app = typer.Typer(
    name="mdsync",
    help="Sync markdown notes into a shared repository with multi-user support.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Attach a stderr handler to the package logger only."""
    level = logging.INFO if verbose else logging.WARNING
    app_logger = logging.getLogger("markdown_sync")
    app_logger.setLevel(level)
    # Replace handlers bound to an earlier sys.stderr
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    app_logger.addHandler(handler)


def _load(ctx: typer.Context) -> SyncConfig:
    try:
        return load_config(ctx.obj["repo_root"])
    except MarkdownSyncError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    repo_root: Optional[Path] = typer.Option(
        None, "--repo-root", help="Repository root holding the configuration (default: cwd)"
    ),
) -> None:
    ctx.obj = {"repo_root": repo_root}


@app.command("config")
def config_command(ctx: typer.Context) -> None:
    """Show the merged configuration."""
    config = _load(ctx)

    console.print("[bold]User Settings[/bold]")
    console.print(f"  User ID:  {config.user_id}")
    console.print(f"  Source:   {config.source_dir}")
    console.print(f"  Output:   {config.output_dir}")

    if config.require_tags:
        console.print("\nRequired Tags: " + ", ".join(f"#{t}" for t in config.require_tags))
    if config.require_props:
        console.print("\nRequired Properties:")
        for prop, required in config.require_props.items():
            shown = " | ".join(required.options) if isinstance(required, OneOfSubstrings) else "*"
            console.print(f"  {prop}: {shown}")
    if config.exclude:
        console.print("\nExclude Patterns:")
        for pattern in config.exclude:
            console.print(f"  {pattern}")

    table = Table(title="Routes", show_lines=False)
    table.add_column("Condition")
    table.add_column("Output")
    for route in config.routes:
        conditions = []
        if route.source_path:
            conditions.append(f"path: {route.source_path}")
        if route.tag:
            conditions.append(f"tag: #{route.tag}")
        table.add_row(" and ".join(conditions), route.output_path)
    console.print()
    console.print(table)

    t = config.transformations
    console.print("\n[bold]Transformations[/bold]")
    console.print(f"  Wikilink behavior:  {t.wikilink_behavior.value}")
    console.print(f"  URL property:       {t.url_property}")
    if t.content_properties:
        console.print(f"  Content properties: {', '.join(t.content_properties)}")
    if t.passthrough_properties:
        console.print(f"  Passthrough props:  {', '.join(t.passthrough_properties)}")
    if t.link_overrides:
        console.print(f"  Link overrides:     {len(t.link_overrides)} configured")
    if t.property_transforms:
        console.print(f"  Property hooks:     {', '.join(t.property_transforms)}")
    if t.content_transform:
        console.print("  Content hook:       configured")
    if t.filename_transform:
        console.print("  Filename hook:      configured")


@app.command("scan")
def scan_command(ctx: typer.Context) -> None:
    """Scan source files and show where each would be synced."""
    config = _load(ctx)
    _configure_logging(False)

    files = scan(config)
    if not files:
        console.print("No files found matching routes.")
        return

    console.print(f"Found {len(files)} file(s):\n")
    for source_file in files:
        console.print(f"  {escape(source_file.relative_path)}")
        if source_file.tags:
            console.print(f"    Tags: {', '.join(source_file.tags)}")
        console.print(f"    Route: {source_file.route.output_path}")
        console.print(f"    Output: {escape(str(source_file.output_path))}\n")


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show what a sync would change (dry run)."""
    config = _load(ctx)
    _configure_logging(False)

    result = status(config)
    if result.collisions:
        err_console.print("[red]COLLISIONS DETECTED:[/red]")
        for collision in result.collisions:
            err_console.print(f"  {escape(str(collision))}")
        err_console.print("\nResolve collisions before syncing.")
        raise typer.Exit(1)

    console.print(f"Files to copy: {len(result.to_copy)}")
    for source_file in result.to_copy:
        console.print(f"  [green]+[/green] {escape(source_file.relative_path)} -> {escape(str(source_file.output_path))}")

    console.print(f"\nFiles to delete: {len(result.to_delete)}")
    for path in result.to_delete:
        console.print(f"  [red]-[/red] {escape(str(path))}")

    console.print('\nNo changes made. Run "mdsync sync" to apply.')


@app.command("sync")
def sync_command(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show unresolved wikilinks and progress"),
) -> None:
    """Sync files with transformation."""
    config = _load(ctx)
    _configure_logging(verbose)

    try:
        result = sync(config, verbose=verbose)
    except CollisionError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Copied: {result.copied} file(s)")
    console.print(f"[green]✓[/green] Deleted: {result.deleted} file(s)")
    if result.files_copied:
        console.print(f"[green]✓[/green] Files copied to _files/: {result.files_copied}")

    if result.unresolved_links_count:
        console.print(f"\nWikilinks: {result.unresolved_links_count} unresolved")
        if verbose:
            for link in result.unresolved_links:
                console.print(f"  {escape(link.wikilink)} in {escape(link.file_path)}")
        else:
            console.print("  (use --verbose to see details)")

    if result.errors:
        err_console.print("\n[yellow]Errors encountered:[/yellow]")
        for error in result.errors:
            err_console.print(f"  {escape(str(error))}")
        raise typer.Exit(1)

    console.print("\n[green]✓ Sync complete![/green]")


@app.command("clean")
def clean_command(ctx: typer.Context) -> None:
    """Remove all synced files for the current user."""
    config = _load(ctx)
    _configure_logging(False)

    console.print(f"Cleaning all files for user: {config.user_id}\n")
    deleted = clean(config)
    console.print(f"[green]✓[/green] Deleted {deleted} file(s)")


if __name__ == "__main__":
    app()
