# ABOUTME: The `folio inspect` command for viewing a package's reading metadata.
# ABOUTME: Parses one unpacked EPUB and prints its manifest as a table or JSON.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from folio.cli.options import json_option
from folio.core.pipeline import parse_book
from folio.errors import PackageError
from folio.manifest.types import BookManifest

console = Console()


def _print_table(root: Path, manifest: BookManifest, show_chapters: bool) -> None:
    table = Table(title=escape(root.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", escape(manifest.title))
    table.add_row("Package", escape(manifest.opf_path))
    table.add_row("Spine", f"{len(manifest.spine)} document(s)")
    cover = escape(manifest.cover_href) if manifest.cover_href else "[dim]none[/dim]"
    table.add_row("Cover", cover)
    table.add_row("Vertical", "yes" if manifest.vertical else "no")
    console.print(table)

    if not show_chapters:
        return

    chapters = Table(title="Chapters", pad_edge=False)
    chapters.add_column("#", justify="right", style="dim")
    chapters.add_column("Title")
    chapters.add_column("Href", style="cyan")
    for index, chapter in enumerate(manifest.chapters, start=1):
        chapters.add_row(str(index), escape(chapter.title), escape(chapter.href))
    console.print(chapters)


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@json_option
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the manifest JSON to this file.",
)
@click.option(
    "--chapters/--no-chapters",
    "show_chapters",
    default=True,
    help="List chapters in table output (default: on).",
)
def inspect(root: Path, json_output: bool, output: Path | None, show_chapters: bool) -> None:
    """Show the reading metadata of an unpacked EPUB directory."""
    try:
        manifest = parse_book(root)
    except PackageError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    if output is not None:
        output.write_text(manifest.to_json() + "\n", encoding="utf-8")

    if json_output:
        click.echo(manifest.to_json())
    elif output is not None:
        console.print(f"[green]Wrote[/green] {escape(str(output))}")
    else:
        _print_table(root, manifest, show_chapters)
