# ABOUTME: The `folio scan` command for parsing a directory of unpacked EPUBs.
# ABOUTME: Reports one row per package root, including roots that failed to parse.

import json as json_lib
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from folio.cli.options import json_option
from folio.core.scanner import ScanResult, scan_library

console = Console()


def _print_json(result: ScanResult) -> None:
    payload = {
        "scan_root": str(result.scan_root),
        "books": [
            {"root": str(entry.root), **entry.manifest.to_dict()}
            for entry in result.parsed
        ],
        "errors": [
            {"root": str(entry.root), "stage": entry.stage, "error": entry.error}
            for entry in result.failed
        ],
    }
    click.echo(json_lib.dumps(payload, indent=2, ensure_ascii=False))


def _print_table(result: ScanResult) -> None:
    table = Table(title=f"Packages under {escape(str(result.scan_root))}", pad_edge=False)
    table.add_column("Directory", style="dim")
    table.add_column("Title")
    table.add_column("Chapters", justify="right")
    table.add_column("Cover")

    for entry in result.entries:
        name = entry.root.relative_to(result.scan_root).as_posix()
        if entry.manifest is not None:
            table.add_row(
                escape(name),
                escape(entry.manifest.title),
                str(len(entry.manifest.chapters)),
                "yes" if entry.manifest.cover_href else "no",
            )
        else:
            table.add_row(
                escape(name),
                f"[red]{entry.stage} error:[/red] {escape(entry.error or '')}",
                "-",
                "-",
            )

    console.print(table)
    console.print(
        f"[green]{len(result.parsed)} parsed[/green], "
        f"[red]{len(result.failed)} failed[/red]"
    )


@click.command("scan")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@json_option
def scan(directory: Path, json_output: bool) -> None:
    """Parse every unpacked EPUB found under a directory."""
    result = scan_library(directory)

    if json_output:
        _print_json(result)
        return

    if not result.entries:
        console.print(f"[yellow]No unpacked EPUB packages found in {escape(str(directory))}[/yellow]")
        return

    _print_table(result)
