# ABOUTME: CLI package for Folio, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from folio.cli.commands import inspect_cmd, scan_cmd


def _configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="folio")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    default=False,
    help="Log each fallback decision while parsing.",
)
def cli(verbose: bool) -> None:
    """Folio - reading metadata for unpacked EPUB packages."""
    _configure_logging(verbose)


cli.add_command(inspect_cmd.inspect)
cli.add_command(scan_cmd.scan)
