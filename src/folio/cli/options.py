# ABOUTME: Shared Click options for Folio CLI commands.
# ABOUTME: Provides reusable decorators for common flags like --json.

import click

json_option = click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output results as JSON.",
)
