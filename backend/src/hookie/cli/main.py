"""Hookie CLI entry point."""

import click

from hookie.config import configure_logging


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    help="Logging level (DEBUG, INFO, WARNING, ERROR).",
)
def cli(log_level: str):
    """Hookie — lifecycle hooks and audit trail CLI."""
    configure_logging(log_level)


# Register subcommands
from hookie.cli.scan_cmd import models, scan  # noqa: E402

cli.add_command(scan)
cli.add_command(models)
