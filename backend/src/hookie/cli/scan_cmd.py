"""Registry CLI commands — scan sources and inspect registry tables."""

from pathlib import Path

import click

from hookie.discovery.inspector import SourceInspector
from hookie.discovery.registry import ModelRegistry
from hookie.discovery.table import read_registry_table, save_registry_table
from hookie.errors import ModuleResolutionError, RegistryTableError


@click.command()
@click.argument(
    "root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the discovered models to a registry table (YAML).",
)
def scan(root: Path, output: Path | None):
    """Find audit-enabled models in the project at ROOT."""
    registry = ModelRegistry()
    try:
        report = SourceInspector(root).scan(registry)
    except ModuleResolutionError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    for skipped in report.skipped:
        click.echo(click.style(f"  skipped {skipped.path}: {skipped.reason}", fg="yellow"))

    if not report.models:
        click.echo(f"No audit-enabled models found ({report.modules_scanned} module(s) scanned).")
    else:
        click.echo(
            f"Found {len(report.models)} audit-enabled model(s) "
            f"in {report.modules_scanned} module(s):"
        )
        for identity in report.models:
            click.echo(f"  ✓ {identity}")

    if output is not None:
        save_registry_table(report.models, output)
        click.echo(click.style(f"\nRegistry table written to {output}", fg="green"))


@click.command()
@click.argument("table", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def models(table: Path):
    """List the models recorded in a registry TABLE."""
    try:
        identities = read_registry_table(table)
    except RegistryTableError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"{len(identities)} audit-enabled model(s):")
    for identity in identities:
        click.echo(f"  {identity}")
