"""
Click-based CLI for pgschemadiff.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from . import __version__
from .catalog import PostgresCatalogReader, build_schema
from .config import DEFAULT_SCHEMA, ConnectionSettings
from .differ import SchemaDiffer, wrap_in_transaction
from .errors import SchemaDiffError
from .models import Schema
from .storage import is_snapshot_path, load_snapshot, save_snapshot

# Status goes to stderr so `--output -` can stream the script on stdout
console = Console(stderr=True)
out_console = Console()


def connection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Shared connection options, falling back to the libpq environment variables"""
    options = [
        click.option("--host", envvar="PGHOST", default="localhost", show_default=True),
        click.option("--port", envvar="PGPORT", type=int, default=5432, show_default=True),
        click.option("--user", envvar="PGUSER", default="postgres", show_default=True),
        click.option("--password", envvar="PGPASSWORD", default="", show_default=False),
        click.option("--sslmode", envvar="PGSSLMODE", default="disable", show_default=True),
        click.option(
            "--schema",
            "schema_name",
            default=DEFAULT_SCHEMA,
            show_default=True,
            help="Schema to compare in both databases",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _settings(**kwargs: Any) -> ConnectionSettings:
    return ConnectionSettings(**kwargs)


def load_side(source: str, settings: ConnectionSettings) -> Schema:
    """Load one side of a diff from a snapshot file or a live database"""
    if is_snapshot_path(source):
        console.print(f"  [green]✓[/green] snapshot {source}")
        return load_snapshot(Path(source))
    with PostgresCatalogReader.connect(settings, source) as reader:
        schema = build_schema(reader, source, settings.schema_name)
    console.print(f"  [green]✓[/green] database {source}")
    return schema


@click.group()
@click.version_option(version=__version__, prog_name="pgschemadiff")
def cli() -> None:
    """pgschemadiff - generate PostgreSQL migration scripts from schema differences"""


@cli.command()
@click.argument("desired")
@click.argument("current")
@connection_options
@click.option(
    "--output",
    "-o",
    default="migrate.sql",
    show_default=True,
    help="Output file path, or - to print the script",
)
@click.option("--commit", is_flag=True, help="End the script with COMMIT instead of ROLLBACK")
def diff(
    desired: str,
    current: str,
    host: str,
    port: int,
    user: str,
    password: str,
    sslmode: str,
    schema_name: str,
    output: str,
    commit: bool,
) -> None:
    """Generate the script migrating CURRENT to DESIRED

    DESIRED and CURRENT are database names or snapshot .json files.
    """
    try:
        settings = _settings(
            host=host,
            port=port,
            user=user,
            password=password,
            sslmode=sslmode,
            schema_name=schema_name,
        )
        console.print("[bold]Loading schemas...[/bold]")
        desired_schema = load_side(desired, settings)
        current_schema = load_side(current, settings)

        console.print(f"[bold]Generating diff: {current} → {desired}[/bold]")
        result = SchemaDiffer(desired_schema, current_schema).diff()
        for warning in result.warnings:
            console.print(f"[yellow]⚠ {escape(warning)}[/yellow]")

        script = wrap_in_transaction(result.sql, commit=commit)
        if output == "-":
            out_console.print(Syntax(script, "sql", theme="monokai", line_numbers=False))
        else:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(script, encoding="utf-8")
            console.print(f"[green]✓[/green] SQL written to {output}")

        if result.is_empty:
            console.print("[yellow]No changes detected between schemas[/yellow]")
        else:
            console.print(f"  Statements: {len(result.statements)}")
            console.print(f"  Warnings: {len(result.warnings)}")

    except (SchemaDiffError, ValidationError, OSError) as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
@click.argument("database")
@connection_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Snapshot file to write (.json)",
)
def snapshot(
    database: str,
    host: str,
    port: int,
    user: str,
    password: str,
    sslmode: str,
    schema_name: str,
    output: str,
) -> None:
    """Write a JSON snapshot of DATABASE for offline diffing"""
    try:
        settings = _settings(
            host=host,
            port=port,
            user=user,
            password=password,
            sslmode=sslmode,
            schema_name=schema_name,
        )
        with PostgresCatalogReader.connect(settings, database) as reader:
            schema = build_schema(reader, database, settings.schema_name)
        save_snapshot(Path(output), schema)
        console.print(f"[green]✓[/green] Snapshot written to {output}")
        console.print(f"  Tables: {len(schema.tables)}")
        console.print(f"  Sequences: {len(schema.sequences)}")
        console.print(f"  Types: {len(schema.types)}")

    except (SchemaDiffError, ValidationError, OSError) as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
