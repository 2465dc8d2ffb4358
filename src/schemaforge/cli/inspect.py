"""schemaforge inspect command - show derived names and relationships."""

import json
from pathlib import Path

import click

from schemaforge.cli.utils import load_cli_config
from schemaforge.core.errors import SchemaForgeError
from schemaforge.core.progress import entity_table, get_console, report_diagnostics
from schemaforge.naming.fancifier import fancify
from schemaforge.schema.acquire import acquire


@click.command()
@click.argument(
    "inputs",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ./schemaforge.yaml if present)",
)
@click.option("--name", help="Database name (default: derived from the first input)")
@click.option("--json", "as_json", is_flag=True, help="Output diagnostics as JSON")
@click.pass_context
def inspect_command(
    ctx: click.Context,
    inputs: tuple[Path, ...],
    config_path: Path | None,
    name: str | None,
    as_json: bool,
) -> None:
    """Show the records, properties and relationships derived from INPUTS."""
    config = load_cli_config(ctx, config_path)

    try:
        schema = acquire(inputs)
    except SchemaForgeError as e:
        raise click.ClickException(str(e)) from e
    database = fancify(schema, config.naming, name=name or inputs[0].name)

    if as_json:
        payload = {
            "database": database.name,
            "records": {e.raw_name: e.derived_name for e in database.entities},
            "diagnostics": [d.to_dict() for d in database.diagnostics],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    get_console().print(entity_table(database))
    report_diagnostics(database.diagnostics)
