"""schemaforge generate command - write source code for a schema."""

from pathlib import Path

import click

from schemaforge.cli.utils import load_cli_config
from schemaforge.core.errors import SchemaForgeError
from schemaforge.core.progress import count_noun, report_diagnostics, spinner, status
from schemaforge.generate.pipeline import generate


@click.command()
@click.argument(
    "inputs",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the generated source here instead of stdout",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ./schemaforge.yaml if present)",
)
@click.option("--name", help="Database name (default: derived from the first input)")
@click.pass_context
def generate_command(
    ctx: click.Context,
    inputs: tuple[Path, ...],
    output: Path | None,
    config_path: Path | None,
    name: str | None,
) -> None:
    """Generate source code for the schema of INPUTS.

    INPUTS are SQLite database files and SQL scripts, applied in order.
    """
    config = load_cli_config(ctx, config_path)

    try:
        with spinner("Generating"):
            result = generate(inputs, config, name=name)
    except SchemaForgeError as e:
        raise click.ClickException(str(e)) from e

    warnings = report_diagnostics(result.diagnostics)

    if output is None:
        click.echo(result.source, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.source, encoding="utf-8")
    summary = count_noun(len(result.database.entities), "record")
    if warnings:
        summary += f", {count_noun(warnings, 'warning')}"
    status(f"Wrote {output} ({summary})", style="success")
