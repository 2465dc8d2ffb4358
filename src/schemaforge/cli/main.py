"""SchemaForge CLI - schemaforge command."""

import click

from schemaforge.cli.generate import generate_command
from schemaforge.cli.inspect import inspect_command
from schemaforge.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="schemaforge")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """SchemaForge - generate typed data-access code from SQLite schemas."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(generate_command, name="generate")
cli.add_command(inspect_command, name="inspect")


if __name__ == "__main__":
    cli()
