"""CLI utilities."""

from pathlib import Path

import click

from schemaforge.config.loader import load_config
from schemaforge.config.models import SchemaForgeConfig
from schemaforge.core.errors import SchemaForgeError
from schemaforge.core.logging import configure_logging


def load_cli_config(ctx: click.Context, config_path: Path | None) -> SchemaForgeConfig:
    """Load configuration for a command and apply its logging section.

    ``--verbose`` keeps the debug console logging set up by the group.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    try:
        config = load_config(config_path)
    except SchemaForgeError as e:
        raise click.ClickException(str(e)) from e

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    if not verbose:
        configure_logging(config=config.logging)
    return config
