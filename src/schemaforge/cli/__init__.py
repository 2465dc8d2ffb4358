"""SchemaForge CLI."""

from schemaforge.cli.main import cli

__all__ = ["cli"]
