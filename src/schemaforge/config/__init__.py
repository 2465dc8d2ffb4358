"""Configuration models and loading."""

from schemaforge.config.loader import load_config
from schemaforge.config.models import (
    CommentStyle,
    LoggingConfig,
    LogOutputConfig,
    NamingOptions,
    OutputConfig,
    RenderStyle,
    SchemaForgeConfig,
)

__all__ = [
    "CommentStyle",
    "LogOutputConfig",
    "LoggingConfig",
    "NamingOptions",
    "OutputConfig",
    "RenderStyle",
    "SchemaForgeConfig",
    "load_config",
]
