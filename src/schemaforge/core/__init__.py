"""Core module exports."""

from schemaforge.core.errors import (
    AcquisitionError,
    ConfigError,
    ErrorCode,
    InternalError,
    SchemaForgeError,
)
from schemaforge.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    run_scope,
    set_run_id,
)
from schemaforge.core.progress import spinner, status

__all__ = [
    # Errors
    "AcquisitionError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "SchemaForgeError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "run_scope",
    "set_run_id",
    # Progress
    "spinner",
    "status",
]
