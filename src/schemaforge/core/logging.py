"""Structured logging for generation runs.

Every event logged while a run is active carries that run's ``run_id``, so
interleaved output of parallel runs can be told apart. Outputs (console or
JSON, to a stream or a file) are configured independently, each with its own
level. Console outputs go quiet while a spinner is drawing.

Errors passed as ``error=`` are expanded into their code, name and details::

    logger.error("generation_failed", error=exc)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from schemaforge.core.errors import SchemaForgeError
from schemaforge.core.progress import is_console_suppressed

if TYPE_CHECKING:
    from schemaforge.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

_STREAMS = ("stderr", "stdout")


def _new_run_id() -> str:
    return uuid4().hex[:12]


def get_run_id() -> str | None:
    return _run_id.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set the run id of the current context, generating one if omitted."""
    rid = run_id or _new_run_id()
    _run_id.set(rid)
    return rid


def clear_run_id() -> None:
    _run_id.set(None)


@contextmanager
def run_scope(run_id: str | None = None) -> Iterator[str]:
    """Bind a run id for the duration of the block.

    The previous id (usually none) is restored on exit, also when scopes nest.
    """
    rid = run_id or _new_run_id()
    token = _run_id.set(rid)
    try:
        yield rid
    finally:
        _run_id.reset(token)


def _add_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_run_id():
        event_dict["run_id"] = rid
    return event_dict


def _expand_error(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    error = event_dict.get("error")
    if isinstance(error, SchemaForgeError):
        event_dict["error"] = error.message
        event_dict["error_code"] = error.code.value
        event_dict["error_name"] = error.error_name
        for key, value in error.details.items():
            event_dict.setdefault(key, value)
    return event_dict


def _level(name: str | None, default: int) -> int:
    if name is None:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


class ConsoleSuppressingFilter(logging.Filter):
    """Drop console records while a spinner owns the terminal line."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        return not is_console_suppressed()


def _formatter(
    output: LogOutputConfig, shared: list[structlog.types.Processor]
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer(default=str)
    else:
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        renderer = structlog.dev.ConsoleRenderer(
            colors=output.destination in _STREAMS and stream.isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)


def _handler(destination: str) -> logging.Handler:
    if destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog events to the outputs of ``config``.

    Without a config a single stderr output at ``level`` is used. Safe to call
    repeatedly; each call replaces the previous handlers.

    Args:
        config: Logging section of the loaded configuration.
        json_format: Render the default output as JSON lines.
        level: Level of the default output.
    """
    from schemaforge.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )
    root_level = _level(config.level, logging.INFO)

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_run_id,  # type: ignore[list-item]
        _expand_error,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must take effect for loggers created at import time
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)
    # SQLAlchemy echoes every PRAGMA at INFO once its engine logger is enabled
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    for output in config.outputs:
        handler = _handler(output.destination)
        handler.setLevel(_level(output.level, root_level))
        handler.setFormatter(_formatter(output, shared))
        if output.destination in _STREAMS:
            handler.addFilter(ConsoleSuppressingFilter())
        root.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """structlog logger, bound to ``logger=name`` when a name is given."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
