"""User-facing status output for CLI operations.

Usage::

    from schemaforge.core.progress import spinner, status

    with spinner("Reading schema"):
        schema = acquire(inputs)

    status("Wrote Contacts.swift", style="success")  # ✓ Wrote Contacts.swift
    status("1 unresolved relationship", style="warning")  # ! 1 unresolved ...
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from schemaforge.naming.models import DatabaseInfo, Diagnostic

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

# Suppresses console logging while a spinner owns the terminal line
_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Context manager to suppress structlog console output.

    Logs are still written to file handlers.
    """
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from schemaforge.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr.

    ``message`` is printed literally; SQL errors often contain brackets.
    """
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{escape(message)}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


def count_noun(count: int, singular: str, plural: str | None = None) -> str:
    """Format a count with its noun: ``count_noun(2, "table")`` -> "2 tables"."""
    if count == 1:
        return f"1 {singular}"
    return f"{count} {plural or singular + 's'}"


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Spinner with log suppression; plain message when not on a TTY."""
    padding = " " * indent
    if _is_tty():
        with (
            suppress_console_logs(),
            _console.status(f"{padding}[cyan]{message}[/cyan]", spinner="dots"),
        ):
            yield
    else:
        _console.print(f"{padding}{message}...")
        yield


def entity_table(database: DatabaseInfo) -> Table:
    """Rich table summarizing the entities and relationships of a database."""
    table = Table(title=database.name, show_lines=False)
    table.add_column("SQL name", style="dim")
    table.add_column("Kind")
    table.add_column("Record")
    table.add_column("Properties", justify="right")
    table.add_column("Relationships")

    for entity in database.entities:
        relationships = ", ".join(
            f"{rel.name} → {database.entity(rel.destination_entity).derived_name}"
            + (" (many)" if rel.is_to_many else "")
            for rel in entity.relationships
        )
        table.add_row(
            entity.raw_name,
            entity.kind.value,
            entity.derived_name,
            str(len(entity.properties)),
            relationships or "-",
        )
    return table


def report_diagnostics(diagnostics: Sequence[Diagnostic]) -> int:
    """One status line per naming diagnostic, styled by severity.

    Returns:
        The number of diagnostics that are not merely informational.
    """
    for diagnostic in diagnostics:
        status(diagnostic.message, style=diagnostic.severity.value)
    return sum(1 for d in diagnostics if d.severity.value != "info")
