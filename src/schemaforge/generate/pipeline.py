"""Generator orchestrator: acquire, fancify, build and render in one run.

A run either returns a complete result or raises; nothing half-done is
handed back. Naming problems do not fail a run, they come back as
``GenerationResult.diagnostics``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from schemaforge.config.models import SchemaForgeConfig
from schemaforge.core.errors import SchemaForgeError
from schemaforge.core.logging import run_scope
from schemaforge.generate.builder import build_unit
from schemaforge.ir.nodes import CompilationUnit
from schemaforge.ir.render import render
from schemaforge.naming.fancifier import fancify
from schemaforge.naming.models import DatabaseInfo, Diagnostic
from schemaforge.schema.acquire import InputRef, acquire

logger = structlog.get_logger()

DEFAULT_DATABASE_NAME = "Database"


@dataclass
class GenerationResult:
    """Everything one generation run produced."""

    database: DatabaseInfo
    unit: CompilationUnit
    source: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


def generate(
    inputs: Sequence[InputRef],
    config: SchemaForgeConfig | None = None,
    *,
    name: str | None = None,
) -> GenerationResult:
    """Generate source code for the schema described by ``inputs``.

    Args:
        inputs: Database files and SQL scripts, applied in order.
        config: Full configuration, defaults if omitted.
        name: Raw database name. Defaults to the first input's file name,
            which the naming options then clean up ("contacts.db" -> "Contacts").

    Returns:
        The entity model, the IR unit, the rendered source and the naming
        diagnostics of the run.

    Raises:
        AcquisitionError: If the schema cannot be acquired.
    """
    config = config or SchemaForgeConfig()
    paths = [Path(p) for p in inputs]
    raw_name = name or (paths[0].name if paths else DEFAULT_DATABASE_NAME)

    with run_scope():
        logger.info("generation_started", inputs=[str(p) for p in paths])
        try:
            schema = acquire(paths)
            database = fancify(schema, config.naming, name=raw_name)
            unit = build_unit(database, config.output)
            source = render(unit, config.render)
        except SchemaForgeError as e:
            logger.error("generation_failed", error=e)
            raise

        logger.info(
            "generation_completed",
            database=database.name,
            entities=len(database.entities),
            diagnostics=len(database.diagnostics),
            chars=len(source),
        )
        return GenerationResult(
            database=database,
            unit=unit,
            source=source,
            diagnostics=list(database.diagnostics),
        )
