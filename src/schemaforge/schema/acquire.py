"""Schema acquisition: merge database files and SQL scripts into one Schema.

A single binary database is read directly (read-only). Anything else is
replayed, in input order, into a private in-memory scratch database and the
schema is fetched from there once at the end:

- database file: its schema is fetched, then its tables, views, indices and
  triggers are recreated from their stored SQL, in that order
- SQL script: executed verbatim as one batch

Every failure is terminal and raises ``AcquisitionError``. Nothing is retried.
"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import structlog
from sqlalchemy import Connection, Engine, create_engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import NullPool, StaticPool

from schemaforge.core.errors import AcquisitionError
from schemaforge.schema.introspect import engine_details, fetch_schema
from schemaforge.schema.models import Schema

logger = structlog.get_logger()

SQLITE_MAGIC = b"SQLite format 3\x00"

SCRATCH_SOURCE = "<scratch>"

InputRef = str | os.PathLike[str]


def is_database_file(path: InputRef) -> bool:
    """True if ``path`` starts with the 16-byte SQLite header.

    Raises:
        AcquisitionError: If the file does not exist or cannot be read.
    """
    path = Path(path)
    if not path.is_file():
        raise AcquisitionError.input_not_found(str(path))
    try:
        with path.open("rb") as f:
            return f.read(len(SQLITE_MAGIC)) == SQLITE_MAGIC
    except OSError as e:
        raise AcquisitionError.input_unreadable(str(path), str(e)) from e


def acquire(inputs: Sequence[InputRef]) -> Schema:
    """Build the schema described by ``inputs``.

    Args:
        inputs: Database files and/or UTF-8 SQL scripts. Later inputs execute
            after earlier ones against the same scratch database.

    Returns:
        The merged schema. An empty input list yields an empty schema.

    Raises:
        AcquisitionError: On a missing/unreadable input, a database that cannot
            be opened, a failing statement, or a failed schema fetch.
    """
    paths = [Path(p) for p in inputs]
    kinds = [is_database_file(p) for p in paths]

    if len(paths) == 1 and kinds[0]:
        schema = read_database_schema(paths[0])
    else:
        with scratch_database() as scratch:
            for path, is_db in zip(paths, kinds, strict=True):
                if is_db:
                    scratch.apply_database(path)
                else:
                    scratch.apply_script(path)
            schema = scratch.fetch()

    logger.info(
        "schema_acquired",
        inputs=[str(p) for p in paths],
        tables=len(schema.tables),
        views=len(schema.views),
    )
    return schema


def read_database_schema(path: InputRef) -> Schema:
    """Fetch the schema of a database file, opened read-only."""
    path = Path(path)
    source = str(path)
    uri = path.resolve().as_uri() + "?mode=ro"
    engine = create_engine(
        "sqlite://",
        creator=lambda: sqlite3.connect(uri, uri=True),
        poolclass=NullPool,
    )
    try:
        with _connect(engine, source) as connection:
            return fetch_schema(connection, source)
    finally:
        engine.dispose()


@contextmanager
def _connect(engine: Engine, source: str) -> Iterator[Connection]:
    try:
        connection = engine.connect()
    except DBAPIError as e:
        message, code = engine_details(e)
        raise AcquisitionError.open_failed(source, message, code) from e
    with connection:
        yield connection


class ScratchDatabase:
    """Private in-memory database that schema sources are replayed into."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    def apply_database(self, path: Path) -> None:
        """Recreate a database file's tables, views, indices and triggers."""
        source = str(path)
        schema = read_database_schema(path)

        statements: list[tuple[str, str, str]] = []
        statements += [("table", t.name, t.creation_sql) for t in schema.tables]
        statements += [("view", v.name, v.creation_sql) for v in schema.views]
        statements += [
            ("index", index.name, index.sql)
            for entries in schema.indices.values()
            for index in entries
        ]
        statements += [
            ("trigger", trigger.name, trigger.sql)
            for entries in schema.triggers.values()
            for trigger in entries
        ]

        for object_type, name, sql in statements:
            if not sql:
                # sqlite_autoindex_* come back with their table
                continue
            try:
                self._connection.exec_driver_sql(sql)
            except DBAPIError as e:
                message, code = engine_details(e)
                raise AcquisitionError.recreate_failed(
                    object_type, name, source, message, code
                ) from e

        self._connection.exec_driver_sql(f"PRAGMA user_version = {int(schema.user_version)}")
        logger.debug("database_replayed", source=source, statements=len(statements))

    def apply_script(self, path: Path) -> None:
        """Execute a SQL script verbatim."""
        source = str(path)
        try:
            script = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AcquisitionError.input_unreadable(source, str(e)) from e

        driver = self._connection.connection.driver_connection
        try:
            driver.executescript(script)  # type: ignore[union-attr]
        except sqlite3.Error as e:
            raise AcquisitionError.script_failed(
                source, str(e), getattr(e, "sqlite_errorname", None)
            ) from e
        logger.debug("script_applied", source=source, chars=len(script))

    def fetch(self) -> Schema:
        return fetch_schema(self._connection, SCRATCH_SOURCE)


@contextmanager
def scratch_database() -> Iterator[ScratchDatabase]:
    """Scratch database scoped to the block; released on every exit path."""
    engine = create_engine("sqlite://", poolclass=StaticPool)
    try:
        with _connect(engine, SCRATCH_SOURCE) as connection:
            yield ScratchDatabase(connection)
    finally:
        engine.dispose()
