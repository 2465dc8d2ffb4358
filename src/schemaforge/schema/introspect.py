"""Read a ``Schema`` out of a live SQLite connection.

Everything is fetched eagerly: the catalog from ``sqlite_master``, then
``PRAGMA table_info`` for every table and view and ``PRAGMA foreign_key_list``
for every table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from schemaforge.core.errors import AcquisitionError
from schemaforge.schema.models import (
    Column,
    ColumnType,
    ForeignKey,
    ForeignKeyAction,
    ForeignKeyMatch,
    Index,
    LiteralValue,
    Schema,
    Table,
    Trigger,
    View,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = structlog.get_logger()

_CATALOG_SQL = text(
    "SELECT type, name, tbl_name, rootpage, sql FROM sqlite_master ORDER BY rowid"
)

# Tables SQLite maintains itself (sqlite_sequence, sqlite_stat1, ...)
INTERNAL_PREFIX = "sqlite_"


def quote_identifier(name: str) -> str:
    """Double-quote an SQL identifier, escaping embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def engine_details(error: DBAPIError) -> tuple[str, str | None]:
    """Message and SQLite error name of a wrapped DBAPI error."""
    orig = error.orig
    if orig is None:
        return str(error), None
    return str(orig), getattr(orig, "sqlite_errorname", None)


def fetch_schema(connection: Connection, source: str) -> Schema:
    """Fetch the complete schema visible through ``connection``.

    Raises:
        AcquisitionError: If any catalog query fails. ``source`` names the
            input the failure is attributed to.
    """
    try:
        catalog = connection.execute(_CATALOG_SQL).all()
        version = connection.exec_driver_sql("PRAGMA main.schema_version").scalar() or 0
        user_version = connection.exec_driver_sql("PRAGMA main.user_version").scalar() or 0
    except DBAPIError as e:
        message, code = engine_details(e)
        raise AcquisitionError.fetch_failed(source, message, code) from e

    tables: list[Table] = []
    views: list[View] = []
    indices: dict[str, list[Index]] = {}
    triggers: dict[str, list[Trigger]] = {}

    for kind, name, table_name, root_page, sql in catalog:
        sql = sql or ""
        if kind == "table":
            if name.startswith(INTERNAL_PREFIX):
                continue
            tables.append(
                Table(
                    name=name,
                    creation_sql=sql,
                    columns=_fetch_columns(connection, name, source),
                    foreign_keys=_fetch_foreign_keys(connection, name, source),
                )
            )
        elif kind == "view":
            views.append(
                View(name=name, creation_sql=sql, columns=_fetch_columns(connection, name, source))
            )
        elif kind == "index":
            indices.setdefault(table_name, []).append(
                Index(name=name, table_name=table_name, root_page=root_page or 0, sql=sql)
            )
        elif kind == "trigger":
            triggers.setdefault(table_name, []).append(
                Trigger(name=name, table_name=table_name, sql=sql)
            )
        else:
            logger.debug("catalog_object_skipped", kind=kind, name=name)

    schema = Schema(
        version=version,
        user_version=user_version,
        tables=tuple(tables),
        views=tuple(views),
        indices={key: tuple(value) for key, value in indices.items()},
        triggers={key: tuple(value) for key, value in triggers.items()},
    )
    logger.debug(
        "schema_fetched",
        source=source,
        tables=len(schema.tables),
        views=len(schema.views),
        version=version,
    )
    return schema


def _pragma_rows(connection: Connection, pragma: str, name: str, source: str) -> list[Any]:
    try:
        return list(connection.exec_driver_sql(f"PRAGMA {pragma}({quote_identifier(name)})"))
    except DBAPIError as e:
        message, code = engine_details(e)
        raise AcquisitionError.fetch_failed(source, message, code, object_name=name) from e


def _fetch_columns(connection: Connection, name: str, source: str) -> tuple[Column, ...]:
    # cid, name, type, notnull, dflt_value, pk
    return tuple(
        Column(
            id=cid,
            name=column_name,
            type=ColumnType.parse(declared_type),
            is_not_null=bool(not_null),
            default_value=LiteralValue.parse(default),
            is_primary_key=bool(pk),
        )
        for cid, column_name, declared_type, not_null, default, pk in _pragma_rows(
            connection, "table_info", name, source
        )
    )


def _fetch_foreign_keys(connection: Connection, name: str, source: str) -> tuple[ForeignKey, ...]:
    keys = []
    for row in _pragma_rows(connection, "foreign_key_list", name, source):
        fk_id, seq, destination_table, source_column, destination_column = row[:5]
        on_update, on_delete, match = row[5:8]
        keys.append(
            ForeignKey(
                id=fk_id,
                seq=seq,
                source_column=source_column,
                destination_table=destination_table,
                destination_column=destination_column,
                update_action=ForeignKeyAction.parse(on_update),
                delete_action=ForeignKeyAction.parse(on_delete),
                match=ForeignKeyMatch.parse(match),
            )
        )
    return tuple(keys)
