"""SQL statements of a record, with their parameter positions.

Parameter index lists are indexed by property position. Each entry is the
1-based ``?`` position the property binds to, or -1 when the statement does
not use it::

    UPDATE "person" SET "name" = ? WHERE "person_id" = ?
    properties (person_id, name) -> [2, 1]
"""

from __future__ import annotations

from dataclasses import dataclass

from schemaforge.naming.models import EntityInfo, EntityKind, Property, PropertyKind
from schemaforge.schema.introspect import quote_identifier
from schemaforge.schema.models import ColumnKind


def _columns(properties: list[Property]) -> str:
    return ", ".join(quote_identifier(p.raw_column_name) for p in properties)


def _conditions(properties: list[Property], separator: str) -> str:
    return separator.join(f"{quote_identifier(p.raw_column_name)} = ?" for p in properties)


def _parameter_indices(entity: EntityInfo, parameters: list[Property]) -> list[int]:
    slots = {id(p): i for i, p in enumerate(entity.properties)}
    indices = [-1] * len(entity.properties)
    for position, prop in enumerate(parameters, start=1):
        indices[slots[id(prop)]] = position
    return indices


def is_database_generated(entity: EntityInfo, prop: Property) -> bool:
    """Whether SQLite assigns the value on insert: a lone INTEGER PRIMARY KEY."""
    if prop is not entity.primary_key_property or entity.kind is not EntityKind.TABLE:
        return False
    if prop.is_primary_key_synthesized:
        return False
    column_type = prop.column_type
    return (
        prop.property_type.kind is PropertyKind.INTEGER
        and column_type is not None
        and column_type.kind is ColumnKind.INTEGER
    )


def match_properties(entity: EntityInfo) -> list[Property]:
    """Properties identifying a row: the primary keys, else every property."""
    return entity.primary_key_properties or list(entity.properties)


@dataclass(frozen=True, slots=True)
class RecordStatements:
    """All statements of one entity. Statements the entity cannot run are None."""

    select_columns: str
    select: str
    select_column_indices: list[int]
    insert: str | None
    insert_returning: str | None
    insert_parameter_indices: list[int]
    update: str | None
    update_parameter_indices: list[int]
    delete: str | None
    delete_parameter_indices: list[int]


def record_statements(entity: EntityInfo) -> RecordStatements:
    table = quote_identifier(entity.raw_name)
    properties = list(entity.properties)
    select_columns = _columns(properties)

    insert: str | None = None
    insert_returning: str | None = None
    update: str | None = None
    delete: str | None = None
    insert_indices = [-1] * len(properties)
    update_indices = list(insert_indices)
    delete_indices = list(insert_indices)

    if entity.can_insert:
        values = [p for p in properties if not is_database_generated(entity, p)]
        if values:
            insert = (
                f"INSERT INTO {table} ( {_columns(values)} ) "
                f"VALUES ( {', '.join('?' for _ in values)} )"
            )
        else:
            insert = f"INSERT INTO {table} DEFAULT VALUES"
        insert_returning = f"{insert} RETURNING {select_columns}"
        insert_indices = _parameter_indices(entity, values)

    keys = entity.primary_key_properties
    values = [p for p in properties if not p.is_primary_key]
    # Each property binds once, so updates need keys separate from values
    if entity.can_update and keys and values:
        update = (
            f"UPDATE {table} SET {_conditions(values, ', ')} "
            f"WHERE {_conditions(keys, ' AND ')}"
        )
        update_indices = _parameter_indices(entity, values + keys)

    if entity.can_delete:
        matches = match_properties(entity)
        delete = f"DELETE FROM {table} WHERE {_conditions(matches, ' AND ')}"
        delete_indices = _parameter_indices(entity, matches)

    return RecordStatements(
        select_columns=select_columns,
        select=f"SELECT {select_columns} FROM {table}",
        select_column_indices=list(range(len(properties))),
        insert=insert,
        insert_returning=insert_returning,
        insert_parameter_indices=insert_indices,
        update=update,
        update_parameter_indices=update_indices,
        delete=delete,
        delete_parameter_indices=delete_indices,
    )
