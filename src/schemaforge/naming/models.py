"""Entity model: the mutable, richer view over a Schema used for naming.

Entities and properties are created once from the Schema and refined in
place by the fancifier passes. Relationships refer to entities and
properties by their raw SQL names, which never change, rather than by
object reference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from schemaforge.schema.models import (
    Column,
    ColumnKind,
    ColumnType,
    ForeignKey,
    LiteralValue,
    Schema,
    Table,
    Trigger,
    View,
)


class EntityKind(Enum):
    TABLE = "table"
    VIEW = "view"


class PropertyKind(Enum):
    """Language-neutral value types of generated properties."""

    INTEGER = "integer"
    DOUBLE = "double"
    STRING = "string"
    BYTE_ARRAY = "byteArray"
    BOOL = "bool"
    DATE = "date"
    DATA = "data"
    URL = "url"
    DECIMAL = "decimal"
    UUID = "uuid"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class PropertyType:
    kind: PropertyKind
    name: str | None = None  # custom types only

    @classmethod
    def of(cls, kind: PropertyKind) -> PropertyType:
        return cls(kind)

    @classmethod
    def custom(cls, name: str) -> PropertyType:
        return cls(PropertyKind.CUSTOM, name)

    @classmethod
    def parse(cls, value: str) -> PropertyType:
        """Parse a config value: a kind tag ("date", "byteArray") or a custom name."""
        for kind in PropertyKind:
            if kind is not PropertyKind.CUSTOM and value.lower() == kind.value.lower():
                return cls(kind)
        return cls.custom(value)

    @classmethod
    def for_column_type(cls, column_type: ColumnType | None) -> PropertyType:
        """Base mapping from the declared SQL type."""
        if column_type is None:
            return cls(PropertyKind.STRING)
        kind = _BASE_TYPES.get(column_type.kind)
        if kind is not None:
            return cls(kind)
        if (column_type.name or "").lower() == "url":
            return cls(PropertyKind.URL)
        return cls(PropertyKind.STRING)

    @property
    def tag(self) -> str:
        return self.name if self.kind is PropertyKind.CUSTOM and self.name else self.kind.value

    def __str__(self) -> str:
        return self.tag


_BASE_TYPES = {
    ColumnKind.INTEGER: PropertyKind.INTEGER,
    ColumnKind.REAL: PropertyKind.DOUBLE,
    ColumnKind.TEXT: PropertyKind.STRING,
    ColumnKind.BLOB: PropertyKind.BYTE_ARRAY,
    ColumnKind.ANY: PropertyKind.STRING,
    ColumnKind.BOOLEAN: PropertyKind.BOOL,
    ColumnKind.VARCHAR: PropertyKind.STRING,
    ColumnKind.DATE: PropertyKind.STRING,
    ColumnKind.DATETIME: PropertyKind.STRING,
    ColumnKind.TIMESTAMP: PropertyKind.DATE,
    ColumnKind.DECIMAL: PropertyKind.DECIMAL,
}


class Severity(Enum):
    """Diagnostic severity level."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCode(Enum):
    UNRESOLVED_FOREIGN_KEY_TABLE = "unresolved_foreign_key_table"
    UNRESOLVED_FOREIGN_KEY_COLUMN = "unresolved_foreign_key_column"
    AMBIGUOUS_FOREIGN_KEY = "ambiguous_foreign_key"
    GENERIC_SINGULARIZATION = "generic_singularization"


@dataclass
class Diagnostic:
    """A non-fatal naming or relationship problem."""

    code: DiagnosticCode
    message: str
    severity: Severity = Severity.WARNING
    entity: str | None = None  # raw entity name
    column: str | None = None  # raw column name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "entity": self.entity,
            "column": self.column,
        }


@dataclass
class Property:
    """A column of an entity, with its derived identifier and value type."""

    raw_column_name: str
    derived_name: str
    column_type: ColumnType | None
    property_type: PropertyType
    is_not_null: bool = False
    is_primary_key: bool = False
    default_value: LiteralValue | None = None
    foreign_key: ForeignKey | None = None
    is_primary_key_synthesized: bool = False
    is_foreign_key_synthesized: bool = False

    @classmethod
    def from_column(cls, column: Column, foreign_key: ForeignKey | None = None) -> Property:
        return cls(
            raw_column_name=column.name,
            derived_name=column.name,
            column_type=column.type,
            property_type=PropertyType.for_column_type(column.type),
            is_not_null=column.is_not_null,
            is_primary_key=column.is_primary_key,
            default_value=column.default_value,
            foreign_key=foreign_key,
        )

    @property
    def is_optional(self) -> bool:
        """Whether generated code should allow a missing value.

        SQLite allows NULL in non-``NOT NULL`` primary key columns, but the
        generated records treat primary keys as always present.
        """
        return not (self.is_not_null or self.is_primary_key)


@dataclass
class Relationship:
    """A directed edge between two entities.

    ``source_property`` is a raw column name of the owning entity;
    ``destination_entity`` and ``destination_property`` are raw names in the
    same ``DatabaseInfo``.
    """

    name: str
    source_property: str
    destination_entity: str
    destination_property: str
    is_to_many: bool = False
    is_primary: bool = True
    qualifier: str | None = None
    is_synthesized: bool = False


_INSTEAD_OF_RE = re.compile(
    r"\bINSTEAD\s+OF\s+(INSERT|UPDATE|DELETE)\s+(?:OF|ON)\b", re.IGNORECASE
)


def instead_of_operation(trigger_sql: str) -> str | None:
    """Operation ("INSERT", "UPDATE", "DELETE") of an ``INSTEAD OF`` trigger."""
    match = _INSTEAD_OF_RE.search(trigger_sql)
    return match.group(1).upper() if match else None


@dataclass
class EntityInfo:
    """A table or view together with its derived names."""

    raw_name: str
    derived_name: str
    kind: EntityKind
    properties: list[Property] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    creation_sql: str = ""
    reference_name: str = ""
    singular_raw_name: str = ""
    plural_raw_name: str = ""
    index_sql: list[str] = field(default_factory=list)
    trigger_sql: list[str] = field(default_factory=list)

    @property
    def primary_key_properties(self) -> list[Property]:
        return [p for p in self.properties if p.is_primary_key]

    @property
    def has_compound_primary_key(self) -> bool:
        return len(self.primary_key_properties) > 1

    @property
    def primary_key_property(self) -> Property | None:
        """The single primary key property, None if there is none or it is compound."""
        keys = self.primary_key_properties
        return keys[0] if len(keys) == 1 else None

    def find_property(self, raw_column_name: str) -> Property | None:
        """Property by raw column name, exact match first, then case-insensitive."""
        for p in self.properties:
            if p.raw_column_name == raw_column_name:
                return p
        lower = raw_column_name.lower()
        return next((p for p in self.properties if p.raw_column_name.lower() == lower), None)

    def _supports(self, operation: str) -> bool:
        if self.kind is EntityKind.TABLE:
            return True
        return any(instead_of_operation(sql) == operation for sql in self.trigger_sql)

    @property
    def can_insert(self) -> bool:
        return self._supports("INSERT")

    @property
    def can_update(self) -> bool:
        return self._supports("UPDATE")

    @property
    def can_delete(self) -> bool:
        return self._supports("DELETE")

    @property
    def is_read_only(self) -> bool:
        return not (self.can_insert or self.can_update or self.can_delete)

    @property
    def to_one_relationships(self) -> list[Relationship]:
        return [r for r in self.relationships if not r.is_to_many]

    @property
    def to_many_relationships(self) -> list[Relationship]:
        return [r for r in self.relationships if r.is_to_many]


@dataclass
class DatabaseInfo:
    """All entities of one database plus the diagnostics of the last naming run."""

    name: str
    entities: list[EntityInfo] = field(default_factory=list)
    user_version: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def entity(self, raw_name: str) -> EntityInfo | None:
        """Entity by raw SQL name; SQLite names are case-insensitive."""
        for entity in self.entities:
            if entity.raw_name == raw_name:
                return entity
        lower = raw_name.lower()
        return next((e for e in self.entities if e.raw_name.lower() == lower), None)

    @property
    def tables(self) -> list[EntityInfo]:
        return [e for e in self.entities if e.kind is EntityKind.TABLE]

    @property
    def views(self) -> list[EntityInfo]:
        return [e for e in self.entities if e.kind is EntityKind.VIEW]


def _entity_from(
    source: Table | View, kind: EntityKind, schema: Schema
) -> EntityInfo:
    foreign_keys = source.foreign_keys if isinstance(source, Table) else ()
    # Compound foreign keys map column by column; the first mapping wins
    by_column: dict[str, ForeignKey] = {}
    for fk in foreign_keys:
        by_column.setdefault(fk.source_column, fk)

    triggers: tuple[Trigger, ...] = schema.triggers.get(source.name, ())
    return EntityInfo(
        raw_name=source.name,
        derived_name=source.name,
        kind=kind,
        properties=[Property.from_column(c, by_column.get(c.name)) for c in source.columns],
        creation_sql=source.creation_sql,
        index_sql=[i.sql for i in schema.indices.get(source.name, ()) if i.sql],
        trigger_sql=[t.sql for t in triggers if t.sql],
    )


def database_info_from_schema(schema: Schema, name: str = "Database") -> DatabaseInfo:
    """Fresh, un-fancified entity model: derived names equal raw names."""
    entities = [_entity_from(t, EntityKind.TABLE, schema) for t in schema.tables]
    entities += [_entity_from(v, EntityKind.VIEW, schema) for v in schema.views]
    return DatabaseInfo(name=name, entities=entities, user_version=schema.user_version)


def schema_of(database: DatabaseInfo) -> Schema:
    """Project a fancified model back into a Schema named by derived names.

    Creation SQL is carried over unchanged and no longer matches the names;
    the projection is meant for re-running naming, not for replaying.
    """

    def derived_entity_name(raw: str) -> str:
        entity = database.entity(raw)
        return entity.derived_name if entity else raw

    def derived_column_name(raw_entity: str, raw_column: str) -> str:
        entity = database.entity(raw_entity)
        prop = entity.find_property(raw_column) if entity else None
        return prop.derived_name if prop else raw_column

    def columns(entity: EntityInfo) -> tuple[Column, ...]:
        return tuple(
            Column(
                id=position,
                name=p.derived_name,
                type=p.column_type,
                is_not_null=p.is_not_null,
                default_value=p.default_value,
                is_primary_key=p.is_primary_key,
            )
            for position, p in enumerate(entity.properties)
        )

    tables: list[Table] = []
    views: list[View] = []
    for entity in database.entities:
        if entity.kind is EntityKind.VIEW:
            views.append(View(entity.derived_name, entity.creation_sql, columns(entity)))
            continue
        foreign_keys = tuple(
            ForeignKey(
                id=fk_id,
                source_column=p.derived_name,
                destination_table=derived_entity_name(p.foreign_key.destination_table),
                destination_column=derived_column_name(
                    p.foreign_key.destination_table, p.foreign_key.target_column
                ),
                update_action=p.foreign_key.update_action,
                delete_action=p.foreign_key.delete_action,
                match=p.foreign_key.match,
            )
            for fk_id, p in enumerate(
                q for q in entity.properties if q.foreign_key and not q.is_foreign_key_synthesized
            )
        )
        tables.append(
            Table(entity.derived_name, entity.creation_sql, columns(entity), foreign_keys)
        )

    return Schema(user_version=database.user_version, tables=tuple(tables), views=tuple(views))
