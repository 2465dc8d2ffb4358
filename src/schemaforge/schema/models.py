"""Immutable schema model produced by acquisition.

A ``Schema`` is built once per generation run and never mutated. Order of
``tables`` and ``views`` follows the catalog (declaration) order; the index
and trigger maps are keyed by table name, in first-seen order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum


class CatalogObjectType(Enum):
    """Kinds of objects stored in ``sqlite_master``."""

    TABLE = "table"
    VIEW = "view"
    INDEX = "index"
    TRIGGER = "trigger"


class ColumnKind(Enum):
    """Closed set of declared column types we recognize."""

    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"
    ANY = "ANY"
    BOOLEAN = "BOOLEAN"
    VARCHAR = "VARCHAR"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    DECIMAL = "DECIMAL"
    CUSTOM = "CUSTOM"


class TypeAffinity(Enum):
    """SQLite type affinity (https://www.sqlite.org/datatype3.html)."""

    TEXT = "TEXT"
    NUMERIC = "NUMERIC"
    INTEGER = "INTEGER"
    REAL = "REAL"
    BLOB = "BLOB"


_KEYWORD_TYPES = {
    "INT": ColumnKind.INTEGER,
    "INTEGER": ColumnKind.INTEGER,
    "REAL": ColumnKind.REAL,
    "DOUBLE": ColumnKind.REAL,
    "TEXT": ColumnKind.TEXT,
    "BLOB": ColumnKind.BLOB,
    "ANY": ColumnKind.ANY,
    "BOOL": ColumnKind.BOOLEAN,
    "BOOLEAN": ColumnKind.BOOLEAN,
    "DATE": ColumnKind.DATE,
    "DATETIME": ColumnKind.DATETIME,
    "TIMESTAMP": ColumnKind.TIMESTAMP,
    "DECIMAL": ColumnKind.DECIMAL,
}

_VARCHAR_RE = re.compile(r"^VARCHAR\s*\(\s*(\d+)\s*\)$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ColumnType:
    """Declared type of a column.

    Aliases are deliberately not folded (``CLOB`` stays a custom type) so the
    generator can still see what the schema author wrote.
    """

    kind: ColumnKind
    width: int | None = None
    name: str | None = None

    @classmethod
    def parse(cls, raw: str | None) -> ColumnType | None:
        """Parse a declared type. Empty or missing types are untyped (None)."""
        if not raw:
            return None
        kind = _KEYWORD_TYPES.get(raw.upper())
        if kind is not None:
            return cls(kind)
        if raw.upper() == "VARCHAR":
            return cls(ColumnKind.VARCHAR)
        if match := _VARCHAR_RE.match(raw):
            return cls(ColumnKind.VARCHAR, width=int(match.group(1)))
        return cls(ColumnKind.CUSTOM, name=raw)

    @property
    def raw(self) -> str:
        if self.kind is ColumnKind.CUSTOM:
            return self.name or ""
        if self.kind is ColumnKind.VARCHAR and self.width is not None:
            return f"VARCHAR({self.width})"
        return self.kind.value

    @property
    def affinity(self) -> TypeAffinity:
        """Affinity per SQLite's column affinity rules."""
        if self.kind is ColumnKind.INTEGER:
            return TypeAffinity.INTEGER
        if self.kind is ColumnKind.REAL:
            return TypeAffinity.REAL
        if self.kind is ColumnKind.TEXT:
            return TypeAffinity.TEXT
        if self.kind is ColumnKind.BLOB:
            return TypeAffinity.BLOB
        if self.kind is not ColumnKind.CUSTOM:
            return TypeAffinity.NUMERIC

        upper = (self.name or "").upper()
        if "INT" in upper:
            return TypeAffinity.INTEGER
        if any(token in upper for token in ("CHAR", "CLOB", "TEXT")):
            return TypeAffinity.TEXT
        if "BLOB" in upper:
            return TypeAffinity.BLOB
        if any(token in upper for token in ("REAL", "FLOA", "DOUB")):
            return TypeAffinity.REAL
        return TypeAffinity.NUMERIC

    def __str__(self) -> str:
        return self.raw


class LiteralKind(Enum):
    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"
    BOOLEAN = "boolean"
    # Non-constant default such as CURRENT_TIMESTAMP or (abs(-1))
    EXPRESSION = "expression"


_INT_RE = re.compile(r"^[+-]?\d+$")
_REAL_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_BLOB_RE = re.compile(r"^[xX]'([0-9a-fA-F]*)'$")


@dataclass(frozen=True, slots=True)
class LiteralValue:
    """A column default, parsed from the ``dflt_value`` text of ``table_info``."""

    kind: LiteralKind
    value: int | float | str | bytes | bool | None = None

    @classmethod
    def parse(cls, text: str | None) -> LiteralValue | None:
        """Parse a default expression. A missing default yields None."""
        if text is None:
            return None
        text = text.strip()
        upper = text.upper()
        if upper == "NULL":
            return cls(LiteralKind.NULL)
        if upper in ("TRUE", "FALSE"):
            return cls(LiteralKind.BOOLEAN, upper == "TRUE")
        if _INT_RE.match(text):
            return cls(LiteralKind.INTEGER, int(text))
        if _REAL_RE.match(text):
            return cls(LiteralKind.REAL, float(text))
        if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
            return cls(LiteralKind.TEXT, text[1:-1].replace("''", "'"))
        if match := _BLOB_RE.match(text):
            return cls(LiteralKind.BLOB, bytes.fromhex(match.group(1)))
        return cls(LiteralKind.EXPRESSION, text)

    @property
    def is_null(self) -> bool:
        return self.kind is LiteralKind.NULL


class ForeignKeyAction(Enum):
    NO_ACTION = "NO ACTION"
    CASCADE = "CASCADE"
    RESTRICT = "RESTRICT"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"

    @classmethod
    def parse(cls, raw: str | None) -> ForeignKeyAction:
        try:
            return cls((raw or "NO ACTION").upper())
        except ValueError:
            return cls.NO_ACTION


class ForeignKeyMatch(Enum):
    NONE = "NONE"
    SIMPLE = "SIMPLE"
    PARTIAL = "PARTIAL"
    FULL = "FULL"

    @classmethod
    def parse(cls, raw: str | None) -> ForeignKeyMatch:
        try:
            return cls((raw or "NONE").upper())
        except ValueError:
            return cls.NONE


@dataclass(frozen=True, slots=True)
class Column:
    """One column as reported by ``PRAGMA table_info``.

    ``id`` is the 0-based ordinal position within its table.
    """

    id: int
    name: str
    type: ColumnType | None = None
    is_not_null: bool = False
    default_value: LiteralValue | None = None
    is_primary_key: bool = False


@dataclass(frozen=True, slots=True)
class ForeignKey:
    """One column mapping of a foreign key constraint.

    ``destination_column`` defaults to ``source_column`` when the constraint
    does not name it, and is always populated after construction.
    """

    id: int
    source_column: str
    destination_table: str
    destination_column: str | None = None
    update_action: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    delete_action: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    match: ForeignKeyMatch = ForeignKeyMatch.NONE
    seq: int = 0

    def __post_init__(self) -> None:
        if self.destination_column is None:
            object.__setattr__(self, "destination_column", self.source_column)

    @property
    def target_column(self) -> str:
        return self.destination_column or self.source_column


@dataclass(frozen=True, slots=True)
class CatalogObject:
    type: CatalogObjectType
    name: str
    creation_sql: str = ""


@dataclass(frozen=True, slots=True)
class Table:
    name: str
    creation_sql: str = ""
    columns: tuple[Column, ...] = ()
    foreign_keys: tuple[ForeignKey, ...] = ()

    @property
    def catalog_object(self) -> CatalogObject:
        return CatalogObject(CatalogObjectType.TABLE, self.name, self.creation_sql)

    @property
    def primary_key_columns(self) -> tuple[Column, ...]:
        return tuple(column for column in self.columns if column.is_primary_key)

    def column(self, name: str) -> Column | None:
        return next((c for c in self.columns if c.name == name), None)


@dataclass(frozen=True, slots=True)
class View:
    name: str
    creation_sql: str = ""
    columns: tuple[Column, ...] = ()

    @property
    def catalog_object(self) -> CatalogObject:
        return CatalogObject(CatalogObjectType.VIEW, self.name, self.creation_sql)

    def column(self, name: str) -> Column | None:
        return next((c for c in self.columns if c.name == name), None)


@dataclass(frozen=True, slots=True)
class Index:
    """An index. Implicit ``sqlite_autoindex_*`` indices have empty ``sql``."""

    name: str
    table_name: str
    root_page: int = 0
    sql: str = ""


@dataclass(frozen=True, slots=True)
class Trigger:
    name: str
    table_name: str
    sql: str = ""


@dataclass(frozen=True, slots=True)
class Schema:
    """Canonical enumeration of a database's schema objects."""

    version: int = 0
    user_version: int = 0
    tables: tuple[Table, ...] = ()
    views: tuple[View, ...] = ()
    indices: dict[str, tuple[Index, ...]] = field(default_factory=dict)
    triggers: dict[str, tuple[Trigger, ...]] = field(default_factory=dict)

    def table(self, name: str) -> Table | None:
        return next((t for t in self.tables if t.name == name), None)

    def view(self, name: str) -> View | None:
        return next((v for v in self.views if v.name == name), None)

    @property
    def catalog_objects(self) -> list[CatalogObject]:
        """Tables then views, in declaration order."""
        return [t.catalog_object for t in self.tables] + [v.catalog_object for v in self.views]

    def canonical(self) -> Schema:
        """Copy without storage details (schema version, index root pages).

        Two schemas describing the same structure compare equal in this form
        even if one was replayed into a fresh database.
        """
        return replace(
            self,
            version=0,
            indices={
                table: tuple(replace(index, root_page=0) for index in entries)
                for table, entries in self.indices.items()
            },
        )
