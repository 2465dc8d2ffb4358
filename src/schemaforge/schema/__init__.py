"""Schema model and acquisition."""

from schemaforge.schema.acquire import acquire, is_database_file, read_database_schema
from schemaforge.schema.models import (
    CatalogObject,
    CatalogObjectType,
    Column,
    ColumnKind,
    ColumnType,
    ForeignKey,
    ForeignKeyAction,
    ForeignKeyMatch,
    Index,
    LiteralKind,
    LiteralValue,
    Schema,
    Table,
    Trigger,
    TypeAffinity,
    View,
)

__all__ = [
    # Acquisition
    "acquire",
    "is_database_file",
    "read_database_schema",
    # Model
    "CatalogObject",
    "CatalogObjectType",
    "Column",
    "ColumnKind",
    "ColumnType",
    "ForeignKey",
    "ForeignKeyAction",
    "ForeignKeyMatch",
    "Index",
    "LiteralKind",
    "LiteralValue",
    "Schema",
    "Table",
    "Trigger",
    "TypeAffinity",
    "View",
]
