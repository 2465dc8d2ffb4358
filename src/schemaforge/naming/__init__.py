"""Naming and relationship engine."""

from schemaforge.naming.casing import (
    lower_first,
    normalize_upper_runs,
    snake_case,
    to_camel_case,
    upper_first,
)
from schemaforge.naming.fancifier import Fancifier, fancify, fancify_in_place
from schemaforge.naming.inflection import pluralize, singularize
from schemaforge.naming.models import (
    DatabaseInfo,
    Diagnostic,
    DiagnosticCode,
    EntityInfo,
    EntityKind,
    Property,
    PropertyKind,
    PropertyType,
    Relationship,
    Severity,
    database_info_from_schema,
    schema_of,
)

__all__ = [
    # Engine
    "Fancifier",
    "fancify",
    "fancify_in_place",
    # Words
    "lower_first",
    "normalize_upper_runs",
    "pluralize",
    "singularize",
    "snake_case",
    "to_camel_case",
    "upper_first",
    # Model
    "DatabaseInfo",
    "Diagnostic",
    "DiagnosticCode",
    "EntityInfo",
    "EntityKind",
    "Property",
    "PropertyKind",
    "PropertyType",
    "Relationship",
    "Severity",
    "database_info_from_schema",
    "schema_of",
]
