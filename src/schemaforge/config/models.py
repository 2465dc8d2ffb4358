"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SCHEMAFORGE__SECTION__KEY)
3. Project YAML (schemaforge.yaml, or an explicit --config path)
4. Global YAML (~/.config/schemaforge/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    SCHEMAFORGE__<SECTION>__<KEY>=<VALUE>

Examples:
    SCHEMAFORGE__LOGGING__LEVEL=DEBUG
    SCHEMAFORGE__NAMING__SINGULARIZE_RECORD_NAMES=false
    SCHEMAFORGE__RENDER__LINE_LENGTH=100
"""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SCHEMAFORGE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Naming diagnostics are logged at WARNING.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


_DEFAULT_KEY_NAMES = ["id", "ID", "Id", "pkey", "primaryKey", "PrimaryKey", "key", "Key"]


class NamingOptions(BaseModel):
    """Options of the naming and relationship engine.

    Env vars:
        SCHEMAFORGE__NAMING__<OPTION>, e.g. SCHEMAFORGE__NAMING__FORCE_PRIMARY_KEY_NAME=id
    """

    model_config = ConfigDict(frozen=True)

    # Database name
    force_database_name: str | None = Field(
        default=None,
        description="Use this name instead of deriving one from the first input file.",
    )
    drop_database_file_extension: bool = Field(
        default=True, description="'Contacts.sqlite3' becomes 'Contacts'."
    )
    capitalize_database_name: bool = True
    camel_case_database_name: bool = True

    # Record names
    singularize_record_names: bool = Field(
        default=True, description="'people' becomes 'Person', 'Products' becomes 'Product'."
    )
    capitalize_record_names: bool = True
    camel_case_record_names: bool = True
    strip_core_data_prefix: bool = Field(
        default=False,
        description="CoreData style: 'ZPERSON' becomes 'Person' and 'ZNAME' becomes 'name'. "
        "Only applies to all upper-case names starting with Z (not Z_).",
    )

    # Property names
    decapitalize_property_names: bool = True
    camel_case_property_names: bool = True
    normalize_upper_case_runs: bool = Field(
        default=True,
        description="Fold capital runs in property names: 'CategoryID' becomes 'CategoryId'.",
    )
    force_primary_key_name: str | None = Field(
        default=None,
        description="Rename a single primary key property (e.g. to 'id') if the name is free.",
    )
    identifier_replacements: dict[str, str] = Field(
        default_factory=lambda: {" ": "_", "-": "_", "/": "_"},
        description="Character substitutions applied to SQL names before casing.",
    )

    # Keys
    autodetect_primary_keys: bool = True
    primary_key_names: list[str] = Field(
        default_factory=lambda: list(_DEFAULT_KEY_NAMES),
        description="Column names taken as primary key when none is declared. "
        "'<table><name>' and '<table>_<name>' also qualify.",
    )
    autodetect_foreign_keys: bool = Field(
        default=True,
        description="Treat undeclared columns like 'category_id' as foreign keys.",
    )
    autodetect_foreign_keys_in_views: bool = Field(
        default=True,
        description="Let views take part in foreign key autodetection.",
    )
    foreign_key_requires_table_name: bool = Field(
        default=True,
        description="When false, a column named exactly like another table's primary key "
        "column is taken as a foreign key to that table.",
    )
    foreign_key_suffixes: list[str] = Field(
        default_factory=lambda: [*_DEFAULT_KEY_NAMES, "_id", "_ID", "_key", "_fk"],
        description="Suffixes appended to table names to detect foreign key columns.",
    )

    # Relationships
    derive_relationships_from_foreign_keys: bool = True
    generate_reverse_relationships: bool = Field(
        default=True,
        description="Add a to-many relationship on the destination of each to-one.",
    )
    relationship_strip_suffixes: list[str] = Field(
        default_factory=lambda: [
            "_id",
            "_ID",
            "Id",
            "ID",
            "id",
            "_fkey",
            "_fk",
            "ForeignKey",
            "_key",
            "_Key",
            "Key",
            "key",
        ],
        description="Suffixes stripped from foreign key property names to name relationships.",
    )

    # Types
    type_map: dict[str, str] = Field(
        default_factory=lambda: {
            "uuid": "uuid",
            "url": "url",
            "timestamp": "date",
            "datetime": "date",
            "date": "date",
            "decimal": "decimal",
            "numeric": "decimal",
        },
        description="Declared SQL type (case-insensitive) to property type tag "
        "(integer, double, string, byteArray, bool, date, data, url, decimal, uuid) "
        "or a custom type name.",
    )
    column_suffix_map: dict[str, str] = Field(
        default_factory=dict,
        description="Column name suffix to property type tag; wins over type_map.",
    )

    @field_validator("type_map", "column_suffix_map")
    @classmethod
    def validate_type_tags(cls, v: dict[str, str]) -> dict[str, str]:
        for key, tag in v.items():
            if not key or not tag:
                raise ValueError(f"Empty type mapping entry: {key!r} -> {tag!r}")
        return v

    @field_validator("primary_key_names", "foreign_key_suffixes")
    @classmethod
    def validate_non_empty_names(cls, v: list[str]) -> list[str]:
        if any(not name for name in v):
            raise ValueError("Key names must not be empty")
        return v


class CommentStyle(Enum):
    """Comment syntax for generated documentation."""

    DASHES = "//"
    TRIPLE_DASHES = "///"
    STARS = "*"
    DOUBLE_STARS = "**"
    NONE = "none"


def _parse_comment_style(v: Any) -> Any:
    if isinstance(v, str) and v.lower() in ("none", "no", "false", ""):
        return CommentStyle.NONE
    if v is False or v is None:
        return CommentStyle.NONE
    return v


class RenderStyle(BaseModel):
    """Layout of rendered source text.

    Env vars:
        SCHEMAFORGE__RENDER__INDENT: Indent unit (a string, or a number of spaces)
        SCHEMAFORGE__RENDER__LINE_LENGTH: Soft line length for wrapping
    """

    model_config = ConfigDict(frozen=True)

    indent: str = Field(default="  ", description="Indent unit.")
    eol: str = Field(default="\n", description="End-of-line sequence.")
    line_length: int = Field(
        default=80,
        description="Soft limit; longer parameter and argument lists wrap one per line.",
    )
    type_comment_style: CommentStyle = CommentStyle.DOUBLE_STARS
    property_comment_style: CommentStyle = CommentStyle.TRIPLE_DASHES
    function_comment_style: CommentStyle = CommentStyle.DOUBLE_STARS
    identifier_list_separator: str = ", "
    conformance_separator: str = " : "
    property_type_separator: str = " : "
    property_value_separator: str = " = "
    never_inline: bool = Field(
        default=False, description="Never mark functions as inlinable."
    )
    examples_header: str = "### Examples"
    sql_header: str = "### SQL"

    @field_validator("indent", mode="before")
    @classmethod
    def validate_indent(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            if v < 0:
                raise ValueError(f"Indent must be >= 0, got {v}")
            return " " * v
        if isinstance(v, str) and v.isdigit():
            return " " * int(v)
        return v

    @field_validator("line_length")
    @classmethod
    def validate_line_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Line length must be positive, got {v}")
        return v

    @field_validator(
        "type_comment_style", "property_comment_style", "function_comment_style", mode="before"
    )
    @classmethod
    def validate_comment_style(cls, v: Any) -> Any:
        return _parse_comment_style(v)


class OutputConfig(BaseModel):
    """Shape of the generated compilation unit."""

    header: str | None = Field(
        default="Generated by schemaforge. Do not edit.",
        description="Leading comment of the generated file; null for none.",
    )
    imports: list[str] = Field(default_factory=lambda: ["Foundation"])
    reexports: list[str] = Field(default_factory=list)
    public: bool = Field(default=True, description="Emit public declarations.")
    relationship_accessors: bool = Field(
        default=True, description="Emit find/fetch functions for relationships."
    )


class SchemaForgeConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    naming: NamingOptions = Field(default_factory=NamingOptions)
    render: RenderStyle = Field(default_factory=RenderStyle)
    output: OutputConfig = Field(default_factory=OutputConfig)
