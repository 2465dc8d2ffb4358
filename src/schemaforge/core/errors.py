"""SchemaForge error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Acquisition
- 9xxx: Internal

Naming problems are not errors: the fancifier records them as
``Diagnostic`` entries and keeps going.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Acquisition (3xxx)
    INPUT_NOT_FOUND = 3001
    INPUT_UNREADABLE = 3002
    DATABASE_OPEN_FAILED = 3003
    SCRIPT_FAILED = 3004
    RECREATE_FAILED = 3005
    SCHEMA_FETCH_FAILED = 3006

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    UNRENDERABLE_NODE = 9002


# Not frozen: raising through a context manager assigns __traceback__
@dataclass(eq=False)
class SchemaForgeError(Exception):
    """Root of every error a run can raise.

    ``details`` carries the structured context that the logging processor
    spreads into the log event.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SCRIPT_FAILED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SchemaForgeError):
    """A config file or value that cannot be used."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"{path} is not a valid config file: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Config value {field} rejected: {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"No config file at {path}",
            details={"path": path},
        )


class AcquisitionError(SchemaForgeError):
    """Schema acquisition failures.

    All of these abort the run. ``source`` and ``object_name`` point at
    the input to fix.
    """

    @property
    def source(self) -> str | None:
        """Input file the failure is attributed to."""
        return self.details.get("source")

    @property
    def object_name(self) -> str | None:
        """Catalog object (table, view, ...) that failed, if any."""
        return self.details.get("object_name")

    @classmethod
    def input_not_found(cls, source: str) -> "AcquisitionError":
        return cls(
            code=ErrorCode.INPUT_NOT_FOUND,
            message=f"Input not found: {source}",
            details={"source": source},
        )

    @classmethod
    def input_unreadable(cls, source: str, reason: str) -> "AcquisitionError":
        return cls(
            code=ErrorCode.INPUT_UNREADABLE,
            message=f"Input could not be read: {source}: {reason}",
            details={"source": source, "reason": reason},
        )

    @classmethod
    def open_failed(
        cls, source: str, engine_message: str, engine_code: str | None = None
    ) -> "AcquisitionError":
        return cls(
            code=ErrorCode.DATABASE_OPEN_FAILED,
            message=f"Could not open database {source}: {engine_message}",
            details={
                "source": source,
                "engine_code": engine_code,
                "engine_message": engine_message,
            },
        )

    @classmethod
    def script_failed(
        cls, source: str, engine_message: str, engine_code: str | None = None
    ) -> "AcquisitionError":
        return cls(
            code=ErrorCode.SCRIPT_FAILED,
            message=f"SQL script {source} failed: {engine_message}",
            details={
                "source": source,
                "engine_code": engine_code,
                "engine_message": engine_message,
            },
        )

    @classmethod
    def recreate_failed(
        cls,
        object_type: str,
        object_name: str,
        source: str,
        engine_message: str,
        engine_code: str | None = None,
    ) -> "AcquisitionError":
        return cls(
            code=ErrorCode.RECREATE_FAILED,
            message=(
                f"Could not recreate {object_type} '{object_name}' from {source}: "
                f"{engine_message}"
            ),
            details={
                "source": source,
                "object_type": object_type,
                "object_name": object_name,
                "engine_code": engine_code,
                "engine_message": engine_message,
            },
        )

    @classmethod
    def fetch_failed(
        cls,
        source: str,
        engine_message: str,
        engine_code: str | None = None,
        object_name: str | None = None,
    ) -> "AcquisitionError":
        where = f" ({object_name})" if object_name else ""
        return cls(
            code=ErrorCode.SCHEMA_FETCH_FAILED,
            message=f"Could not fetch schema from {source}{where}: {engine_message}",
            details={
                "source": source,
                "object_name": object_name,
                "engine_code": engine_code,
                "engine_message": engine_message,
            },
        )


class InternalError(SchemaForgeError):
    """Bugs in schemaforge itself, never caused by the input."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Generator invariant broken: {reason}",
            details=details,
        )

    @classmethod
    def unrenderable(cls, node: object) -> "InternalError":
        """An IR node the renderer has no case for. Never recovered."""
        node_type = type(node).__name__
        return cls(
            code=ErrorCode.UNRENDERABLE_NODE,
            message=f"Cannot render IR node of type {node_type}",
            details={"node_type": node_type},
        )
