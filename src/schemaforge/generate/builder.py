"""IR construction: one CompilationUnit per fancified database.

The unit contains

- a database struct listing the record types and the schema user version
- one record struct per table or view, with a memberwise initializer, an
  ``init(row:indices:)`` reading a result row and, unless the record is read
  only, ``bind(to:indices:)``
- a ``Schema`` struct nested in each record, holding the mapped columns and
  the record's SQL statements with their parameter positions
- an extension on the database struct with ``find``/``fetch`` accessors for
  the relationships

Names come from the entity model as-is; the builder never renames.
"""

from __future__ import annotations

import math

import structlog

from schemaforge.config.models import OutputConfig
from schemaforge.core.errors import InternalError
from schemaforge.generate.statements import RecordStatements, record_statements
from schemaforge.ir.nodes import (
    BOOL,
    BYTES,
    DATA,
    DATE,
    DECIMAL,
    DOUBLE,
    FALSE,
    INT,
    NIL,
    STRING,
    TRUE,
    URL,
    UUID,
    Argument,
    ArrayExpression,
    ArrayType,
    Assignment,
    BoolLiteral,
    Call,
    CallStatement,
    CodeExample,
    CompilationUnit,
    ComputedProperty,
    DataLiteral,
    DoubleLiteral,
    Expression,
    ExtensionDef,
    FunctionComment,
    FunctionDef,
    FunctionSig,
    InstanceVariable,
    IntArrayLiteral,
    IntLiteral,
    KeyPath,
    Member,
    NamedType,
    OptionalType,
    Param,
    ParamDoc,
    QualifiedType,
    Return,
    SelfRef,
    StringLiteral,
    TypeComment,
    TypeDef,
    TypeExpression,
    TypeRef,
    VariableRef,
    Visibility,
)
from schemaforge.naming.models import (
    DatabaseInfo,
    EntityInfo,
    EntityKind,
    Property,
    PropertyKind,
    Relationship,
)
from schemaforge.schema.models import LiteralKind

logger = structlog.get_logger()

# Runtime protocol names the generated code conforms to
DATABASE_PROTOCOL = "SQLDatabase"
TABLE_RECORD_PROTOCOL = "SQLTableRecord"
VIEW_RECORD_PROTOCOL = "SQLViewRecord"
CONNECTION_HANDLER_TYPE = "SQLConnectionHandler"
TABLE_SCHEMA_PROTOCOL = "SQLTableSchema"
VIEW_SCHEMA_PROTOCOL = "SQLViewSchema"
COLUMN_TYPE = "MappedColumn"
ROW_TYPE = "SQLRow"
STATEMENT_TYPE = "SQLStatement"
SCHEMA_TYPE_NAME = "Schema"

# View schemas declare what their INSTEAD OF triggers allow
_VIEW_CAPABILITIES = (
    ("can_insert", "SQLInsertableSchema"),
    ("can_update", "SQLUpdatableSchema"),
    ("can_delete", "SQLDeletableSchema"),
)

_TYPE_REFS: dict[PropertyKind, TypeRef] = {
    PropertyKind.INTEGER: INT,
    PropertyKind.DOUBLE: DOUBLE,
    PropertyKind.STRING: STRING,
    PropertyKind.BYTE_ARRAY: BYTES,
    PropertyKind.BOOL: BOOL,
    PropertyKind.DATE: DATE,
    PropertyKind.DATA: DATA,
    PropertyKind.URL: URL,
    PropertyKind.DECIMAL: DECIMAL,
    PropertyKind.UUID: UUID,
}

_TRUE_STRINGS = frozenset({"true", "yes", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "0"})


def value_type(prop: Property) -> TypeRef:
    """Non-optional type of a property's values."""
    property_type = prop.property_type
    if property_type.kind is PropertyKind.CUSTOM:
        return NamedType(property_type.name or "String")
    return _TYPE_REFS[property_type.kind]


def property_type_ref(prop: Property) -> TypeRef:
    ref = value_type(prop)
    return OptionalType(ref) if prop.is_optional else ref


def _convert_number(value: int | float, kind: PropertyKind) -> Expression | None:
    if kind is PropertyKind.INTEGER:
        if isinstance(value, float):
            return IntLiteral(int(value)) if value.is_integer() else None
        return IntLiteral(value)
    if kind is PropertyKind.DOUBLE:
        return DoubleLiteral(float(value))
    if kind is PropertyKind.STRING:
        return StringLiteral(str(value))
    if kind is PropertyKind.BOOL:
        return TRUE if value != 0 else FALSE
    if kind is PropertyKind.DECIMAL:
        number = IntLiteral(value) if isinstance(value, int) else DoubleLiteral(value)
        return Call("Decimal", [Argument(number)])
    if kind is PropertyKind.DATE:
        seconds = IntLiteral(value) if isinstance(value, int) else DoubleLiteral(value)
        return Call("Date", [Argument(seconds, "timeIntervalSince1970")])
    return None


def _convert_text(value: str, kind: PropertyKind) -> Expression | None:
    if kind is PropertyKind.STRING:
        return StringLiteral(value)
    if kind is PropertyKind.INTEGER:
        try:
            return IntLiteral(int(value))
        except ValueError:
            return None
    if kind is PropertyKind.DOUBLE:
        try:
            number = float(value)
        except ValueError:
            return None
        return DoubleLiteral(number) if math.isfinite(number) else None
    if kind is PropertyKind.BOOL:
        if value.lower() in _TRUE_STRINGS:
            return TRUE
        if value.lower() in _FALSE_STRINGS:
            return FALSE
    return None


def default_expression(prop: Property) -> Expression | None:
    """Initializer default for ``prop``, converted to its property type.

    Optional properties default to nil when the SQL default is missing or
    cannot be expressed. None means the parameter is required.
    """
    fallback = NIL if prop.is_optional else None
    default = prop.default_value
    kind = prop.property_type.kind

    if default is None:
        if prop.is_primary_key and kind is PropertyKind.UUID:
            return Call("UUID")
        return fallback

    converted: Expression | None = None
    if default.kind is LiteralKind.NULL:
        converted = fallback
    elif default.kind in (LiteralKind.INTEGER, LiteralKind.REAL):
        converted = _convert_number(default.value, kind)  # type: ignore[arg-type]
    elif default.kind is LiteralKind.BOOLEAN:
        if kind is PropertyKind.BOOL:
            converted = BoolLiteral(bool(default.value))
        elif kind is PropertyKind.INTEGER:
            converted = IntLiteral(int(bool(default.value)))
    elif default.kind is LiteralKind.TEXT:
        converted = _convert_text(str(default.value), kind)
    elif default.kind is LiteralKind.BLOB:
        if kind is PropertyKind.BYTE_ARRAY:
            converted = IntArrayLiteral(tuple(default.value))  # type: ignore[arg-type]
        elif kind is PropertyKind.DATA:
            converted = DataLiteral(default.value)  # type: ignore[arg-type]

    if converted is None:
        logger.debug(
            "default_not_converted",
            column=prop.raw_column_name,
            default=str(default.value),
            property_type=prop.property_type.tag,
        )
        return fallback
    return converted


def _property_comment(prop: Property) -> str:
    prefix = "Primary key" if prop.is_primary_key else "Column"
    sql_type = prop.column_type.raw if prop.column_type is not None else "ANY"
    text = f"{prefix} `{prop.raw_column_name}` (`{sql_type}`), "
    text += "optional" if prop.is_optional else "required"
    default = prop.default_value
    if default is not None and default.kind is not LiteralKind.NULL:
        if default.kind is LiteralKind.EXPRESSION:
            text += " (has default)"
        else:
            text += f" (default: `{default.value}`)"
    return text + "."


class UnitBuilder:
    """Builds the IR of one database. Construct per call of ``build_unit``."""

    def __init__(self, database: DatabaseInfo, output: OutputConfig) -> None:
        self.database = database
        self.output = output
        self.visibility = Visibility.PUBLIC if output.public else Visibility.INTERNAL

    def _record_type(self, entity: EntityInfo) -> NamedType:
        return NamedType(entity.derived_name)

    def build(self) -> CompilationUnit:
        extensions = []
        if self.output.relationship_accessors:
            accessors = self._relationship_accessors()
            if accessors:
                extensions.append(
                    ExtensionDef(
                        extended_type=NamedType(self.database.name),
                        visibility=self.visibility,
                        functions=accessors,
                    )
                )
        return CompilationUnit(
            name=self.database.name,
            header=self.output.header,
            imports=self.output.imports,
            reexports=self.output.reexports,
            structures=[self._database_struct()]
            + [self._record_struct(e) for e in self.database.entities],
            extensions=extensions,
        )

    # Database

    def _database_struct(self) -> TypeDef:
        db = self.database
        connection = Param("connectionHandler", NamedType(CONNECTION_HANDLER_TYPE))
        initializer = FunctionDef(
            declaration=FunctionSig(
                name="init",
                parameters=[connection],
                visibility=self.visibility,
                is_initializer=True,
            ),
            body=[Assignment(Member(SelfRef(), connection.name), VariableRef(connection.name))],
            comment=FunctionComment(
                headline=f"Initialize ``{db.name}`` with a connection handler.",
                parameters=[ParamDoc(connection.name, "The pool or connection to use.")],
            ),
            inlinable=True,
        )
        tables, views = len(db.tables), len(db.views)
        return TypeDef(
            name=db.name,
            visibility=self.visibility,
            conformances=[NamedType(DATABASE_PROTOCOL)],
            type_variables=[
                InstanceVariable(
                    "userVersion",
                    type=INT,
                    value=IntLiteral(db.user_version),
                    constant=True,
                    visibility=self.visibility,
                    comment="User version of the database (`PRAGMA user_version`).",
                ),
                InstanceVariable(
                    "recordTypes",
                    type=ArrayType(QualifiedType(NamedType("Any"), "Type")),
                    value=ArrayExpression(
                        [TypeExpression(self._record_type(e)) for e in db.entities]
                    ),
                    constant=True,
                    visibility=self.visibility,
                    comment="The record types of the database, in schema order.",
                ),
            ],
            variables=[
                InstanceVariable(
                    connection.name,
                    type=connection.type,
                    constant=True,
                    visibility=self.visibility,
                )
            ],
            functions=[initializer],
            comment=TypeComment(
                headline="A structure representing a SQLite database.",
                info=f"The database has {tables} table(s) and {views} view(s).",
            ),
        )

    # Records

    def _conformances(self, entity: EntityInfo) -> list[TypeRef]:
        protocol = VIEW_RECORD_PROTOCOL
        if entity.kind is EntityKind.TABLE:
            protocol = TABLE_RECORD_PROTOCOL
        conformances: list[TypeRef] = [NamedType(protocol)]
        if entity.primary_key_property is not None:
            conformances.append(NamedType("Identifiable"))
        return conformances

    def _id_property(self, entity: EntityInfo) -> ComputedProperty | None:
        pkey = entity.primary_key_property
        if pkey is None or any(p.derived_name == "id" for p in entity.properties):
            return None
        return ComputedProperty(
            "id",
            property_type_ref(pkey),
            body=[Return(Member(SelfRef(), pkey.derived_name))],
            visibility=self.visibility,
            comment=f"Returns the primary key (``{pkey.derived_name}``).",
            inlinable=True,
        )

    def _initializer(self, entity: EntityInfo) -> FunctionDef:
        parameters = [
            Param(p.derived_name, property_type_ref(p), default=default_expression(p))
            for p in entity.properties
        ]
        return FunctionDef(
            declaration=FunctionSig(
                name="init",
                parameters=parameters,
                visibility=self.visibility,
                is_initializer=True,
            ),
            body=[
                Assignment(Member(SelfRef(), p.derived_name), VariableRef(p.derived_name))
                for p in entity.properties
            ],
            comment=FunctionComment(
                headline=f"Initialize a new ``{entity.derived_name}`` record.",
                parameters=[
                    ParamDoc(p.derived_name, _property_comment(p)) for p in entity.properties
                ],
            ),
            inlinable=True,
        )

    def _record_comment(self, entity: EntityInfo) -> TypeComment:
        kind = "table" if entity.kind is EntityKind.TABLE else "view"
        info = f"Record bound to the SQL {kind} `{entity.raw_name}`."
        if entity.kind is EntityKind.VIEW and entity.is_read_only:
            info += "\nThe view is read-only."
        record = entity.derived_name
        examples = [
            CodeExample(
                f"Read a ``{record}`` from a row of ``{SCHEMA_TYPE_NAME}/select``:",
                f"let record = try {record}(row: row)",
            )
        ]
        to_one = entity.to_one_relationships
        if self.output.relationship_accessors and to_one:
            relationship = to_one[0]
            destination = self.database.entity(relationship.destination_entity)
            if destination is not None:
                examples.append(
                    CodeExample(
                        f"Find the related ``{destination.derived_name}``:",
                        f"let related = try db.find{relationship.name}"
                        f"({self._find_label(relationship)}: record)",
                    )
                )
        sql = [CodeExample(f"The SQL used to create the {kind}:", entity.creation_sql)]
        sql += [CodeExample("Index:", statement) for statement in entity.index_sql]
        sql += [CodeExample("Trigger:", statement) for statement in entity.trigger_sql]
        return TypeComment(
            headline=f"A record in the `{entity.raw_name}` {kind}.",
            info=info,
            examples=examples,
            sql=[s for s in sql if s.code],
        )

    def _static(
        self, name: str, value: Expression, ref: TypeRef | None = None, comment: str | None = None
    ) -> InstanceVariable:
        return InstanceVariable(
            name,
            type=ref,
            value=value,
            constant=True,
            visibility=self.visibility,
            comment=comment,
        )

    def _column(self, entity: EntityInfo, position: int, prop: Property) -> InstanceVariable:
        record = self._record_type(entity)
        return InstanceVariable(
            prop.derived_name,
            type=NamedType(COLUMN_TYPE, (record, property_type_ref(prop))),
            value=Call(
                COLUMN_TYPE,
                [
                    Argument(StringLiteral(prop.raw_column_name), "externalName"),
                    Argument(IntLiteral(position), "position"),
                    Argument(BoolLiteral(prop.is_primary_key), "isPrimaryKey"),
                    Argument(KeyPath(prop.derived_name, record), "keyPath"),
                ],
            ),
            constant=True,
            visibility=self.visibility,
            comment=(
                f"Column of ``{entity.derived_name}/{prop.derived_name}`` "
                f"(`{prop.raw_column_name}`)."
            ),
        )

    def _statement_variables(
        self, entity: EntityInfo, statements: RecordStatements
    ) -> list[InstanceVariable]:
        name = entity.raw_name
        indices = ArrayType(INT)
        variables = [
            self._static(
                "select",
                StringLiteral(statements.select),
                comment=f"`SELECT` all columns of `{name}`.",
            ),
            self._static("selectColumns", StringLiteral(statements.select_columns)),
            self._static(
                "selectColumnIndices",
                IntArrayLiteral(tuple(statements.select_column_indices)),
                indices,
                "Property positions in ``selectColumns``.",
            ),
        ]
        if statements.update is not None:
            variables += [
                self._static(
                    "update", StringLiteral(statements.update), comment=f"`UPDATE` a `{name}` row."
                ),
                self._static(
                    "updateParameterIndices",
                    IntArrayLiteral(tuple(statements.update_parameter_indices)),
                    indices,
                    "Parameter position of each property in ``update``, -1 if unused.",
                ),
            ]
        if statements.insert is not None and statements.insert_returning is not None:
            variables += [
                self._static(
                    "insert", StringLiteral(statements.insert), comment=f"`INSERT` a `{name}` row."
                ),
                self._static("insertReturning", StringLiteral(statements.insert_returning)),
                self._static(
                    "insertParameterIndices",
                    IntArrayLiteral(tuple(statements.insert_parameter_indices)),
                    indices,
                    "Parameter position of each property in ``insert``, -1 if unused.",
                ),
            ]
        if statements.delete is not None:
            variables += [
                self._static(
                    "delete", StringLiteral(statements.delete), comment=f"`DELETE` a `{name}` row."
                ),
                self._static(
                    "deleteParameterIndices",
                    IntArrayLiteral(tuple(statements.delete_parameter_indices)),
                    indices,
                    "Parameter position of each property in ``delete``, -1 if unused.",
                ),
            ]
        return variables

    def _schema_conformances(self, entity: EntityInfo) -> list[TypeRef]:
        if entity.kind is EntityKind.TABLE:
            return [NamedType(TABLE_SCHEMA_PROTOCOL)]
        conformances: list[TypeRef] = [NamedType(VIEW_SCHEMA_PROTOCOL)]
        for capability, protocol in _VIEW_CAPABILITIES:
            if getattr(entity, capability):
                conformances.append(NamedType(protocol))
        return conformances

    def _schema_struct(self, entity: EntityInfo) -> TypeDef:
        """Static SQL information of a record: columns and statements."""
        kind = "table" if entity.kind is EntityKind.TABLE else "view"
        type_variables = [
            self._static(
                "externalName",
                StringLiteral(entity.raw_name),
                comment=f"The SQL {kind} of ``{entity.derived_name}`` records.",
            ),
            self._static("columnCount", IntLiteral(len(entity.properties)), INT),
        ]
        creation_sql = entity.creation_sql.strip()
        if creation_sql:
            if not creation_sql.endswith(";"):
                creation_sql += ";"
            type_variables.append(
                self._static(
                    "create",
                    StringLiteral(creation_sql),
                    comment=f"The SQL used to create the `{entity.raw_name}` {kind}.",
                )
            )
        type_variables += self._statement_variables(entity, record_statements(entity))
        return TypeDef(
            name=SCHEMA_TYPE_NAME,
            visibility=self.visibility,
            conformances=self._schema_conformances(entity),
            type_variables=type_variables,
            variables=[
                self._column(entity, position, p) for position, p in enumerate(entity.properties)
            ],
            functions=[
                FunctionDef(
                    FunctionSig("init", visibility=self.visibility, is_initializer=True),
                    inlinable=True,
                )
            ],
            comment=TypeComment(
                headline=(
                    f"Static SQL information of ``{entity.derived_name}`` "
                    f"(`{entity.raw_name}` {kind})."
                ),
            ),
        )

    def _schema_column(self, entity: EntityInfo, prop: Property) -> Member:
        schema = Member(VariableRef(entity.derived_name), "schema")
        return Member(schema, prop.derived_name)

    def _row_initializer(self, entity: EntityInfo) -> FunctionDef:
        row = Param("row", NamedType(ROW_TYPE))
        indices = Param(
            "indices",
            ArrayType(INT),
            default=Member(VariableRef(SCHEMA_TYPE_NAME), "selectColumnIndices"),
        )
        values = [
            Argument(
                Call(
                    "value",
                    [
                        Argument(self._schema_column(entity, p), "of"),
                        Argument(VariableRef(indices.name), "at"),
                    ],
                    base=VariableRef(row.name),
                ),
                p.derived_name,
            )
            for p in entity.properties
        ]
        return FunctionDef(
            declaration=FunctionSig(
                name="init",
                parameters=[row, indices],
                throws=True,
                visibility=self.visibility,
                is_initializer=True,
            ),
            body=[CallStatement(Call("init", values, base=SelfRef(), tries=True))],
            comment=FunctionComment(
                headline=f"Initialize a ``{entity.derived_name}`` from a result row.",
                parameters=[
                    ParamDoc(row.name, "The row to read."),
                    ParamDoc(indices.name, "Column position of each property in the row."),
                ],
                throws_info="If a column value cannot be converted to its property type.",
            ),
            inlinable=True,
        )

    def _bind(self, entity: EntityInfo) -> FunctionDef:
        statement = Param("statement", NamedType(STATEMENT_TYPE), label="to")
        indices = Param("indices", ArrayType(INT))
        body = [
            CallStatement(
                Call(
                    "bind",
                    [
                        Argument(Member(SelfRef(), p.derived_name)),
                        Argument(self._schema_column(entity, p), "to"),
                        Argument(VariableRef(indices.name), "at"),
                    ],
                    base=VariableRef(statement.name),
                    tries=True,
                )
            )
            for p in entity.properties
        ]
        return FunctionDef(
            declaration=FunctionSig(
                name="bind",
                parameters=[statement, indices],
                throws=True,
                visibility=self.visibility,
            ),
            body=body,
            comment=FunctionComment(
                headline="Bind the properties to the positional parameters of a statement.",
                info=(
                    f"``indices`` is one of the parameter index lists of "
                    f"``{SCHEMA_TYPE_NAME}``, e.g. ``{SCHEMA_TYPE_NAME}/insertParameterIndices``. "
                    "Properties at -1 are skipped."
                ),
                parameters=[
                    ParamDoc(statement.name, "The prepared statement."),
                    ParamDoc(indices.name, "Parameter position of each property."),
                ],
                throws_info="If the statement rejects a value.",
            ),
            inlinable=True,
        )

    def _record_struct(self, entity: EntityInfo) -> TypeDef:
        id_property = self._id_property(entity)
        functions = [self._initializer(entity), self._row_initializer(entity)]
        if not entity.is_read_only:
            functions.append(self._bind(entity))
        return TypeDef(
            name=entity.derived_name,
            visibility=self.visibility,
            conformances=self._conformances(entity),
            nested_types=[self._schema_struct(entity)],
            type_variables=[
                self._static(
                    "schema",
                    Call(SCHEMA_TYPE_NAME),
                    comment="Static SQL information of the record.",
                ),
                self._static(
                    "externalName",
                    StringLiteral(entity.raw_name),
                    comment="The SQL name of the record.",
                ),
                self._static(
                    "columnNames",
                    ArrayExpression([StringLiteral(p.raw_column_name) for p in entity.properties]),
                    ArrayType(STRING),
                ),
            ],
            variables=[
                InstanceVariable(
                    p.derived_name,
                    type=property_type_ref(p),
                    visibility=self.visibility,
                    comment=_property_comment(p),
                )
                for p in entity.properties
            ],
            computed_properties=[id_property] if id_property is not None else [],
            functions=functions,
            comment=self._record_comment(entity),
        )

    # Relationships

    def _relationship_accessors(self) -> list[FunctionDef]:
        functions = []
        for entity in self.database.entities:
            for relationship in entity.to_one_relationships:
                functions.append(self._find(entity, relationship))
        for entity in self.database.entities:
            for relationship in entity.to_many_relationships:
                functions.append(self._fetch(entity, relationship))
        return functions

    def _lookup(
        self,
        owner: EntityInfo,
        relationship: Relationship,
        extra: list[Argument] | None = None,
    ) -> tuple[EntityInfo, Call]:
        destination = self.database.entity(relationship.destination_entity)
        source_prop = owner.find_property(relationship.source_property)
        destination_prop = (
            destination.find_property(relationship.destination_property)
            if destination is not None
            else None
        )
        # The fancifier drops relationships it cannot resolve
        if destination is None or source_prop is None or destination_prop is None:
            raise InternalError.unexpected(
                "unresolved relationship",
                entity=owner.raw_name,
                relationship=relationship.name,
            )

        destination_type = self._record_type(destination)
        call = Call(
            "fetch" if relationship.is_to_many else "find",
            [
                Argument(TypeExpression(destination_type)),
                Argument(KeyPath(destination_prop.derived_name, destination_type), "where"),
                Argument(Member(VariableRef("record"), source_prop.derived_name), "equals"),
                *(extra or []),
            ],
            tries=True,
        )
        return destination, call

    @staticmethod
    def _find_label(relationship: Relationship) -> str:
        return "for" if relationship.is_primary else f"for{relationship.name}"

    def _find(self, entity: EntityInfo, relationship: Relationship) -> FunctionDef:
        destination, call = self._lookup(entity, relationship)
        label = self._find_label(relationship)
        return FunctionDef(
            declaration=FunctionSig(
                name=f"find{relationship.name}",
                parameters=[Param("record", self._record_type(entity), label=label)],
                return_type=OptionalType(self._record_type(destination)),
                throws=True,
                visibility=self.visibility,
            ),
            body=[Return(call)],
            comment=FunctionComment(
                headline=(
                    f"Fetch the ``{destination.derived_name}`` record related to "
                    f"a ``{entity.derived_name}`` (`{relationship.source_property}`)."
                ),
                parameters=[ParamDoc("record", f"The ``{entity.derived_name}`` record.")],
                return_info=f"The related ``{destination.derived_name}``, if there is one.",
            ),
            inlinable=True,
        )

    def _fetch(self, entity: EntityInfo, relationship: Relationship) -> FunctionDef:
        limit = Param("limit", OptionalType(INT), default=NIL)
        destination, call = self._lookup(
            entity, relationship, [Argument(VariableRef(limit.name), "limit")]
        )
        label = "for" if relationship.qualifier is None else f"for{relationship.qualifier}"
        return FunctionDef(
            declaration=FunctionSig(
                name=f"fetch{relationship.name}",
                parameters=[Param("record", self._record_type(entity), label=label), limit],
                return_type=ArrayType(self._record_type(destination)),
                throws=True,
                visibility=self.visibility,
            ),
            body=[Return(call)],
            comment=FunctionComment(
                headline=(
                    f"Fetch the ``{destination.derived_name}`` records related to "
                    f"a ``{entity.derived_name}``."
                ),
                parameters=[
                    ParamDoc("record", f"The ``{entity.derived_name}`` record."),
                    ParamDoc("limit", "Optional limit of records to fetch."),
                ],
                return_info=f"The related ``{destination.derived_name}`` records.",
            ),
            inlinable=True,
        )


def build_unit(database: DatabaseInfo, output: OutputConfig | None = None) -> CompilationUnit:
    """Build the IR for a fancified database."""
    unit = UnitBuilder(database, output or OutputConfig()).build()
    logger.debug(
        "unit_built",
        name=unit.name,
        structures=len(unit.structures),
        extensions=len(unit.extensions),
    )
    return unit
