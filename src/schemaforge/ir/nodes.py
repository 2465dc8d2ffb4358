"""IR node types: an immutable document tree of declarations and code.

Nodes name things (types, functions, variables) and tag their properties
(optional, throwing, static, ...) but never carry target-language spelling;
that is applied by the renderer from a ``Syntax`` table. ``RawExpression``
and ``RawStatement`` are the only leaves holding verbatim text.

Sequence fields accept lists for convenience and are stored as tuples, so a
finished tree can be shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum


class _Node:
    __slots__ = ()

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, list):
                object.__setattr__(self, f.name, tuple(value))


class Visibility(Enum):
    PUBLIC = "public"
    INTERNAL = "internal"
    PRIVATE = "private"


class TypeKind(Enum):
    STRUCT = "struct"
    ENUM = "enum"
    CLASS = "class"


class CompareOperator(Enum):
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"


# Type references


@dataclass(frozen=True, slots=True)
class VoidType(_Node):
    pass


@dataclass(frozen=True, slots=True)
class NamedType(_Node):
    """``Person`` or, with arguments, ``KeyedRecord<Person>``."""

    name: str
    arguments: tuple[TypeRef, ...] = ()


@dataclass(frozen=True, slots=True)
class OptionalType(_Node):
    wrapped: TypeRef


@dataclass(frozen=True, slots=True)
class ArrayType(_Node):
    element: TypeRef


@dataclass(frozen=True, slots=True)
class QualifiedType(_Node):
    """A member type, e.g. ``Self.RecordTypes``."""

    base: TypeRef
    name: str


@dataclass(frozen=True, slots=True)
class KeyPathType(_Node):
    root: TypeRef
    value: TypeRef


@dataclass(frozen=True, slots=True)
class ClosureType(_Node):
    parameters: tuple[TypeRef, ...] = ()
    returns: TypeRef = VoidType()
    throws: bool = False
    escaping: bool = False


TypeRef = (
    VoidType | NamedType | OptionalType | ArrayType | QualifiedType | KeyPathType | ClosureType
)

VOID = VoidType()
INT = NamedType("Int")
DOUBLE = NamedType("Double")
STRING = NamedType("String")
BOOL = NamedType("Bool")
DATE = NamedType("Date")
DATA = NamedType("Data")
URL = NamedType("URL")
DECIMAL = NamedType("Decimal")
UUID = NamedType("UUID")
BYTES = ArrayType(NamedType("UInt8"))


# Literals


@dataclass(frozen=True, slots=True)
class NilLiteral(_Node):
    pass


@dataclass(frozen=True, slots=True)
class BoolLiteral(_Node):
    value: bool


@dataclass(frozen=True, slots=True)
class IntLiteral(_Node):
    value: int


@dataclass(frozen=True, slots=True)
class DoubleLiteral(_Node):
    value: float


@dataclass(frozen=True, slots=True)
class StringLiteral(_Node):
    value: str


@dataclass(frozen=True, slots=True)
class IntArrayLiteral(_Node):
    values: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class DataLiteral(_Node):
    value: bytes = b""


Literal = (
    NilLiteral
    | BoolLiteral
    | IntLiteral
    | DoubleLiteral
    | StringLiteral
    | IntArrayLiteral
    | DataLiteral
)

NIL = NilLiteral()
TRUE = BoolLiteral(True)
FALSE = BoolLiteral(False)


# Expressions


@dataclass(frozen=True, slots=True)
class VariableRef(_Node):
    name: str


@dataclass(frozen=True, slots=True)
class SelfRef(_Node):
    pass


@dataclass(frozen=True, slots=True)
class Member(_Node):
    """``base.name``"""

    base: Expression
    name: str


@dataclass(frozen=True, slots=True)
class KeyPath(_Node):
    """Key path to a property, rooted at ``root`` or inferred when None."""

    property: str
    root: TypeRef | None = None


@dataclass(frozen=True, slots=True)
class TypeExpression(_Node):
    """The type object itself, e.g. ``Person.self``."""

    type: TypeRef


@dataclass(frozen=True, slots=True)
class Argument(_Node):
    value: Expression
    label: str | None = None


@dataclass(frozen=True, slots=True)
class TrailingClosure(_Node):
    parameters: tuple[str, ...] = ()
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class Call(_Node):
    """Function call. ``tries`` marks a throwing call, ``awaits`` an async one."""

    name: str
    arguments: tuple[Argument, ...] = ()
    base: Expression | None = None
    tries: bool = False
    awaits: bool = False
    trailing: TrailingClosure | None = None


@dataclass(frozen=True, slots=True)
class Closure(_Node):
    parameters: tuple[str, ...] = ()
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class ArrayExpression(_Node):
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True, slots=True)
class Compare(_Node):
    lhs: Expression
    operator: CompareOperator
    rhs: Expression


@dataclass(frozen=True, slots=True)
class RawExpression(_Node):
    text: str


Expression = (
    Literal
    | VariableRef
    | SelfRef
    | Member
    | KeyPath
    | TypeExpression
    | Call
    | Closure
    | ArrayExpression
    | Compare
    | RawExpression
)


# Statements


@dataclass(frozen=True, slots=True)
class VariableDecl(_Node):
    name: str
    value: Expression
    type: TypeRef | None = None
    mutable: bool = False


@dataclass(frozen=True, slots=True)
class Assignment(_Node):
    target: Expression
    value: Expression


@dataclass(frozen=True, slots=True)
class CallStatement(_Node):
    call: Call


@dataclass(frozen=True, slots=True)
class Branch(_Node):
    condition: Expression
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class Conditional(_Node):
    """``if``/``else if`` chain with an optional ``else`` body."""

    branches: tuple[Branch, ...]
    otherwise: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class Return(_Node):
    value: Expression | None = None


@dataclass(frozen=True, slots=True)
class Group(_Node):
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True, slots=True)
class RawStatement(_Node):
    text: str


Statement = VariableDecl | Assignment | CallStatement | Conditional | Return | Group | RawStatement


# Declarations


@dataclass(frozen=True, slots=True)
class Param(_Node):
    """Function parameter.

    ``label`` is the external name and defaults to ``name``; an
    ``unlabeled`` parameter is passed positionally.
    """

    name: str
    type: TypeRef
    label: str | None = None
    default: Expression | None = None
    unlabeled: bool = False


@dataclass(frozen=True, slots=True)
class GenericConstraint(_Node):
    """``T: Protocol``, or ``T == Type`` when ``same_type`` is set."""

    parameter: str
    type: TypeRef
    same_type: bool = False


@dataclass(frozen=True, slots=True)
class FunctionSig(_Node):
    name: str
    parameters: tuple[Param, ...] = ()
    return_type: TypeRef = VOID
    generic_parameters: tuple[str, ...] = ()
    generic_constraints: tuple[GenericConstraint, ...] = ()
    throws: bool = False
    is_async: bool = False
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    is_mutating: bool = False
    is_initializer: bool = False


@dataclass(frozen=True, slots=True)
class ParamDoc(_Node):
    name: str
    info: str


@dataclass(frozen=True, slots=True)
class FunctionComment(_Node):
    headline: str
    info: str | None = None
    example: str | None = None
    parameters: tuple[ParamDoc, ...] = ()
    throws_info: str | None = None
    return_info: str | None = None


@dataclass(frozen=True, slots=True)
class CodeExample(_Node):
    headline: str
    code: str
    language: str | None = None


@dataclass(frozen=True, slots=True)
class TypeComment(_Node):
    headline: str
    info: str | None = None
    examples: tuple[CodeExample, ...] = ()
    sql: tuple[CodeExample, ...] = ()


@dataclass(frozen=True, slots=True)
class FunctionDef(_Node):
    declaration: FunctionSig
    body: tuple[Statement, ...] = ()
    comment: FunctionComment | None = None
    inlinable: bool = False
    discardable_result: bool = False


@dataclass(frozen=True, slots=True)
class InstanceVariable(_Node):
    name: str
    type: TypeRef | None = None
    value: Expression | None = None
    constant: bool = False
    visibility: Visibility = Visibility.PUBLIC
    comment: str | None = None

    def __post_init__(self) -> None:
        _Node.__post_init__(self)
        if self.type is None and self.value is None:
            raise ValueError(f"Variable '{self.name}' needs a type or a value")


@dataclass(frozen=True, slots=True)
class ComputedProperty(_Node):
    name: str
    type: TypeRef
    body: tuple[Statement, ...] = ()
    visibility: Visibility = Visibility.PUBLIC
    comment: str | None = None
    inlinable: bool = False


@dataclass(frozen=True, slots=True)
class TypeDef(_Node):
    """A struct, enum or class.

    ``type_variables`` are static stored properties; static functions are
    flagged on their ``FunctionSig``.
    """

    name: str
    kind: TypeKind = TypeKind.STRUCT
    visibility: Visibility = Visibility.PUBLIC
    conformances: tuple[TypeRef, ...] = ()
    nested_types: tuple[TypeDef, ...] = ()
    type_variables: tuple[InstanceVariable, ...] = ()
    variables: tuple[InstanceVariable, ...] = ()
    computed_properties: tuple[ComputedProperty, ...] = ()
    functions: tuple[FunctionDef, ...] = ()
    comment: TypeComment | None = None


@dataclass(frozen=True, slots=True)
class ExtensionDef(_Node):
    extended_type: TypeRef
    visibility: Visibility = Visibility.PUBLIC
    generic_constraints: tuple[GenericConstraint, ...] = ()
    structures: tuple[TypeDef, ...] = ()
    functions: tuple[FunctionDef, ...] = ()


@dataclass(frozen=True, slots=True)
class CompilationUnit(_Node):
    """One generated source file. Members render in insertion order."""

    name: str
    header: str | None = None
    imports: tuple[str, ...] = ()
    reexports: tuple[str, ...] = ()
    structures: tuple[TypeDef, ...] = ()
    functions: tuple[FunctionDef, ...] = ()
    extensions: tuple[ExtensionDef, ...] = ()
