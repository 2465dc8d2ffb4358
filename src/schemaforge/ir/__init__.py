"""Intermediate representation and renderer."""

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
    VOID,
    Argument,
    ArrayExpression,
    ArrayType,
    Assignment,
    BoolLiteral,
    Branch,
    Call,
    CallStatement,
    Closure,
    ClosureType,
    CodeExample,
    Compare,
    CompareOperator,
    CompilationUnit,
    ComputedProperty,
    Conditional,
    DataLiteral,
    DoubleLiteral,
    ExtensionDef,
    FunctionComment,
    FunctionDef,
    FunctionSig,
    GenericConstraint,
    Group,
    InstanceVariable,
    IntArrayLiteral,
    IntLiteral,
    KeyPath,
    KeyPathType,
    Member,
    NamedType,
    NilLiteral,
    OptionalType,
    Param,
    ParamDoc,
    QualifiedType,
    RawExpression,
    RawStatement,
    Return,
    SelfRef,
    StringLiteral,
    TrailingClosure,
    TypeComment,
    TypeDef,
    TypeExpression,
    TypeKind,
    VariableDecl,
    VariableRef,
    Visibility,
    VoidType,
)
from schemaforge.ir.render import Renderer, render
from schemaforge.ir.syntax import SWIFT, Syntax

__all__ = [
    # Rendering
    "Renderer",
    "SWIFT",
    "Syntax",
    "render",
    # Types
    "BOOL",
    "BYTES",
    "DATA",
    "DATE",
    "DECIMAL",
    "DOUBLE",
    "INT",
    "STRING",
    "URL",
    "UUID",
    "VOID",
    "ArrayType",
    "ClosureType",
    "KeyPathType",
    "NamedType",
    "OptionalType",
    "QualifiedType",
    "VoidType",
    # Literals
    "FALSE",
    "NIL",
    "TRUE",
    "BoolLiteral",
    "DataLiteral",
    "DoubleLiteral",
    "IntArrayLiteral",
    "IntLiteral",
    "NilLiteral",
    "StringLiteral",
    # Expressions
    "Argument",
    "ArrayExpression",
    "Call",
    "Closure",
    "Compare",
    "CompareOperator",
    "KeyPath",
    "Member",
    "RawExpression",
    "SelfRef",
    "TrailingClosure",
    "TypeExpression",
    "VariableRef",
    # Statements
    "Assignment",
    "Branch",
    "CallStatement",
    "Conditional",
    "Group",
    "RawStatement",
    "Return",
    "VariableDecl",
    # Declarations
    "CodeExample",
    "CompilationUnit",
    "ComputedProperty",
    "ExtensionDef",
    "FunctionComment",
    "FunctionDef",
    "FunctionSig",
    "GenericConstraint",
    "InstanceVariable",
    "Param",
    "ParamDoc",
    "TypeComment",
    "TypeDef",
    "TypeKind",
    "Visibility",
]
