"""Renderer: serializes a ``CompilationUnit`` to source text.

Output is a pure function of ``(unit, style, syntax)``. Members are emitted
in IR order, never sorted, so regenerating an unchanged schema yields a
byte-identical file.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from schemaforge.config.models import CommentStyle, RenderStyle
from schemaforge.core.errors import InternalError
from schemaforge.ir.nodes import (
    ArrayExpression,
    ArrayType,
    Assignment,
    BoolLiteral,
    Call,
    CallStatement,
    Closure,
    ClosureType,
    CodeExample,
    Compare,
    CompilationUnit,
    ComputedProperty,
    Conditional,
    DataLiteral,
    DoubleLiteral,
    Expression,
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
    QualifiedType,
    RawExpression,
    RawStatement,
    Return,
    SelfRef,
    Statement,
    StringLiteral,
    TypeComment,
    TypeDef,
    TypeExpression,
    TypeRef,
    VariableDecl,
    VariableRef,
    Visibility,
    VoidType,
)
from schemaforge.ir.syntax import SWIFT, Syntax

_LITERALS = (
    NilLiteral,
    BoolLiteral,
    IntLiteral,
    DoubleLiteral,
    StringLiteral,
    IntArrayLiteral,
    DataLiteral,
)

_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}

# (opening line, line prefix, closing line)
_COMMENT_MARKERS: dict[CommentStyle, tuple[str | None, str, str | None]] = {
    CommentStyle.DASHES: (None, "// ", None),
    CommentStyle.TRIPLE_DASHES: (None, "/// ", None),
    CommentStyle.STARS: ("/*", " * ", " */"),
    CommentStyle.DOUBLE_STARS: ("/**", " * ", " */"),
}


def _code_block(code: str | None, language: str | None) -> list[str]:
    code = (code or "").strip("\r\n")
    if not code:
        return []
    return ["```" + (language or ""), *code.split("\n"), "```"]


class Renderer:
    """Walks an IR tree and appends text to an internal buffer.

    One instance renders one unit; use ``render()`` unless you need the
    expression or type helpers on their own.
    """

    def __init__(self, style: RenderStyle | None = None, syntax: Syntax = SWIFT) -> None:
        self.style = style or RenderStyle()
        self.syntax = syntax
        self._parts: list[str] = []
        self._level = 0

    @property
    def source(self) -> str:
        return "".join(self._parts)

    # Primitives

    def _append(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def _ends_with(self, suffix: str) -> bool:
        return bool(self._parts) and self._parts[-1].endswith(suffix)

    def _eol_if_missing(self) -> None:
        if not self._ends_with(self.style.eol):
            self._append(self.style.eol)

    def _space_if_missing(self) -> None:
        if not self._ends_with(" "):
            self._append(" ")

    def _indent(self) -> str:
        return self.style.indent * self._level

    def _writeln(self, line: str = "") -> None:
        # Blank lines carry no indentation
        if line:
            self._append(self._indent() + line)
        self._append(self.style.eol)

    def _separate(self) -> None:
        if self._parts:
            self._writeln()

    def _fits(self, text: str) -> bool:
        return self.style.eol not in text and (
            len(self._indent()) + len(text) <= self.style.line_length
        )

    @contextmanager
    def _indented(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    @contextmanager
    def _block(
        self,
        *,
        start_suffix: str | None = None,
        end_suffix: str | None = None,
        add_space: bool = True,
    ) -> Iterator[None]:
        if add_space:
            self._space_if_missing()
        self._append("{")
        self._append(self.style.eol if start_suffix is None else start_suffix)
        with self._indented():
            yield
        self._eol_if_missing()
        self._append(self._indent() + "}")
        if end_suffix is None:
            self._append(self.style.eol)
        else:
            self._append(end_suffix)

    def _nested(self, render: Callable[[], None]) -> str:
        """Render into a scratch buffer and return the text."""
        saved = self._parts
        self._parts = []
        try:
            render()
            return "".join(self._parts)
        finally:
            self._parts = saved

    def identifier(self, name: str) -> str:
        """``name``, quoted if it is a reserved word."""
        if self.syntax.is_reserved(name):
            quote = self.syntax.identifier_quote
            return f"{quote}{name}{quote}"
        return name

    def argument_label(self, label: str) -> str:
        """``label``, quoted only if it cannot stand as an argument label."""
        if label in self.syntax.label_reserved_words:
            quote = self.syntax.identifier_quote
            return f"{quote}{label}{quote}"
        return label

    def _visibility(self, visibility: Visibility, omit: bool = False) -> str:
        if omit and visibility is Visibility.PUBLIC:
            return ""
        keyword = self.syntax.visibility_keywords.get(visibility, "")
        return f"{keyword} " if keyword else ""

    def _join(self, items: Sequence[str]) -> str:
        return self.style.identifier_list_separator.join(items)

    # Types

    def type_ref(self, ref: TypeRef) -> str:
        syntax = self.syntax
        if isinstance(ref, VoidType):
            return syntax.void_type
        if isinstance(ref, NamedType):
            if not ref.arguments:
                return ref.name
            return f"{ref.name}<{self._join([self.type_ref(a) for a in ref.arguments])}>"
        if isinstance(ref, OptionalType):
            wrapped = self.type_ref(ref.wrapped)
            if isinstance(ref.wrapped, ClosureType):
                wrapped = f"({wrapped})"
            return wrapped + syntax.optional_suffix
        if isinstance(ref, ArrayType):
            return syntax.array_type.format(element=self.type_ref(ref.element))
        if isinstance(ref, QualifiedType):
            return f"{self.type_ref(ref.base)}.{ref.name}"
        if isinstance(ref, KeyPathType):
            return syntax.key_path_type.format(
                root=self.type_ref(ref.root), value=self.type_ref(ref.value)
            )
        if isinstance(ref, ClosureType):
            prefix = f"{syntax.escaping_attribute} " if ref.escaping else ""
            effect = f"{syntax.throws_keyword} " if ref.throws else ""
            returns = f"{effect}{syntax.return_arrow} {self.type_ref(ref.returns)}"
            if not ref.parameters:
                return f"{prefix}() {returns}"
            parameters = ", ".join(self.type_ref(p) for p in ref.parameters)
            return f"{prefix}( {parameters} ) {returns}"
        raise InternalError.unrenderable(ref)

    def constraint(self, constraint: GenericConstraint) -> str:
        if constraint.same_type:
            return f"{constraint.parameter} == {self.type_ref(constraint.type)}"
        return f"{constraint.parameter}: {self.type_ref(constraint.type)}"

    # Literals and expressions

    def literal(self, literal: Any) -> str:
        syntax = self.syntax
        if isinstance(literal, NilLiteral):
            return syntax.nil_literal
        if isinstance(literal, BoolLiteral):
            return syntax.true_literal if literal.value else syntax.false_literal
        if isinstance(literal, IntLiteral):
            return str(literal.value)
        if isinstance(literal, DoubleLiteral):
            value = literal.value
            if math.isnan(value):
                return syntax.nan_literal
            if math.isinf(value):
                return ("-" if value < 0 else "") + syntax.infinity_literal
            return repr(value)
        if isinstance(literal, StringLiteral):
            return '"' + "".join(_STRING_ESCAPES.get(c, c) for c in literal.value) + '"'
        if isinstance(literal, IntArrayLiteral):
            if not literal.values:
                return "[]"
            return "[ " + ", ".join(str(v) for v in literal.values) + " ]"
        if isinstance(literal, DataLiteral):
            return syntax.data_literal.format(
                bytes=self.literal(IntArrayLiteral(tuple(literal.value)))
            )
        raise InternalError.unrenderable(literal)

    def expression(self, expr: Expression) -> str:
        syntax = self.syntax
        if isinstance(expr, _LITERALS):
            return self.literal(expr)
        if isinstance(expr, VariableRef):
            return self.identifier(expr.name)
        if isinstance(expr, SelfRef):
            return syntax.self_keyword
        if isinstance(expr, Member):
            return f"{self.expression(expr.base)}.{self.identifier(expr.name)}"
        if isinstance(expr, KeyPath):
            root = self.type_ref(expr.root) if expr.root is not None else ""
            return f"{syntax.key_path_prefix}{root}.{self.identifier(expr.property)}"
        if isinstance(expr, TypeExpression):
            return self.type_ref(expr.type) + syntax.metatype_suffix
        if isinstance(expr, Call):
            return self._nested(lambda: self._append_call(expr))
        if isinstance(expr, Closure):
            return self._nested(lambda: self._append_closure(expr))
        if isinstance(expr, ArrayExpression):
            if not expr.elements:
                return "[]"
            return "[ " + ", ".join(self.expression(e) for e in expr.elements) + " ]"
        if isinstance(expr, Compare):
            operator = syntax.operators[expr.operator]
            return f"{self.expression(expr.lhs)} {operator} {self.expression(expr.rhs)}"
        if isinstance(expr, RawExpression):
            return expr.text
        raise InternalError.unrenderable(expr)

    def _append_expression(self, expr: Expression) -> None:
        if isinstance(expr, Call):
            self._append_call(expr)
        else:
            self._append(self.expression(expr))

    def _closure_head(self, parameters: Sequence[str]) -> str:
        if not parameters:
            return self.style.eol
        return f" ( {self._join(parameters)} ) {self.syntax.closure_in_keyword}{self.style.eol}"

    def _append_closure(self, closure: Closure) -> None:
        with self._block(
            start_suffix=self._closure_head(closure.parameters), end_suffix="", add_space=False
        ):
            self._statements(closure.body)

    def _append_call(self, call: Call) -> None:
        syntax = self.syntax
        preamble = ""
        if call.tries:
            preamble += f"{syntax.try_keyword} "
        if call.awaits:
            preamble += f"{syntax.await_keyword} "
        if call.base is not None:
            preamble += self.expression(call.base) + "."
        if call.name == syntax.initializer_name:
            preamble += call.name
        else:
            preamble += self.identifier(call.name)

        arguments = [
            f"{self.argument_label(a.label)}: {self.expression(a.value)}"
            if a.label
            else self.expression(a.value)
            for a in call.arguments
        ]
        single = f"{preamble}({self._join(arguments)})"
        if not arguments or self._fits(single):
            self._append(single)
        else:
            self._append(preamble + "(" + self.style.eol)
            with self._indented():
                for i, argument in enumerate(arguments):
                    self._writeln(argument + ("," if i + 1 < len(arguments) else ""))
            self._append(self._indent() + ")")

        if call.trailing is not None:
            with self._block(start_suffix=self._closure_head(call.trailing.parameters)):
                self._statements(call.trailing.body)

    # Statements

    def _statement(self, statement: Statement) -> None:
        syntax = self.syntax
        style = self.style
        if isinstance(statement, RawStatement):
            for line in statement.text.split("\n"):
                self._writeln(line)
        elif isinstance(statement, Group):
            self._statements(statement.statements)
        elif isinstance(statement, VariableDecl):
            keyword = syntax.variable_keyword if statement.mutable else syntax.constant_keyword
            self._append(f"{self._indent()}{keyword} {self.identifier(statement.name)}")
            if statement.type is not None:
                self._append(style.property_type_separator + self.type_ref(statement.type))
            self._append(style.property_value_separator)
            self._append_expression(statement.value)
            self._eol_if_missing()
        elif isinstance(statement, Assignment):
            self._append(
                self._indent() + self.expression(statement.target) + style.property_value_separator
            )
            self._append_expression(statement.value)
            self._eol_if_missing()
        elif isinstance(statement, CallStatement):
            self._append(self._indent())
            self._append_call(statement.call)
            self._eol_if_missing()
        elif isinstance(statement, Return):
            self._append(self._indent() + syntax.return_keyword)
            if statement.value is not None:
                self._append(" ")
                self._append_expression(statement.value)
            self._eol_if_missing()
        elif isinstance(statement, Conditional):
            if not statement.branches:
                raise InternalError.unexpected("conditional without branches")
            for i, branch in enumerate(statement.branches):
                keyword = syntax.if_keyword
                if i > 0:
                    keyword = f"{syntax.else_keyword} {keyword}"
                self._append(f"{self._indent()}{keyword} {self.expression(branch.condition)}")
                with self._block():
                    self._statements(branch.body)
            if statement.otherwise:
                self._append(self._indent() + syntax.else_keyword)
                with self._block():
                    self._statements(statement.otherwise)
        else:
            raise InternalError.unrenderable(statement)

    def _statements(
        self, statements: Sequence[Statement], allow_single_return: bool = False
    ) -> None:
        if (
            allow_single_return
            and self.syntax.implicit_return
            and len(statements) == 1
            and isinstance(statements[0], Return)
            and statements[0].value is not None
        ):
            self._append(self._indent())
            self._append_expression(statements[0].value)
            self._eol_if_missing()
            return
        for statement in statements:
            self._statement(statement)

    # Comments

    def _comment(self, style: CommentStyle, lines: list[str]) -> None:
        if style is CommentStyle.NONE or not lines:
            return
        opener, prefix, closer = _COMMENT_MARKERS[style]
        if opener:
            self._writeln(opener)
        for line in lines:
            self._writeln(prefix + line if line else prefix.rstrip())
        if closer:
            self._writeln(closer)

    def _property_comment(self, text: str | None) -> None:
        if text:
            self._comment(self.style.property_comment_style, text.split("\n"))

    def _function_comment(self, comment: FunctionComment) -> None:
        lines = [comment.headline]
        if comment.info:
            lines += ["", *comment.info.split("\n")]
        example = _code_block(comment.example, self.syntax.code_block_language)
        if example:
            lines += ["", "Example:", *example]
        if comment.parameters:
            lines += ["", "- Parameters:"]
            lines += [f"  - {p.name}: {p.info}" for p in comment.parameters]
        if (comment.throws_info or comment.return_info) and not comment.parameters:
            lines.append("")
        if comment.throws_info:
            lines.append(f"- Throws: {comment.throws_info}")
        if comment.return_info:
            lines.append(f"- Returns: {comment.return_info}")
        self._comment(self.style.function_comment_style, lines)

    def _example_lines(self, example: CodeExample, default_language: str) -> list[str]:
        code = _code_block(example.code, example.language or default_language)
        return ["", example.headline, *code]

    def _type_comment(self, comment: TypeComment) -> None:
        language = self.syntax.code_block_language
        lines = [comment.headline]
        if comment.info:
            lines += ["", *comment.info.split("\n")]
        if len(comment.examples) == 1:
            lines += self._example_lines(comment.examples[0], language)
        elif comment.examples:
            lines += ["", *self.style.examples_header.split("\n")]
            for example in comment.examples:
                lines += self._example_lines(example, language)
        if comment.sql:
            lines += ["", *self.style.sql_header.split("\n")]
            for example in comment.sql:
                lines += self._example_lines(example, "sql")
        self._comment(self.style.type_comment_style, lines)

    # Declarations

    def _parameter(self, param: Param) -> str:
        name = self.identifier(param.name)
        if param.unlabeled:
            head = f"{self.syntax.wildcard_label} {name}"
        elif param.label is None or param.label == param.name:
            head = name
        else:
            head = f"{self.argument_label(param.label)} {name}"
        text = f"{head}: {self.type_ref(param.type)}"
        if param.default is not None:
            text += self.style.property_value_separator + self.expression(param.default)
        return text

    def _function_declaration(self, sig: FunctionSig, omit_visibility: bool) -> None:
        syntax = self.syntax
        preamble = self._visibility(sig.visibility, omit_visibility)
        if sig.is_static:
            preamble += f"{syntax.static_keyword} "
        if sig.is_mutating:
            preamble += f"{syntax.mutating_keyword} "
        if sig.is_initializer:
            preamble += syntax.initializer_name
        else:
            preamble += f"{syntax.function_keyword} {self.identifier(sig.name)}"
        if sig.generic_parameters:
            preamble += f"<{self._join(sig.generic_parameters)}>"

        effects = []
        if sig.is_async:
            effects.append(syntax.async_keyword)
        if sig.throws:
            effects.append(syntax.throws_keyword)
        if not isinstance(sig.return_type, VoidType):
            effects.append(f"{syntax.return_arrow} {self.type_ref(sig.return_type)}")
        suffix = (" " + " ".join(effects)) if effects else ""

        parameters = [self._parameter(p) for p in sig.parameters]
        single = f"{preamble}({self._join(parameters)}){suffix}"
        if not parameters or self._fits(single):
            self._writeln(single)
        else:
            self._writeln(preamble + "(")
            with self._indented():
                for i, parameter in enumerate(parameters):
                    self._writeln(parameter + ("," if i + 1 < len(parameters) else ""))
            self._writeln(")" + suffix)

        if sig.generic_constraints:
            constraints = self._join([self.constraint(c) for c in sig.generic_constraints])
            with self._indented():
                self._writeln(f"{syntax.where_keyword} {constraints}")

    def _function(self, function: FunctionDef, omit_visibility: bool = False) -> None:
        syntax = self.syntax
        sig = function.declaration
        if function.comment is not None:
            self._function_comment(function.comment)
        if (
            function.inlinable
            and not self.style.never_inline
            and sig.visibility is Visibility.PUBLIC
        ):
            self._writeln(syntax.inlinable_attribute)
        if function.discardable_result and not isinstance(sig.return_type, VoidType):
            self._writeln(syntax.discardable_result_attribute)
        self._function_declaration(sig, omit_visibility)
        # Brace goes on its own line, wrapped declarations stay readable
        self._append(self._indent())
        with self._block(add_space=False):
            self._statements(function.body, allow_single_return=True)

    def _variable(
        self, variable: InstanceVariable, *, is_static: bool, omit_visibility: bool = False
    ) -> None:
        syntax = self.syntax
        self._property_comment(variable.comment)
        text = self._visibility(variable.visibility, omit_visibility)
        if is_static:
            text += f"{syntax.static_keyword} "
        keyword = syntax.constant_keyword if variable.constant else syntax.variable_keyword
        text += f"{keyword} {self.identifier(variable.name)}"
        if variable.type is not None:
            text += self.style.property_type_separator + self.type_ref(variable.type)
        if variable.value is not None:
            text += self.style.property_value_separator + self.expression(variable.value)
        self._writeln(text)

    def _computed_property(self, prop: ComputedProperty, omit_visibility: bool = False) -> None:
        syntax = self.syntax
        self._property_comment(prop.comment)
        if prop.inlinable and not self.style.never_inline and prop.visibility is Visibility.PUBLIC:
            self._writeln(syntax.inlinable_attribute)
        head = (
            self._visibility(prop.visibility, omit_visibility)
            + f"{syntax.variable_keyword} {self.identifier(prop.name)}"
            + self.style.property_type_separator
            + self.type_ref(prop.type)
        )
        body = prop.body
        if (
            syntax.implicit_return
            and len(body) == 1
            and isinstance(body[0], Return)
            and body[0].value is not None
        ):
            self._append(f"{self._indent()}{head} {{ ")
            self._append_expression(body[0].value)
            self._append(" }")
            self._append(self.style.eol)
            return
        self._append(self._indent() + head)
        with self._block():
            self._statements(body, allow_single_return=True)

    def _members(self, members: Sequence[Any], render: Callable[[Any], None]) -> None:
        if not members:
            return
        self._writeln()
        last_had_comment = False
        for member in members:
            if last_had_comment:
                self._writeln()
            render(member)
            last_had_comment = member.comment is not None

    def _type_def(self, type_def: TypeDef, omit_visibility: bool = False) -> None:
        if type_def.comment is not None:
            self._type_comment(type_def.comment)
        head = (
            self._visibility(type_def.visibility, omit_visibility)
            + f"{self.syntax.type_keywords[type_def.kind]} {self.identifier(type_def.name)}"
        )
        if type_def.conformances:
            head += self.style.conformance_separator + self._join(
                [self.type_ref(c) for c in type_def.conformances]
            )
        self._append(self._indent() + head)
        with self._block():
            for nested in type_def.nested_types:
                self._writeln()
                self._type_def(nested)
            self._members(
                type_def.type_variables, lambda v: self._variable(v, is_static=True)
            )
            self._members(type_def.variables, lambda v: self._variable(v, is_static=False))
            self._members(type_def.computed_properties, self._computed_property)
            for function in type_def.functions:
                self._writeln()
                self._function(function)

    def _extension(self, extension: ExtensionDef) -> None:
        syntax = self.syntax
        public = extension.visibility is Visibility.PUBLIC
        head = (
            self._visibility(extension.visibility)
            + f"{syntax.extension_keyword} {self.type_ref(extension.extended_type)}"
        )
        if extension.generic_constraints:
            constraints = self._join([self.constraint(c) for c in extension.generic_constraints])
            self._writeln(head)
            with self._indented():
                self._writeln(f"{syntax.where_keyword} {constraints}")
            self._writeln("{")
        else:
            self._writeln(head + " {")
        with self._indented():
            for structure in extension.structures:
                self._writeln()
                self._type_def(structure, omit_visibility=public)
            for function in extension.functions:
                self._writeln()
                self._function(function, omit_visibility=public)
        self._writeln("}")

    # Unit

    def render_unit(self, unit: CompilationUnit) -> str:
        if not isinstance(unit, CompilationUnit):
            raise InternalError.unrenderable(unit)
        syntax = self.syntax
        self._parts = []
        self._level = 0

        if unit.header:
            for line in unit.header.split("\n"):
                self._writeln(f"{syntax.line_comment} {line}".rstrip())
        for name in unit.imports:
            self._writeln(f"{syntax.import_keyword} {name}")
        for name in unit.reexports:
            self._writeln(f"{syntax.reexport_keyword} {name}")

        for structure in unit.structures:
            self._separate()
            self._type_def(structure)
        for function in unit.functions:
            self._separate()
            self._function(function)
        for extension in unit.extensions:
            self._separate()
            self._extension(extension)
        return self.source


def render(
    unit: CompilationUnit, style: RenderStyle | None = None, syntax: Syntax = SWIFT
) -> str:
    """Render ``unit`` to source text.

    Args:
        unit: Finished IR tree.
        style: Layout options, defaults if omitted.
        syntax: Spelling table of the target language.

    Returns:
        The source text, ending in ``style.eol``.

    Raises:
        InternalError: The tree contains a node the renderer does not know.
    """
    return Renderer(style, syntax).render_unit(unit)
