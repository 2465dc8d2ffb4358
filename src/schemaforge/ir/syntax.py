"""Target-language spelling for the renderer.

Everything the renderer emits verbatim (keywords, punctuation of types and
literals, reserved words) comes from a ``Syntax`` table, so IR trees stay
free of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from schemaforge.ir.nodes import CompareOperator, TypeKind, Visibility

SWIFT_RESERVED_WORDS = frozenset(
    {
        "import",
        "let", "var", "static",
        "public", "private", "fileprivate", "internal", "open",
        "class", "struct", "extension", "protocol", "enum", "case", "default",
        "func", "throws", "rethrows", "mutating", "nonmutating",
        "init", "deinit", "inout", "optional", "override",
        "try",
        "operator", "infix", "subscript", "defer",
        "break", "fallthrough", "indirect", "lazy",
        "for", "do", "while", "repeat", "continue", "return", "in", "where",
        "if", "guard", "else", "switch", "catch", "throw",
        "true", "false", "nil", "self",
        "as", "is",
        "async", "await",
        "typealias", "associatedtype",
        "associativity", "dynamic", "convenience", "required", "final",
        "didSet", "willSet", "get", "set",
        "weak", "unowned",
    }
)  # fmt: skip


@dataclass(frozen=True)
class Syntax:
    """Spelling table. Defaults spell Swift."""

    reserved_words: frozenset[str] = SWIFT_RESERVED_WORDS
    identifier_quote: str = "`"
    # Keywords are valid argument labels apart from these
    label_reserved_words: frozenset[str] = frozenset({"inout", "var", "let"})
    wildcard_label: str = "_"
    line_comment: str = "//"

    # Declarations
    import_keyword: str = "import"
    reexport_keyword: str = "@_exported import"
    type_keywords: dict[TypeKind, str] = field(
        default_factory=lambda: {
            TypeKind.STRUCT: "struct",
            TypeKind.ENUM: "enum",
            TypeKind.CLASS: "class",
        }
    )
    visibility_keywords: dict[Visibility, str] = field(
        default_factory=lambda: {
            Visibility.PUBLIC: "public",
            Visibility.INTERNAL: "",
            Visibility.PRIVATE: "private",
        }
    )
    extension_keyword: str = "extension"
    function_keyword: str = "func"
    initializer_name: str = "init"
    static_keyword: str = "static"
    mutating_keyword: str = "mutating"
    constant_keyword: str = "let"
    variable_keyword: str = "var"
    where_keyword: str = "where"
    inlinable_attribute: str = "@inlinable"
    discardable_result_attribute: str = "@discardableResult"
    escaping_attribute: str = "@escaping"

    # Effects
    async_keyword: str = "async"
    throws_keyword: str = "throws"
    try_keyword: str = "try"
    await_keyword: str = "await"
    return_arrow: str = "->"

    # Statements
    return_keyword: str = "return"
    if_keyword: str = "if"
    else_keyword: str = "else"
    closure_in_keyword: str = "in"
    # A lone ``return x`` body may be spelled as just ``x``
    implicit_return: bool = True

    # Types
    void_type: str = "Void"
    optional_suffix: str = "?"
    array_type: str = "[ {element} ]"
    key_path_type: str = "KeyPath<{root}, {value}>"

    # Expressions
    self_keyword: str = "self"
    metatype_suffix: str = ".self"
    key_path_prefix: str = "\\"
    operators: dict[CompareOperator, str] = field(
        default_factory=lambda: {
            CompareOperator.EQUAL: "==",
            CompareOperator.NOT_EQUAL: "!=",
            CompareOperator.LESS_THAN: "<",
            CompareOperator.GREATER_THAN_OR_EQUAL: ">=",
        }
    )

    # Literals
    nil_literal: str = "nil"
    true_literal: str = "true"
    false_literal: str = "false"
    data_literal: str = "Data({bytes})"
    infinity_literal: str = "Double.infinity"
    nan_literal: str = "Double.nan"
    code_block_language: str = "swift"

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words


SWIFT = Syntax()
