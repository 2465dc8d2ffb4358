"""Tests for IR construction from the entity model."""

import pytest

from schemaforge.config.models import OutputConfig
from schemaforge.core.errors import ErrorCode, InternalError
from schemaforge.generate.builder import build_unit, default_expression
from schemaforge.ir import (
    FALSE,
    INT,
    NIL,
    TRUE,
    Argument,
    Call,
    CompilationUnit,
    DataLiteral,
    DoubleLiteral,
    IntArrayLiteral,
    IntLiteral,
    KeyPath,
    Member,
    NamedType,
    OptionalType,
    Return,
    SelfRef,
    StringLiteral,
    TypeDef,
    TypeExpression,
    VariableRef,
    Visibility,
    render,
)
from schemaforge.naming.fancifier import fancify
from schemaforge.naming.models import (
    DatabaseInfo,
    Property,
    PropertyKind,
    PropertyType,
    Relationship,
)
from schemaforge.schema.models import (
    Column,
    ColumnType,
    ForeignKey,
    LiteralKind,
    LiteralValue,
    Schema,
    Table,
    View,
)


def col(position: int, name: str, sql_type: str = "INTEGER", **kwargs: object) -> Column:
    return Column(position, name, ColumnType.parse(sql_type), **kwargs)  # type: ignore[arg-type]


SHOP = Schema(
    user_version=4,
    tables=(
        Table(
            "Category",
            "CREATE TABLE Category (...)",
            (col(0, "CategoryID", is_primary_key=True), col(1, "CategoryName", "TEXT")),
        ),
        Table(
            "Product",
            "CREATE TABLE Product (...)",
            (col(0, "ProductID", is_primary_key=True), col(1, "CategoryID")),
            (ForeignKey(0, "CategoryID", "Category", "CategoryID"),),
        ),
        Table("Tag", "CREATE TABLE Tag (...)", (col(0, "id", is_primary_key=True),)),
    ),
    views=(View("Totals", "CREATE VIEW Totals AS SELECT 1.0 AS total", (col(0, "total", "REAL"),)),),
)


def prop(
    kind: PropertyKind,
    default: LiteralValue | None = None,
    *,
    not_null: bool = False,
    primary_key: bool = False,
) -> Property:
    return Property(
        "value",
        "value",
        None,
        PropertyType.of(kind),
        is_not_null=not_null,
        is_primary_key=primary_key,
        default_value=default,
    )


def structure(unit: CompilationUnit, name: str) -> TypeDef:
    return next(s for s in unit.structures if s.name == name)


@pytest.fixture
def shop() -> DatabaseInfo:
    return fancify(SHOP, name="shop")


class TestUnitLayout:
    """Top-level structure of the unit."""

    def test_given_database_when_built_then_database_struct_first(self, shop: DatabaseInfo) -> None:
        """The database struct precedes the records, which keep schema order."""
        unit = build_unit(shop)

        assert [s.name for s in unit.structures] == [
            shop.name,
            *[e.derived_name for e in shop.entities],
        ]
        assert unit.header == OutputConfig().header
        assert unit.imports == ("Foundation",)

    def test_given_database_when_built_then_user_version_and_record_types(
        self, shop: DatabaseInfo
    ) -> None:
        """The database struct carries the user version and record type list."""
        database = structure(build_unit(shop), shop.name)

        user_version, record_types = database.type_variables
        assert user_version.value == IntLiteral(4)
        assert record_types.value.elements == tuple(  # type: ignore[union-attr]
            TypeExpression(NamedType(e.derived_name)) for e in shop.entities
        )
        assert database.conformances == (NamedType("SQLDatabase"),)
        assert database.functions[0].declaration.is_initializer

    def test_given_internal_output_when_built_then_no_public_declarations(
        self, shop: DatabaseInfo
    ) -> None:
        """public=False makes every declaration internal."""
        unit = build_unit(shop, OutputConfig(public=False))

        assert {s.visibility for s in unit.structures} == {Visibility.INTERNAL}
        assert unit.extensions[0].visibility is Visibility.INTERNAL


class TestRecords:
    """Record structs."""

    def test_given_table_with_key_when_built_then_identifiable_record(
        self, shop: DatabaseInfo
    ) -> None:
        """Tables conform to the table protocol and Identifiable."""
        category = structure(build_unit(shop), "Category")

        assert category.conformances == (NamedType("SQLTableRecord"), NamedType("Identifiable"))
        assert [v.name for v in category.variables] == ["categoryId", "categoryName"]
        assert category.variables[1].type == OptionalType(NamedType("String"))
        schema, external_name, column_names = category.type_variables
        assert schema.value == Call("Schema")
        assert external_name.value == StringLiteral("Category")
        assert column_names.value.elements == (  # type: ignore[union-attr]
            StringLiteral("CategoryID"),
            StringLiteral("CategoryName"),
        )

    def test_given_key_not_named_id_when_built_then_id_property_added(
        self, shop: DatabaseInfo
    ) -> None:
        """A computed id forwards to the primary key."""
        category = structure(build_unit(shop), "Category")

        (id_property,) = category.computed_properties
        assert id_property.name == "id"
        assert id_property.type == INT
        assert id_property.body == (Return(Member(SelfRef(), "categoryId")),)

    def test_given_key_named_id_when_built_then_no_id_property(self, shop: DatabaseInfo) -> None:
        """A primary key already named id needs no forwarder."""
        tag = structure(build_unit(shop), "Tag")
        assert tag.computed_properties == ()

    def test_given_view_without_key_when_built_then_view_record(self, shop: DatabaseInfo) -> None:
        """Views conform to the view protocol only."""
        totals = shop.entity("Totals")
        assert totals is not None

        record = structure(build_unit(shop), totals.derived_name)

        assert record.conformances == (NamedType("SQLViewRecord"),)
        assert record.computed_properties == ()

    def test_given_record_when_built_then_memberwise_initializer(self, shop: DatabaseInfo) -> None:
        """The initializer takes every property, optional ones defaulting to nil."""
        category = structure(build_unit(shop), "Category")

        initializer = category.functions[0]
        first, second = initializer.declaration.parameters
        assert (first.name, first.default) == ("categoryId", None)
        assert (second.name, second.default) == ("categoryName", NIL)


    def test_given_to_one_relationship_when_built_then_examples_use_generated_api(
        self, shop: DatabaseInfo
    ) -> None:
        """Doc examples only call initializers and accessors the unit declares."""
        unit = build_unit(shop)
        product = structure(unit, "Product")

        assert product.comment is not None
        codes = [example.code for example in product.comment.examples]
        assert codes == [
            "let record = try Product(row: row)",
            "let related = try db.findCategory(for: record)",
        ]
        declared = {f.declaration.name for f in unit.extensions[0].functions}
        assert "findCategory" in declared

    def test_given_accessors_disabled_when_built_then_only_row_example(
        self, shop: DatabaseInfo
    ) -> None:
        """Without accessors the examples do not mention them."""
        product = structure(build_unit(shop, OutputConfig(relationship_accessors=False)), "Product")

        assert product.comment is not None
        assert [e.code for e in product.comment.examples] == ["let record = try Product(row: row)"]


class TestRecordSchema:
    """Nested Schema structs with column definitions and statements."""

    def test_given_table_when_built_then_schema_lists_columns(self, shop: DatabaseInfo) -> None:
        """Each property gets a column with its SQL name, position and key flag."""
        product = structure(build_unit(shop), "Product")

        (schema,) = product.nested_types
        assert schema.name == "Schema"
        assert schema.conformances == (NamedType("SQLTableSchema"),)
        key, category = schema.variables
        assert key.name == "productId"
        assert key.type == NamedType("MappedColumn", (NamedType("Product"), INT))
        assert key.value == Call(
            "MappedColumn",
            [
                Argument(StringLiteral("ProductID"), "externalName"),
                Argument(IntLiteral(0), "position"),
                Argument(TRUE, "isPrimaryKey"),
                Argument(KeyPath("productId", NamedType("Product")), "keyPath"),
            ],
        )
        flag = category.value.arguments[2]  # type: ignore[union-attr]
        assert flag == Argument(FALSE, "isPrimaryKey")

    def test_given_table_when_built_then_schema_carries_statements(
        self, shop: DatabaseInfo
    ) -> None:
        """Tables get every statement with its parameter positions."""
        schema = structure(build_unit(shop), "Product").nested_types[0]

        variables = {v.name: v.value for v in schema.type_variables}
        assert list(variables) == [
            "externalName",
            "columnCount",
            "create",
            "select",
            "selectColumns",
            "selectColumnIndices",
            "update",
            "updateParameterIndices",
            "insert",
            "insertReturning",
            "insertParameterIndices",
            "delete",
            "deleteParameterIndices",
        ]
        assert variables["columnCount"] == IntLiteral(2)
        assert variables["create"] == StringLiteral("CREATE TABLE Product (...);")
        assert variables["insert"] == StringLiteral(
            'INSERT INTO "Product" ( "CategoryID" ) VALUES ( ? )'
        )
        assert variables["insertParameterIndices"] == IntArrayLiteral((-1, 1))
        assert variables["updateParameterIndices"] == IntArrayLiteral((2, 1))

    def test_given_read_only_view_when_built_then_select_only_and_no_bind(
        self, shop: DatabaseInfo
    ) -> None:
        """Views without INSTEAD OF triggers cannot be written."""
        totals = shop.entity("Totals")
        assert totals is not None
        record = structure(build_unit(shop), totals.derived_name)

        schema = record.nested_types[0]
        assert schema.conformances == (NamedType("SQLViewSchema"),)
        assert "insert" not in [v.name for v in schema.type_variables]
        assert [f.declaration.name for f in record.functions] == ["init", "init"]

    def test_given_record_when_built_then_row_initializer_reads_schema_columns(
        self, shop: DatabaseInfo
    ) -> None:
        """init(row:indices:) forwards each column value to the memberwise init."""
        category = structure(build_unit(shop), "Category")

        row_init = category.functions[1]
        assert [p.name for p in row_init.declaration.parameters] == ["row", "indices"]
        assert row_init.declaration.throws
        (statement,) = row_init.body
        first = statement.call.arguments[0]  # type: ignore[union-attr]
        assert first.label == "categoryId"
        assert first.value == Call(
            "value",
            [
                Argument(Member(Member(VariableRef("Category"), "schema"), "categoryId"), "of"),
                Argument(VariableRef("indices"), "at"),
            ],
            base=VariableRef("row"),
        )

    def test_given_table_when_built_then_bind_covers_every_property(
        self, shop: DatabaseInfo
    ) -> None:
        """bind(to:indices:) binds each property through its schema column."""
        category = structure(build_unit(shop), "Category")

        bind = category.functions[2]
        assert bind.declaration.name == "bind"
        assert bind.declaration.parameters[0].label == "to"
        assert len(bind.body) == 2

    def test_given_unit_when_rendered_then_schema_struct_nested_in_record(
        self, shop: DatabaseInfo
    ) -> None:
        """The Schema struct renders inside its record with escaped SQL strings."""
        source = render(build_unit(shop))

        assert "public struct Schema : SQLTableSchema {" in source
        assert "public static let schema = Schema()" in source
        assert (
            'public static let delete = "DELETE FROM \\"Product\\" WHERE \\"ProductID\\" = ?"'
            in source
        )


class TestRelationshipAccessors:
    """find/fetch functions on the database."""

    def test_given_dangling_relationship_when_built_then_internal_error(
        self, shop: DatabaseInfo
    ) -> None:
        """Relationships to unknown entities are a generator bug, not bad input."""
        product = shop.entity("Product")
        assert product is not None
        product.relationships.append(Relationship("supplier", "CategoryID", "Supplier", "id"))

        with pytest.raises(InternalError) as exc_info:
            build_unit(shop)

        assert exc_info.value.code is ErrorCode.INTERNAL_ERROR
        assert exc_info.value.details == {"entity": "Product", "relationship": "supplier"}

    def test_given_foreign_key_when_built_then_find_and_fetch(self, shop: DatabaseInfo) -> None:
        """A to-one find and a to-many fetch are generated."""
        unit = build_unit(shop)

        (extension,) = unit.extensions
        assert extension.extended_type == NamedType(shop.name)
        find, fetch = extension.functions
        assert find.declaration.name == "findCategory"
        assert fetch.declaration.name == "fetchProducts"
        assert find.declaration.parameters[0].label == "for"
        assert find.declaration.return_type == OptionalType(NamedType("Category"))
        assert [p.name for p in fetch.declaration.parameters] == ["record", "limit"]

    def test_given_find_when_built_then_body_looks_up_destination(
        self, shop: DatabaseInfo
    ) -> None:
        """find compares the destination key path with the source value."""
        find = build_unit(shop).extensions[0].functions[0]

        category = NamedType("Category")
        assert find.body == (
            Return(
                Call(
                    "find",
                    [
                        Argument(TypeExpression(category)),
                        Argument(KeyPath("categoryId", category), "where"),
                        Argument(Member(VariableRef("record"), "categoryId"), "equals"),
                    ],
                    tries=True,
                )
            ),
        )

    def test_given_accessors_disabled_when_built_then_no_extension(
        self, shop: DatabaseInfo
    ) -> None:
        """relationship_accessors=False drops the extension."""
        unit = build_unit(shop, OutputConfig(relationship_accessors=False))
        assert unit.extensions == ()

    def test_given_unit_when_rendered_then_accessor_signatures(self, shop: DatabaseInfo) -> None:
        """Accessors render as throwing functions in a public extension."""
        source = render(build_unit(shop))

        assert f"public extension {shop.name} {{" in source
        assert "func findCategory(for record: Product) throws -> Category?" in source
        assert "func fetchProducts(" in source
        assert "limit: Int? = nil" in source


class TestDefaultExpression:
    """SQL defaults converted to initializer defaults."""

    @pytest.mark.parametrize(
        ("kind", "default", "expected"),
        [
            (PropertyKind.INTEGER, LiteralValue(LiteralKind.INTEGER, 5), IntLiteral(5)),
            (PropertyKind.INTEGER, LiteralValue(LiteralKind.REAL, 2.0), IntLiteral(2)),
            (PropertyKind.DOUBLE, LiteralValue(LiteralKind.INTEGER, 3), DoubleLiteral(3.0)),
            (PropertyKind.STRING, LiteralValue(LiteralKind.TEXT, "hi"), StringLiteral("hi")),
            (PropertyKind.BOOL, LiteralValue(LiteralKind.TEXT, "yes"), TRUE),
            (PropertyKind.BOOL, LiteralValue(LiteralKind.BOOLEAN, False), FALSE),
            (PropertyKind.BOOL, LiteralValue(LiteralKind.INTEGER, 1), TRUE),
            (
                PropertyKind.BYTE_ARRAY,
                LiteralValue(LiteralKind.BLOB, b"\x01\x02"),
                IntArrayLiteral((1, 2)),
            ),
            (PropertyKind.DATA, LiteralValue(LiteralKind.BLOB, b"\x01"), DataLiteral(b"\x01")),
            (
                PropertyKind.DECIMAL,
                LiteralValue(LiteralKind.INTEGER, 3),
                Call("Decimal", [Argument(IntLiteral(3))]),
            ),
        ],
    )
    def test_given_convertible_default_when_built_then_literal(
        self, kind: PropertyKind, default: LiteralValue, expected: object
    ) -> None:
        """Defaults convert to the property's type."""
        assert default_expression(prop(kind, default, not_null=True)) == expected

    def test_given_unconvertible_default_when_optional_then_nil(self) -> None:
        """Optional properties fall back to nil."""
        fraction = LiteralValue(LiteralKind.REAL, 1.5)
        timestamp = LiteralValue(LiteralKind.EXPRESSION, "CURRENT_TIMESTAMP")

        assert default_expression(prop(PropertyKind.INTEGER, fraction)) == NIL
        assert default_expression(prop(PropertyKind.DATE, timestamp)) == NIL

    def test_given_unconvertible_default_when_required_then_none(self) -> None:
        """Required properties without a usable default stay required."""
        fraction = LiteralValue(LiteralKind.REAL, 1.5)
        assert default_expression(prop(PropertyKind.INTEGER, fraction, not_null=True)) is None

    def test_given_no_default_when_built_then_nil_or_required(self) -> None:
        """Missing defaults are nil for optionals, required otherwise."""
        assert default_expression(prop(PropertyKind.STRING)) == NIL
        assert default_expression(prop(PropertyKind.STRING, not_null=True)) is None
        assert default_expression(prop(PropertyKind.STRING, LiteralValue(LiteralKind.NULL))) == NIL

    def test_given_uuid_primary_key_when_no_default_then_fresh_uuid(self) -> None:
        """UUID keys default to a new UUID."""
        assert default_expression(prop(PropertyKind.UUID, primary_key=True)) == Call("UUID")
