"""Tests for the schema model."""

import pytest

from schemaforge.schema.models import (
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
    TypeAffinity,
    View,
)


class TestColumnType:
    """Declared type parsing."""

    @pytest.mark.parametrize(
        ("raw", "kind"),
        [
            ("INTEGER", ColumnKind.INTEGER),
            ("int", ColumnKind.INTEGER),
            ("REAL", ColumnKind.REAL),
            ("double", ColumnKind.REAL),
            ("TEXT", ColumnKind.TEXT),
            ("BLOB", ColumnKind.BLOB),
            ("boolean", ColumnKind.BOOLEAN),
            ("TIMESTAMP", ColumnKind.TIMESTAMP),
            ("VARCHAR", ColumnKind.VARCHAR),
            ("CLOB", ColumnKind.CUSTOM),
        ],
    )
    def test_given_declared_type_when_parsed_then_kind(self, raw: str, kind: ColumnKind) -> None:
        """Known keywords map to their kind, anything else is custom."""
        column_type = ColumnType.parse(raw)
        assert column_type is not None
        assert column_type.kind is kind

    @pytest.mark.parametrize("raw", [None, ""])
    def test_given_no_declared_type_when_parsed_then_untyped(self, raw: str | None) -> None:
        """Untyped columns have no column type."""
        assert ColumnType.parse(raw) is None

    def test_given_varchar_width_when_parsed_then_keeps_width(self) -> None:
        """VARCHAR(n) keeps its width and renders back."""
        column_type = ColumnType.parse("varchar( 20 )")

        assert column_type == ColumnType(ColumnKind.VARCHAR, width=20)
        assert column_type.raw == "VARCHAR(20)"

    def test_given_custom_type_when_parsed_then_keeps_spelling(self) -> None:
        """Custom type names are kept as written."""
        column_type = ColumnType.parse("Uuid")
        assert column_type.raw == "Uuid"
        assert str(column_type) == "Uuid"

    @pytest.mark.parametrize(
        ("raw", "affinity"),
        [
            ("INTEGER", TypeAffinity.INTEGER),
            ("BIGINT", TypeAffinity.INTEGER),
            ("NCHAR(10)", TypeAffinity.TEXT),
            ("CLOB", TypeAffinity.TEXT),
            ("FLOAT", TypeAffinity.REAL),
            ("BOOLEAN", TypeAffinity.NUMERIC),
            ("MONEY", TypeAffinity.NUMERIC),
        ],
    )
    def test_given_type_when_affinity_then_follows_sqlite_rules(
        self, raw: str, affinity: TypeAffinity
    ) -> None:
        """Affinity follows SQLite's substring rules."""
        assert ColumnType.parse(raw).affinity is affinity


class TestLiteralValue:
    """Column default parsing."""

    @pytest.mark.parametrize(
        ("text", "kind", "value"),
        [
            ("NULL", LiteralKind.NULL, None),
            ("42", LiteralKind.INTEGER, 42),
            ("-7", LiteralKind.INTEGER, -7),
            ("1.5", LiteralKind.REAL, 1.5),
            ("1e3", LiteralKind.REAL, 1000.0),
            ("'it''s'", LiteralKind.TEXT, "it's"),
            ("X'CAFE'", LiteralKind.BLOB, b"\xca\xfe"),
            ("TRUE", LiteralKind.BOOLEAN, True),
            ("false", LiteralKind.BOOLEAN, False),
            ("CURRENT_TIMESTAMP", LiteralKind.EXPRESSION, "CURRENT_TIMESTAMP"),
        ],
    )
    def test_given_default_text_when_parsed_then_typed_value(
        self, text: str, kind: LiteralKind, value: object
    ) -> None:
        """Defaults are classified by their literal form."""
        literal = LiteralValue.parse(text)
        assert literal == LiteralValue(kind, value)

    def test_given_no_default_when_parsed_then_none(self) -> None:
        """A missing default is distinct from a NULL default."""
        assert LiteralValue.parse(None) is None
        assert LiteralValue.parse("NULL").is_null


class TestForeignKey:
    """Foreign key mapping rules."""

    def test_given_no_destination_column_when_created_then_defaults_to_source(self) -> None:
        """An unnamed destination column mirrors the source column."""
        fk = ForeignKey(0, "category_id", "categories")
        assert fk.destination_column == "category_id"
        assert fk.target_column == "category_id"

    @pytest.mark.parametrize(
        ("raw", "action"),
        [("CASCADE", ForeignKeyAction.CASCADE), ("set null", ForeignKeyAction.SET_NULL),
         (None, ForeignKeyAction.NO_ACTION), ("bogus", ForeignKeyAction.NO_ACTION)],
    )  # fmt: skip
    def test_given_action_text_when_parsed_then_action(
        self, raw: str | None, action: ForeignKeyAction
    ) -> None:
        """Unknown actions fall back to NO ACTION."""
        assert ForeignKeyAction.parse(raw) is action

    def test_given_match_text_when_parsed_then_match(self) -> None:
        """Match clauses parse case-insensitively."""
        assert ForeignKeyMatch.parse("simple") is ForeignKeyMatch.SIMPLE
        assert ForeignKeyMatch.parse(None) is ForeignKeyMatch.NONE


class TestSchema:
    """Schema helpers."""

    def test_given_storage_details_when_canonical_then_ignored(self) -> None:
        """Schemas differing only in storage details compare equal in canonical form."""
        # Given
        table = Table("t", "CREATE TABLE t (a)")
        sql = "CREATE INDEX i ON t(a)"
        first = Schema(version=3, tables=(table,), indices={"t": (Index("i", "t", 5, sql),)})
        second = Schema(version=9, tables=(table,), indices={"t": (Index("i", "t", 7, sql),)})

        # Then
        assert first != second
        assert first.canonical() == second.canonical()

    def test_given_schema_when_catalog_objects_then_tables_before_views(self) -> None:
        """Catalog objects list tables first, then views."""
        schema = Schema(tables=(Table("a"), Table("b")), views=(View("v"),))
        assert [o.name for o in schema.catalog_objects] == ["a", "b", "v"]
