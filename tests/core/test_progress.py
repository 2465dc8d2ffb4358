"""Tests for CLI status output helpers."""

import pytest

from schemaforge.core.progress import (
    count_noun,
    entity_table,
    is_console_suppressed,
    report_diagnostics,
    suppress_console_logs,
)
from schemaforge.naming.fancifier import fancify
from schemaforge.naming.models import Diagnostic, DiagnosticCode, Severity
from schemaforge.schema.models import Column, ColumnType, ForeignKey, Schema, Table


class TestCountNoun:
    """Pluralized counts."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 records"), (1, "1 record"), (2, "2 records")],
    )
    def test_given_count_when_formatted_then_pluralizes(self, count: int, expected: str) -> None:
        """Counts other than one take the plural noun."""
        assert count_noun(count, "record") == expected

    def test_given_explicit_plural_when_formatted_then_uses_it(self) -> None:
        """An explicit plural replaces the default -s."""
        assert count_noun(3, "index", "indices") == "3 indices"


class TestSuppressConsoleLogs:
    """Console suppression flag."""

    def test_given_context_when_entered_then_suppressed_until_exit(self) -> None:
        """Suppression is active only inside the block."""
        assert not is_console_suppressed()
        with suppress_console_logs():
            assert is_console_suppressed()
        assert not is_console_suppressed()


class TestEntityTable:
    """Entity summary table."""

    def test_given_database_when_tabulated_then_one_row_per_entity(self) -> None:
        """Rows follow the entity order of the database."""
        # Given
        integer = ColumnType.parse("INTEGER")
        schema = Schema(
            tables=(
                Table("people", columns=(Column(0, "id", integer, is_primary_key=True),)),
                Table(
                    "addresses",
                    columns=(
                        Column(0, "id", integer, is_primary_key=True),
                        Column(1, "person_id", integer),
                    ),
                    foreign_keys=(ForeignKey(0, "person_id", "people", "id"),),
                ),
            )
        )
        database = fancify(schema, name="contacts.db")

        # When
        table = entity_table(database)

        # Then
        assert table.title == "Contacts"
        assert table.row_count == 2
        assert list(table.columns[2].cells) == ["Person", "Address"]


class TestReportDiagnostics:
    """Diagnostic status lines."""

    def test_given_diagnostics_when_reported_then_printed_and_counted(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Every diagnostic is printed literally; informational ones are not counted."""
        # Given
        diagnostics = [
            Diagnostic(DiagnosticCode.AMBIGUOUS_FOREIGN_KEY, "Column [owner] is ambiguous"),
            Diagnostic(
                DiagnosticCode.GENERIC_SINGULARIZATION, "Singular guessed", Severity.INFO
            ),
        ]

        # When
        count = report_diagnostics(diagnostics)

        # Then
        assert count == 1
        err = capsys.readouterr().err
        assert "Column [owner] is ambiguous" in err
        assert "Singular guessed" in err
