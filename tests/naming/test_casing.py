"""Tests for identifier case conversions."""

import pytest

from schemaforge.naming.casing import (
    lower_first,
    normalize_upper_runs,
    snake_case,
    to_camel_case,
    upper_first,
)

SAMPLES = [
    "",
    "_",
    "id",
    "ID",
    "first_name",
    "first__name",
    "_private_field",
    "trailing_",
    "personAddressID",
    "URLString",
    "already camel Case",
    "a_B_c",
    "x_1",
    "ÄpfelBirnen",
]


class TestCamelCase:
    """to_camel_case behavior."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("person_address", "personAddress"),
            ("person__address", "personAddress"),
            ("first name", "firstName"),
            ("_id", "_id"),
            ("__x_y", "__xY"),
            ("categoryId", "categoryId"),
            ("x_1", "x1"),
        ],
    )
    def test_given_identifier_when_camel_cased_then_expected(
        self, value: str, expected: str
    ) -> None:
        """Separators mark word boundaries and are dropped."""
        assert to_camel_case(value) == expected

    def test_given_upper_first_when_camel_cased_then_capitalized(self) -> None:
        """upper_first capitalizes the first word too."""
        assert to_camel_case("person_address", upper_first=True) == "PersonAddress"

    @pytest.mark.parametrize("value", SAMPLES)
    def test_given_any_string_when_camel_cased_twice_then_idempotent(self, value: str) -> None:
        """Camel casing is idempotent."""
        once = to_camel_case(value)
        assert to_camel_case(once) == once


class TestSnakeCase:
    """snake_case behavior."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("personAddressID", "person_address_id"),
            ("PersonAddress", "person_address"),
            ("ID", "id"),
            ("already_snake", "already_snake"),
        ],
    )
    def test_given_identifier_when_snake_cased_then_expected(
        self, value: str, expected: str
    ) -> None:
        """Capital runs stay together."""
        assert snake_case(value) == expected

    def test_given_lowercase_false_when_snake_cased_then_keeps_case(self) -> None:
        """Case is only folded on request."""
        assert snake_case("personAddress", lowercase=False) == "person_Address"

    @pytest.mark.parametrize("value", SAMPLES)
    def test_given_any_string_when_snake_cased_twice_then_idempotent(self, value: str) -> None:
        """Snake casing is idempotent."""
        once = snake_case(value)
        assert snake_case(once) == once


class TestUpperRuns:
    """normalize_upper_runs behavior."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("CategoryID", "CategoryId"),
            ("URLString", "UrlString"),
            ("ID", "Id"),
            ("personId", "personId"),
            ("", ""),
        ],
    )
    def test_given_capital_run_when_normalized_then_folded(
        self, value: str, expected: str
    ) -> None:
        """Runs of capitals become one capitalized word."""
        assert normalize_upper_runs(value) == expected

    @pytest.mark.parametrize("value", SAMPLES)
    def test_given_any_string_when_normalized_twice_then_idempotent(self, value: str) -> None:
        """Folding is idempotent."""
        once = normalize_upper_runs(value)
        assert normalize_upper_runs(once) == once


class TestFirstLetter:
    """upper_first and lower_first."""

    def test_given_strings_when_changing_first_letter_then_rest_untouched(self) -> None:
        """Only the first character changes."""
        assert upper_first("person") == "Person"
        assert lower_first("URL") == "uRL"
        assert upper_first("") == ""
