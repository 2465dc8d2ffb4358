"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from schemaforge.config.models import (
    CommentStyle,
    LogOutputConfig,
    NamingOptions,
    RenderStyle,
    SchemaForgeConfig,
)


class TestLoggingModels:
    """Logging configuration validation."""

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_given_log_level_when_validated_then_accepts_standard_levels(self, level: str) -> None:
        """Log level accepts standard Python logging levels."""
        config = SchemaForgeConfig(logging={"level": level})
        assert config.logging.level == level

    def test_given_invalid_log_level_when_validated_then_rejects(self) -> None:
        """Invalid log level is rejected."""
        with pytest.raises(ValidationError):
            SchemaForgeConfig(logging={"level": "LOUD"})

    def test_given_relative_file_destination_when_validated_then_rejects(self) -> None:
        """File destinations must be absolute."""
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/out.log")


class TestNamingOptions:
    """Naming option defaults and validation."""

    def test_given_defaults_when_created_then_match_documented_behavior(self) -> None:
        """Defaults singularize records and detect keys."""
        options = NamingOptions()

        assert options.singularize_record_names
        assert options.autodetect_primary_keys
        assert options.autodetect_foreign_keys
        assert options.generate_reverse_relationships
        assert options.force_primary_key_name is None
        assert not options.strip_core_data_prefix
        assert "id" in options.primary_key_names

    def test_given_empty_key_name_when_validated_then_rejects(self) -> None:
        """Empty key names would match every column."""
        with pytest.raises(ValidationError):
            NamingOptions(primary_key_names=["id", ""])

    def test_given_empty_type_tag_when_validated_then_rejects(self) -> None:
        """Type map entries need both a SQL type and a tag."""
        with pytest.raises(ValidationError):
            NamingOptions(type_map={"uuid": ""})

    def test_given_options_when_mutated_then_rejects(self) -> None:
        """Options are frozen for the duration of a run."""
        options = NamingOptions()
        with pytest.raises(ValidationError):
            options.singularize_record_names = False  # type: ignore[misc]


class TestRenderStyle:
    """Render style validation."""

    @pytest.mark.parametrize(("value", "expected"), [(4, "    "), ("2", "  "), ("\t", "\t")])
    def test_given_indent_when_validated_then_normalizes_to_string(
        self, value: object, expected: str
    ) -> None:
        """Numeric indents become that many spaces."""
        assert RenderStyle(indent=value).indent == expected

    def test_given_negative_indent_when_validated_then_rejects(self) -> None:
        """Negative indents are invalid."""
        with pytest.raises(ValidationError):
            RenderStyle(indent=-1)

    def test_given_zero_line_length_when_validated_then_rejects(self) -> None:
        """Line length must be positive."""
        with pytest.raises(ValidationError):
            RenderStyle(line_length=0)

    @pytest.mark.parametrize("value", ["none", "no", False, None])
    def test_given_disabled_comment_style_when_validated_then_none(self, value: object) -> None:
        """Several spellings switch comments off."""
        assert RenderStyle(type_comment_style=value).type_comment_style is CommentStyle.NONE

    def test_given_marker_when_validated_then_parses_comment_style(self) -> None:
        """Comment styles are given by their marker."""
        style = RenderStyle(function_comment_style="///")
        assert style.function_comment_style is CommentStyle.TRIPLE_DASHES
