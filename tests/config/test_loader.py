"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest

from schemaforge.config import loader
from schemaforge.config.loader import load_config
from schemaforge.config.models import CommentStyle
from schemaforge.core.errors import ConfigError, ErrorCode


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory without a global config."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", tmp_path / "global.yaml")
    return workdir


class TestLoadConfig:
    """Config precedence tests."""

    def test_given_no_files_when_loaded_then_defaults(self) -> None:
        """Without any source the built-in defaults apply."""
        config = load_config()

        assert config.logging.level == "WARNING"
        assert config.render.indent == "  "
        assert config.output.imports == ["Foundation"]

    def test_given_project_yaml_when_loaded_then_overrides_defaults(
        self, isolated_config: Path
    ) -> None:
        """schemaforge.yaml in the working directory is picked up."""
        # Given
        (isolated_config / "schemaforge.yaml").write_text(
            "naming:\n"
            "  force_primary_key_name: id\n"
            "render:\n"
            "  indent: 4\n"
            "  type_comment_style: none\n"
        )

        # When
        config = load_config()

        # Then
        assert config.naming.force_primary_key_name == "id"
        assert config.render.indent == "    "
        assert config.render.type_comment_style is CommentStyle.NONE

    def test_given_global_and_project_yaml_when_loaded_then_project_wins(
        self, tmp_path: Path, isolated_config: Path
    ) -> None:
        """Project settings override global ones, key by key."""
        # Given
        (tmp_path / "global.yaml").write_text(
            "render:\n  line_length: 120\n  indent: 3\n"
        )
        (isolated_config / "schemaforge.yaml").write_text("render:\n  indent: 2\n")

        # When
        config = load_config()

        # Then
        assert config.render.line_length == 120
        assert config.render.indent == "  "

    def test_given_env_var_when_loaded_then_overrides_yaml(self, isolated_config: Path) -> None:
        """Environment variables beat YAML files."""
        # Given
        (isolated_config / "schemaforge.yaml").write_text("logging:\n  level: INFO\n")
        os.environ["SCHEMAFORGE__LOGGING__LEVEL"] = "DEBUG"

        # When
        config = load_config()

        # Then
        assert config.logging.level == "DEBUG"

    def test_given_kwargs_when_loaded_then_highest_precedence(self) -> None:
        """Direct keyword arguments win over everything."""
        os.environ["SCHEMAFORGE__OUTPUT__PUBLIC"] = "true"

        config = load_config(output={"public": False})

        assert config.output.public is False

    def test_given_explicit_path_when_loaded_then_used(self, tmp_path: Path) -> None:
        """An explicit config path replaces the project file lookup."""
        path = tmp_path / "custom.yaml"
        path.write_text("output:\n  header: null\n")

        config = load_config(path)

        assert config.output.header is None


class TestLoadConfigErrors:
    """Config error reporting."""

    def test_given_missing_explicit_path_when_loaded_then_file_not_found(
        self, tmp_path: Path
    ) -> None:
        """A named config file has to exist."""
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.yaml")
        assert exc_info.value.code is ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_given_malformed_yaml_when_loaded_then_parse_error(self, isolated_config: Path) -> None:
        """YAML syntax errors surface as parse errors."""
        (isolated_config / "schemaforge.yaml").write_text("naming: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_given_non_mapping_yaml_when_loaded_then_parse_error(
        self, isolated_config: Path
    ) -> None:
        """The top level of a config file must be a mapping."""
        (isolated_config / "schemaforge.yaml").write_text("- one\n- two\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_given_invalid_value_when_loaded_then_names_field(self, isolated_config: Path) -> None:
        """Validation errors name the offending field."""
        (isolated_config / "schemaforge.yaml").write_text("render:\n  line_length: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert "render" in exc_info.value.details["field"]

    def test_given_several_invalid_values_when_loaded_then_counts_the_rest(
        self, isolated_config: Path
    ) -> None:
        """The first failing field is named and the remaining failures counted."""
        (isolated_config / "schemaforge.yaml").write_text(
            "render:\n  line_length: nope\n  never_inline: maybe\n"
        )

        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert "(and 1 more)" in exc_info.value.message
