"""Configuration loading with pydantic-settings.

Sources, highest precedence first:

1. Keyword overrides passed to ``load_config``
2. Environment variables (``SCHEMAFORGE__RENDER__INDENT=4``)
3. Project config: ``schemaforge.yaml`` in the working directory, or the
   file given with ``--config``
4. Global config: ``~/.config/schemaforge/config.yaml``
5. Built-in defaults

YAML files are merged section by section, so a project file that only sets
``render.indent`` keeps the global ``render.line_length``.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from schemaforge.config.models import (
    LoggingConfig,
    NamingOptions,
    OutputConfig,
    RenderStyle,
    SchemaForgeConfig,
)
from schemaforge.core.errors import ConfigError

logger = structlog.get_logger()

GLOBAL_CONFIG_PATH = Path("~/.config/schemaforge/config.yaml").expanduser()
PROJECT_CONFIG_NAME = "schemaforge.yaml"


def _read_sections(path: Path) -> dict[str, Any]:
    """Top-level mapping of a config file; a missing file is empty."""
    if not path.is_file():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    logger.debug("config_file_read", path=str(path), sections=sorted(data))
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


class _YamlSource(PydanticBaseSettingsSource):
    """Serves the merged YAML sections to pydantic-settings."""

    def __init__(self, settings_cls: type[BaseSettings], sections: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._sections = sections

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._sections.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return self._sections


class _Settings(BaseSettings):
    """Section layout shared by every load. Env: ``SCHEMAFORGE__<SECTION>__<KEY>``."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAFORGE__",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    logging: LoggingConfig = LoggingConfig()
    naming: NamingOptions = NamingOptions()
    render: RenderStyle = RenderStyle()
    output: OutputConfig = OutputConfig()


def _settings_with(sections: dict[str, Any]) -> type[_Settings]:
    """Subclass of ``_Settings`` reading ``sections`` below env vars.

    A class per load keeps concurrent loads from sharing file contents.
    """

    class Settings(_Settings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (init_settings, env_settings, _YamlSource(settings_cls, sections))

    return Settings


def _invalid(error: ValidationError) -> ConfigError:
    problems = error.errors()
    first = problems[0]
    field = ".".join(str(part) for part in first["loc"])
    reason = first["msg"]
    if len(problems) > 1:
        reason += f" (and {len(problems) - 1} more)"
    return ConfigError.invalid_value(field, first.get("input"), reason)


def load_config(config_path: Path | None = None, **kwargs: Any) -> SchemaForgeConfig:
    """Resolve the configuration of a run.

    Args:
        config_path: Explicit project config file. Defaults to
            ``schemaforge.yaml`` in the working directory, if present.
        **kwargs: Section overrides, e.g. ``render=RenderStyle(indent="\\t")``.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: The explicit file is missing, a file is not valid YAML,
            or a value fails validation.
    """
    if config_path is not None and not config_path.is_file():
        raise ConfigError.file_not_found(str(config_path))
    project_path = config_path or Path.cwd() / PROJECT_CONFIG_NAME

    sections = _merge(_read_sections(GLOBAL_CONFIG_PATH), _read_sections(project_path))
    try:
        settings = _settings_with(sections)(**kwargs)
    except ValidationError as e:
        raise _invalid(e) from e

    return SchemaForgeConfig.model_validate(settings.model_dump())
