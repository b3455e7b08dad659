"""KblogSettings: one frozen object for CLI flags, environment and kblog.toml.

Sources, strongest first:

* keyword arguments (the CLI passes its flags here),
* ``KBLOG_*`` environment variables, ``__`` between nested keys
  (``KBLOG_STORE__ENVIRONMENT=prod``),
* the ``kblog.toml`` chosen by :func:`~kblog.config.discovery.resolve_config`,
* defaults baked into the section models.

Nested sections merge key by key, so an env var overrides a single TOML
key without discarding the rest of that section.
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kblog.config.discovery import read_toml, resolve_config
from kblog.config.models import CacheConfig, PaginationConfig, PluginsConfig, StoreConfig

# The TOML file for the settings object under construction. pydantic-settings
# builds sources in a classmethod, so the path cannot travel as an argument.
_active_toml: ContextVar[Path | None] = ContextVar("kblog_active_toml", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by a parsed ``kblog.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = read_toml(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class KblogSettings(BaseSettings):
    """Settings for one kblog process.

    Attributes:
        project_root: Directory the data directory hangs off.
        config_path: The ``kblog.toml`` in effect, or None.
        user: Id of the user CLI calls act as; None calls anonymously.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KBLOG_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False
    user: str | None = None

    store: StoreConfig = Field(default_factory=StoreConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @property
    def data_root(self) -> Path:
        """``<project_root>/<data_dir>/<environment>``."""
        return self.store.data_root(self.project_root)

    def collection_path(self, name: str) -> Path:
        """SQLite file backing the *name* collection."""
        return self.data_root / f"{name}.db"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _active_toml.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> KblogSettings:
        """Build settings for a CLI invocation (tests call it the same way).

        Raises:
            ConfigFileError: The chosen ``kblog.toml`` is not valid TOML.
        """
        toml_path, root = resolve_config(config_path, project_root)
        token = _active_toml.set(toml_path)
        try:
            return cls(project_root=root, config_path=toml_path, **cli_flags)
        finally:
            _active_toml.reset(token)
