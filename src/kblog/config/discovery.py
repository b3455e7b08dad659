"""Locating and reading ``kblog.toml``.

A project is the directory holding ``kblog.toml``; commands run anywhere
below it find the file by walking up, the way git finds ``.git``.
``KBLOG_CONFIG`` (or ``--config``) names a file explicitly instead.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from kblog.config.models import KblogConfig

CONFIG_FILENAME = "kblog.toml"
CONFIG_ENV_VAR = "KBLOG_CONFIG"


class ConfigFileError(ValueError):
    """A kblog.toml file exists but is not valid TOML."""


def find_config(start: Path | None = None) -> Path | None:
    """Return the ``kblog.toml`` governing *start* (default: cwd), or None.

    ``KBLOG_CONFIG`` wins when set; if it names a missing file there is no
    config at all rather than a fallback to walk-up.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(
    config_path: str | Path | None = None,
    project_root: Path | None = None,
) -> tuple[Path | None, Path]:
    """Pick the config file and project root for one invocation.

    An explicit *config_path* that does not exist means "no config file".
    Without an explicit *project_root*, the root is the config file's
    directory, or the cwd when there is no config.
    """
    if config_path:
        candidate = Path(config_path)
        toml_path = candidate if candidate.is_file() else None
    else:
        toml_path = find_config(project_root)

    if project_root is not None:
        return toml_path, project_root
    return toml_path, toml_path.parent if toml_path else Path.cwd()


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, turning syntax errors into :class:`ConfigFileError`."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigFileError(msg) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> KblogConfig:
    """Validated sections from *path* (or the file discovered from *cwd*).

    With no file anywhere, every section keeps its code default.
    """
    path = path or find_config(cwd)
    if path is None:
        return KblogConfig()
    return KblogConfig.model_validate(read_toml(path))
