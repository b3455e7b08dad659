"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, kblog.toml only contains overrides.
A fresh project needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

# --- kblog.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    data_dir: str = "db"
    environment: Literal["dev", "prod"] = "dev"

    def data_root(self, project_root: Path) -> Path:
        """Directory holding one ``<collection>.db`` file per service."""
        return project_root / self.data_dir / self.environment


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class PaginationConfig(BaseModel):
    """[pagination] section."""

    model_config = {"frozen": True}

    default_limit: int | None = None
    max_limit: int | None = 100


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    sync_events: bool = True
    max_retries: int = 3


class KblogConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
