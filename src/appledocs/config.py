"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (APPLEDOCS__HTTP__TIMEOUT_SECONDS=30)
  2. appledocs.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
APPLE_DOC_CACHE_DIR is still honoured as the default cache directory for
installations that configured it before the nested settings existed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from appledocs import __version__

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("appledocs")
_LEGACY_CACHE_DIR_ENV = "APPLE_DOC_CACHE_DIR"


def _find_config_file() -> str | None:
    """Return the path of the first appledocs.yaml found, or None."""
    candidates = [
        Path("appledocs.yaml"),
        Path(platformdirs.user_config_dir("appledocs")) / "appledocs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


def _default_cache_directory() -> str:
    return os.environ.get(_LEGACY_CACHE_DIR_ENV) or _DEFAULT_CACHE_DIR


class CacheSettings(BaseModel):
    # Memory tier only; the on-disk cache never expires.
    ttl_seconds: float = Field(default=600.0, gt=0)
    max_size: int = Field(default=100, gt=0)
    directory: str = Field(default_factory=_default_cache_directory)


class HttpSettings(BaseModel):
    base_url: str = "https://developer.apple.com/tutorials/data"
    timeout_seconds: float = Field(default=15.0, gt=0)
    max_retry_attempts: int = Field(default=3, ge=1)
    base_retry_delay_seconds: float = Field(default=0.5, ge=0)
    user_agent: str = f"appledocs/{__version__}"
    max_concurrent_requests: int = Field(default=5, gt=0)


class SearchSettings(BaseModel):
    default_max_results: int = Field(default=20, gt=0)
    page_size: int = Field(default=25, gt=0)
    max_page_size: int = Field(default=100, gt=0)


class IndexingSettings(BaseModel):
    batch_size: int = Field(default=10, gt=0)
    min_symbol_count_threshold: int = Field(default=50, ge=0)
    file_read_timeout_seconds: float = Field(default=5.0, gt=0)


class UISettings(BaseModel):
    max_suggestions: int = Field(default=5, gt=0)
    max_categories: int = Field(default=5, gt=0)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: APPLEDOCS__CACHE__MAX_SIZE=200
        env_prefix="APPLEDOCS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    http: HttpSettings = HttpSettings()
    search: SearchSettings = SearchSettings()
    indexing: IndexingSettings = IndexingSettings()
    ui: UISettings = UISettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def cache_dir(self) -> Path:
        return Path(self.cache.directory).expanduser()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
