"""YAML settings loader."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from pdpolicy.fetcher import DEFAULT_MAX_PAGES, PolicyCache, PolicyFetcher
from pdpolicy.transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, AuthenticatedGetter

DEFAULT_CONFIG_PATH = Path("pdpolicy.yaml")

_cache: dict[str, Settings] = {}


class ConfigError(Exception):
    """Exception raised for errors while loading the settings file."""


class Settings(BaseModel):
    domain: str = ""
    token: str = ""
    base_url: str = DEFAULT_BASE_URL
    cache_ttl_seconds: int = Field(default=3600, gt=0)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, gt=0)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)


def load_settings(config_path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load, validate and cache settings from a YAML file.

    A missing file yields the defaults.

    Args:
        config_path: Path to the YAML settings file.

    Returns:
        The validated settings.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    resolved = str(config_path.resolve())

    if resolved in _cache:
        return _cache[resolved]

    if not config_path.is_file():
        settings = Settings()
    else:
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid {config_path}: expected a mapping")

        try:
            settings = Settings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid {config_path}: {e}") from e

    _cache[resolved] = settings
    return settings


def clear_cache() -> None:
    """Clear the in-memory settings cache."""
    _cache.clear()


def build_fetcher(settings: Settings) -> PolicyFetcher:
    """Wire a ``PolicyFetcher`` with an httpx transport from ``settings``."""
    return PolicyFetcher(
        AuthenticatedGetter(timeout=settings.timeout_seconds),
        cache=PolicyCache(ttl=settings.cache_ttl),
        base_url=settings.base_url,
        max_pages=settings.max_pages,
    )
