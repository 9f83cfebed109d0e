"""Tests for the settings loader."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
import yaml

from pdpolicy.config import ConfigError, build_fetcher, clear_cache, load_settings
from pdpolicy.transport import AuthenticatedGetter


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Clear the settings cache before and after every test."""
    clear_cache()
    yield
    clear_cache()


def test_missing_file_uses_defaults(tmp_path: Path):
    settings = load_settings(tmp_path / "absent.yaml")

    assert settings.cache_ttl == timedelta(hours=1)
    assert settings.max_pages == 1000
    assert settings.base_url == "https://{domain}.pagerduty.com"


def test_load_settings(tmp_path: Path):
    path = tmp_path / "pdpolicy.yaml"
    path.write_text(
        yaml.dump({"domain": "acme", "token": "t", "cache_ttl_seconds": 120})
    )

    settings = load_settings(path)

    assert settings.domain == "acme"
    assert settings.cache_ttl == timedelta(minutes=2)


def test_load_settings_caching(tmp_path: Path):
    """Loading the same path twice must return the exact same instance."""
    path = tmp_path / "pdpolicy.yaml"
    path.write_text(yaml.dump({"domain": "acme"}))

    assert load_settings(path) is load_settings(path)


def test_invalid_ttl(tmp_path: Path):
    path = tmp_path / "pdpolicy.yaml"
    path.write_text(yaml.dump({"cache_ttl_seconds": 0}))

    with pytest.raises(ConfigError, match="Invalid"):
        load_settings(path)


def test_invalid_yaml(tmp_path: Path):
    path = tmp_path / "pdpolicy.yaml"
    path.write_text("domain: [unclosed")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_settings(path)


def test_non_mapping(tmp_path: Path):
    path = tmp_path / "pdpolicy.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="expected a mapping"):
        load_settings(path)


def test_build_fetcher(tmp_path: Path):
    path = tmp_path / "pdpolicy.yaml"
    path.write_text(yaml.dump({"cache_ttl_seconds": 60, "max_pages": 5}))

    fetcher = build_fetcher(load_settings(path))

    assert isinstance(fetcher.getter, AuthenticatedGetter)
    assert fetcher.cache.ttl == timedelta(seconds=60)
    assert fetcher.max_pages == 5
    assert fetcher.is_cached() is False
    fetcher.getter.close()
