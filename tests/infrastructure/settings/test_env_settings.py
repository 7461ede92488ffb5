"""Tests for environment-driven configuration."""

import os

import pytest

from claim_overlay.domain.models.settings import ExtractionMode
from claim_overlay.infrastructure.settings.env_settings import config_from_env, load_config


def test_defaults():
    """An empty environment gives the mock provider and default settings."""
    config = config_from_env({})

    assert config.provider == "mock"
    assert config.api.base_url == "http://localhost:3001"
    assert config.extension.enabled
    assert config.extension.highlight_aggressiveness == ExtractionMode.MODERATE
    assert config.log_level == "INFO"


def test_overrides():
    config = config_from_env({
        "CLAIM_OVERLAY_PROVIDER": "API",
        "CLAIM_OVERLAY_BACKEND_URL": "https://verify.example.com/",
        "CLAIM_OVERLAY_TIMEOUT": "12.5",
        "CLAIM_OVERLAY_CACHE_TTL": "60",
        "CLAIM_OVERLAY_MODE": "aggressive",
        "CLAIM_OVERLAY_SHOW_TOOLTIPS": "off",
        "CLAIM_OVERLAY_ENABLED_DOMAINS": "News.Example.com, blog.example.org",
        "CLAIM_OVERLAY_DISABLED_DOMAINS": "ads.example.com",
        "CLAIM_OVERLAY_LOG_LEVEL": "debug",
    })

    assert config.provider == "api"
    assert config.api.base_url == "https://verify.example.com"
    assert config.api.timeout == 12.5
    assert config.api.cache_ttl == 60
    assert config.extension.highlight_aggressiveness == ExtractionMode.AGGRESSIVE
    assert not config.extension.show_tooltips
    assert config.extension.enabled_domains == ["news.example.com", "blog.example.org"]
    assert config.extension.disabled_domains == ["ads.example.com"]
    assert config.log_level == "DEBUG"


def test_domain_lists_drive_host_decision():
    """Allow and deny lists decide which hosts the overlay runs on."""
    extension = config_from_env({
        "CLAIM_OVERLAY_ENABLED_DOMAINS": "news.example.com",
        "CLAIM_OVERLAY_DISABLED_DOMAINS": "blocked.example.com",
    }).extension

    assert extension.allows_host("news.example.com")
    assert not extension.allows_host("other.example.com")
    assert not extension.allows_host("blocked.example.com")


@pytest.mark.parametrize(
    "env",
    [
        {"CLAIM_OVERLAY_ENABLED": "maybe"},
        {"CLAIM_OVERLAY_MODE": "extreme"},
        {"CLAIM_OVERLAY_TIMEOUT": "soon"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        config_from_env(env)


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    """Variables from a .env file are picked up."""
    monkeypatch.delenv("CLAIM_OVERLAY_PROVIDER", raising=False)
    monkeypatch.delenv("CLAIM_OVERLAY_MODE", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("CLAIM_OVERLAY_PROVIDER=api\nCLAIM_OVERLAY_MODE=minimal\n", encoding="utf-8")

    try:
        config = load_config(str(env_file))
    finally:
        os.environ.pop("CLAIM_OVERLAY_PROVIDER", None)
        os.environ.pop("CLAIM_OVERLAY_MODE", None)

    assert config.provider == "api"
    assert config.extension.highlight_aggressiveness == ExtractionMode.MINIMAL
