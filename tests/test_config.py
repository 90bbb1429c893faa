"""Tests for environment-driven configuration."""

import pytest

from floormap import FloorMapClient
from floormap.config import DEFAULT_TIMEOUT, FloorMapConfig
from floormap.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    """Remove floormap settings from the environment."""
    monkeypatch.delenv("FLOORMAP_BASE_URL", raising=False)
    monkeypatch.delenv("FLOORMAP_TIMEOUT", raising=False)
    return monkeypatch


def test_missing_base_url(clean_env):
    """Test that a client cannot be built without a server URL."""
    with pytest.raises(ConfigurationError):
        FloorMapConfig.from_env()
    with pytest.raises(ConfigurationError):
        FloorMapClient()


def test_from_arguments(clean_env):
    """Test explicit settings."""
    config = FloorMapConfig.from_env(base_url="http://map.local/", timeout=5)

    assert config.base_url == "http://map.local"
    assert config.timeout == 5


def test_from_environment(clean_env):
    """Test settings read from environment variables."""
    clean_env.setenv("FLOORMAP_BASE_URL", "http://env.local")
    clean_env.setenv("FLOORMAP_TIMEOUT", "12.5")

    config = FloorMapConfig.from_env()

    assert config.base_url == "http://env.local"
    assert config.timeout == 12.5


def test_default_timeout(clean_env):
    """Test the default request timeout."""
    assert FloorMapConfig.from_env(base_url="http://map.local").timeout == DEFAULT_TIMEOUT == 30


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_invalid_timeout(clean_env, raw):
    """Test rejecting unusable timeouts."""
    clean_env.setenv("FLOORMAP_TIMEOUT", raw)

    with pytest.raises(ConfigurationError):
        FloorMapConfig.from_env(base_url="http://map.local")
