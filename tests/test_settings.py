"""Tests for environment driven configuration."""

from __future__ import annotations

import pytest

from normalizer.config.settings import DEFAULT_MAX_SIZE_BYTES, get_settings
from normalizer.imgproc.errors import ConfigurationError
from normalizer.imgproc.types import CompressionConfig


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_match_compression_config() -> None:
    config = get_settings().compression_config()

    assert config == CompressionConfig()
    assert config.max_size_bytes == DEFAULT_MAX_SIZE_BYTES == 19 * 1024 * 1024


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NORMALIZER_MAX_SHORT_SIDE", "512")
    monkeypatch.setenv("NORMALIZER_MAX_SIZE_BYTES", "1048576")
    monkeypatch.setenv("NORMALIZER_QUALITY_STEP", "0.05")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    config = settings.compression_config()

    assert settings.log_level == "debug"
    assert config.max_short_side == 512
    assert config.max_size_bytes == 1048576
    assert config.quality_step == 0.05


def test_zero_quality_step_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NORMALIZER_QUALITY_STEP", "0")

    with pytest.raises(ConfigurationError, match="quality_step"):
        get_settings().compression_config()


@pytest.mark.parametrize(
    "options",
    [
        {"min_quality": 0.92},
        {"initial_quality": 1.5},
        {"max_short_side": 0},
        {"max_size_bytes": -1},
        {"mime_type": "application/pdf"},
    ],
)
def test_invalid_compression_config(options: dict) -> None:
    with pytest.raises(ConfigurationError):
        CompressionConfig(**options)


def test_with_overrides_skips_none_and_validates() -> None:
    config = CompressionConfig()

    assert config.with_overrides(mime_type=None) is config
    assert config.with_overrides(mime_type="image/png").mime_type == "image/png"
    with pytest.raises(ConfigurationError):
        config.with_overrides(quality_step=-0.1)
    with pytest.raises(ConfigurationError, match="Unknown"):
        config.with_overrides(colour_profile="srgb")
