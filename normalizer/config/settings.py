"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from normalizer.imgproc.types import CompressionConfig

DEFAULT_MAX_SIZE_BYTES = 19 * 1024 * 1024
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    max_long_side: int = 1568
    max_short_side: int = 768
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES
    mime_type: str = "image/webp"
    initial_quality: float = 0.92
    min_quality: float = 0.5
    quality_step: float = 0.07

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def compression_config(self) -> CompressionConfig:
        """Build a validated compression config from the configured limits."""

        from normalizer.imgproc.types import CompressionConfig

        return CompressionConfig(
            max_long_side=self.max_long_side,
            max_short_side=self.max_short_side,
            max_size_bytes=self.max_size_bytes,
            mime_type=self.mime_type,
            initial_quality=self.initial_quality,
            min_quality=self.min_quality,
            quality_step=self.quality_step,
        )


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        max_long_side=int(os.getenv("NORMALIZER_MAX_LONG_SIDE", "1568")),
        max_short_side=int(os.getenv("NORMALIZER_MAX_SHORT_SIDE", "768")),
        max_size_bytes=int(os.getenv("NORMALIZER_MAX_SIZE_BYTES", str(DEFAULT_MAX_SIZE_BYTES))),
        mime_type=os.getenv("NORMALIZER_MIME_TYPE", "image/webp"),
        initial_quality=float(os.getenv("NORMALIZER_INITIAL_QUALITY", "0.92")),
        min_quality=float(os.getenv("NORMALIZER_MIN_QUALITY", "0.5")),
        quality_step=float(os.getenv("NORMALIZER_QUALITY_STEP", "0.07")),
        max_upload_bytes=int(os.getenv("NORMALIZER_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
