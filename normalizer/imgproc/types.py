"""Value objects shared by the normalisation stages."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from normalizer.imgproc.errors import ConfigurationError

IMAGE_MIME_PREFIX = "image/"

# Qualities are snapped to this many decimals between encode passes, so a
# step below one unit at that precision would never move the quality.
QUALITY_PRECISION = 9
MIN_QUALITY_STEP = 10 ** -QUALITY_PRECISION


def is_image_mime(mime_type: str) -> bool:
    """Return ``True`` when the declared mime type denotes an image."""

    return mime_type.strip().lower().startswith(IMAGE_MIME_PREFIX)


@dataclass(frozen=True, slots=True)
class ImageResource:
    """Binary resource handle exchanged with callers."""

    data: bytes
    mime_type: str
    name: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class SourceImage(ImageResource):
    """Image received from the caller, owned by a single invocation."""


@dataclass(frozen=True, slots=True)
class OutputImage(ImageResource):
    """Normalised image returned to the caller."""

    width: int = 0
    height: int = 0
    quality: float = 0.0
    attempts: int = 0


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Pixel dimensions of a decoded or planned image."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Dimensions must be positive, got {self.width}x{self.height}.")

    @property
    def is_portrait(self) -> bool:
        return self.height >= self.width

    @property
    def short_side(self) -> int:
        return self.width if self.is_portrait else self.height

    @property
    def long_side(self) -> int:
        return self.height if self.is_portrait else self.width

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True, slots=True)
class EncodedCandidate:
    """Output of one encode attempt."""

    data: bytes
    quality: float
    attempt: int = 1

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Limits and quality search parameters for one normalisation run."""

    max_long_side: int = 1568
    max_short_side: int = 768
    max_size_bytes: int = 19 * 1024 * 1024
    mime_type: str = "image/webp"
    initial_quality: float = 0.92
    min_quality: float = 0.5
    quality_step: float = 0.07

    def __post_init__(self) -> None:
        if self.max_long_side <= 0 or self.max_short_side <= 0:
            raise ConfigurationError("Side limits must be positive.")
        if self.max_size_bytes <= 0:
            raise ConfigurationError("max_size_bytes must be positive.")
        if not is_image_mime(self.mime_type):
            raise ConfigurationError(f"Output mime type must be an image type, got {self.mime_type!r}.")
        if self.quality_step < MIN_QUALITY_STEP:
            raise ConfigurationError(f"quality_step must be at least {MIN_QUALITY_STEP:g}.")
        if not 0 < self.initial_quality <= 1:
            raise ConfigurationError("initial_quality must be within (0, 1].")
        if not 0 <= self.min_quality < self.initial_quality:
            raise ConfigurationError("min_quality must be non-negative and lower than initial_quality.")

    def with_overrides(self, **changes: Any) -> CompressionConfig:
        """Return a validated copy, ignoring overrides that are ``None``."""

        known = {field.name for field in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown compression options: {', '.join(sorted(unknown))}.")
        applied = {key: value for key, value in changes.items() if value is not None}
        if not applied:
            return self
        return replace(self, **applied)
