"""Resize and recompress images to fit side and byte limits."""

from .codec import DecodedImage, ImageCodec, PillowCodec
from .data_url import parse_data_url, to_data_url
from .errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    NormalizationCancelled,
    NormalizationError,
)
from .normalize import ImageNormalizer
from .types import (
    CompressionConfig,
    Dimensions,
    EncodedCandidate,
    ImageResource,
    OutputImage,
    SourceImage,
)

__all__ = [
    "CompressionConfig",
    "ConfigurationError",
    "DecodeError",
    "DecodedImage",
    "Dimensions",
    "EncodeError",
    "EncodedCandidate",
    "ImageCodec",
    "ImageNormalizer",
    "ImageResource",
    "NormalizationCancelled",
    "NormalizationError",
    "OutputImage",
    "PillowCodec",
    "SourceImage",
    "parse_data_url",
    "to_data_url",
]
