"""Image normalisation helpers."""

from __future__ import annotations

import asyncio
import logging

from normalizer.config.settings import get_settings
from normalizer.imgproc.codec import ImageCodec, PillowCodec
from normalizer.imgproc.decoder import Decoder
from normalizer.imgproc.encoder import IterativeEncoder
from normalizer.imgproc.planner import plan_dimensions
from normalizer.imgproc.result import build_output
from normalizer.imgproc.types import CompressionConfig, ImageResource, SourceImage

logger = logging.getLogger(__name__)


class ImageNormalizer:
    """Fits images into side and byte limits before they go downstream."""

    def __init__(self, config: CompressionConfig | None = None, codec: ImageCodec | None = None) -> None:
        self._config = config or get_settings().compression_config()
        self._codec = codec or PillowCodec()

    @property
    def config(self) -> CompressionConfig:
        return self._config

    async def normalize(
        self,
        source: SourceImage,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ImageResource:
        """
        Return the normalised image, or ``source`` itself when it is not an image.

        ``DecodeError`` and ``EncodeError`` propagate to the caller unchanged. An output
        that is still over ``max_size_bytes`` at the quality floor is returned as is.
        """

        decoder = Decoder(self._codec)
        if not decoder.accepts(source):
            return source

        config = self._config
        decoded = await decoder.decode(source)
        target = plan_dimensions(decoded.dimensions, config.max_short_side, config.max_long_side)
        logger.debug("Planned %s -> %s for %s", decoded.dimensions, target, source.name)

        encoder = IterativeEncoder(self._codec, config)
        candidate = await encoder.encode(decoded.image, target, cancel_event=cancel_event)
        logger.debug(
            "Encoded %s as %s: %d bytes at quality %.2f after %d attempt(s)",
            source.name,
            config.mime_type,
            candidate.size_bytes,
            candidate.quality,
            candidate.attempt,
        )

        return build_output(candidate, config.mime_type, source.name, target)
