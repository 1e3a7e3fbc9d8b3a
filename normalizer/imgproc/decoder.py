"""First pipeline stage: turn a source resource into pixels."""

from __future__ import annotations

from normalizer.imgproc.codec import DecodedImage, ImageCodec
from normalizer.imgproc.types import SourceImage, is_image_mime


class Decoder:
    """Decodes image sources and recognises inputs that must pass through."""

    def __init__(self, codec: ImageCodec) -> None:
        self._codec = codec

    @staticmethod
    def accepts(source: SourceImage) -> bool:
        return is_image_mime(source.mime_type)

    async def decode(self, source: SourceImage) -> DecodedImage:
        """Decode ``source`` bytes; malformed input raises ``DecodeError``."""

        return await self._codec.decode(source.data)
