"""Decode, rasterise and encode capabilities backed by Pillow."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Protocol

from PIL import Image, UnidentifiedImageError

from normalizer.imgproc.errors import DecodeError, EncodeError
from normalizer.imgproc.types import Dimensions

PILLOW_FORMATS = {
    "image/webp": "WEBP",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
}

# Formats Pillow writes without an alpha channel.
_OPAQUE_FORMATS = {"JPEG", "BMP"}


@dataclass(slots=True)
class DecodedImage:
    """Pixel-addressable image together with its dimensions."""

    image: Any
    dimensions: Dimensions


class ImageCodec(Protocol):
    """Capability used by the pipeline to turn bytes into pixels and back."""

    async def decode(self, data: bytes) -> DecodedImage:
        ...

    async def rasterize(self, image: Any, dimensions: Dimensions) -> Any:
        ...

    async def encode(self, raster: Any, mime_type: str, quality: float) -> bytes:
        ...


def pillow_format_for(mime_type: str) -> str:
    """Return the Pillow format name for ``mime_type`` or raise ``EncodeError``."""

    try:
        return PILLOW_FORMATS[mime_type.strip().lower()]
    except KeyError as exc:
        raise EncodeError(f"Unsupported output format: {mime_type}") from exc


def to_pillow_quality(quality: float) -> int:
    """Map a 0..1 quality to Pillow's 1..100 scale."""

    return min(100, max(1, round(quality * 100)))


class PillowCodec:
    """Runs Pillow operations in worker threads so the event loop stays free."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self._resample = resample

    async def decode(self, data: bytes) -> DecodedImage:
        return await asyncio.to_thread(self._decode, data)

    async def rasterize(self, image: Image.Image, dimensions: Dimensions) -> Image.Image:
        return await asyncio.to_thread(self._rasterize, image, dimensions)

    async def encode(self, raster: Image.Image, mime_type: str, quality: float) -> bytes:
        image_format = pillow_format_for(mime_type)
        return await asyncio.to_thread(self._encode, raster, image_format, quality)

    @staticmethod
    def _decode(data: bytes) -> DecodedImage:
        if not data:
            raise DecodeError("Image payload is empty.")
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Unsupported or unsafe image data: {exc}") from exc
        except (EOFError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(f"Malformed image data: {exc}") from exc

        width, height = image.size
        if width <= 0 or height <= 0:
            raise DecodeError(f"Decoded image has invalid size {width}x{height}.")
        return DecodedImage(image=image, dimensions=Dimensions(width=width, height=height))

    def _rasterize(self, image: Image.Image, dimensions: Dimensions) -> Image.Image:
        has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
        target_mode = "RGBA" if has_alpha else "RGB"
        converted = image if image.mode == target_mode else image.convert(target_mode)

        size = (dimensions.width, dimensions.height)
        if converted.size == size:
            return converted.copy()
        return converted.resize(size, self._resample)

    @staticmethod
    def _encode(raster: Image.Image, image_format: str, quality: float) -> bytes:
        if image_format in _OPAQUE_FORMATS and raster.mode != "RGB":
            raster = raster.convert("RGB")

        buffer = BytesIO()
        try:
            raster.save(buffer, format=image_format, quality=to_pillow_quality(quality))
        except (KeyError, OSError, ValueError) as exc:
            raise EncodeError(f"Failed to encode image as {image_format}: {exc}") from exc
        return buffer.getvalue()
