"""Bounded linear quality search that fits an image into a byte budget."""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Any

from normalizer.imgproc.codec import ImageCodec
from normalizer.imgproc.errors import NormalizationCancelled
from normalizer.imgproc.types import QUALITY_PRECISION, CompressionConfig, Dimensions, EncodedCandidate


def max_encode_attempts(config: CompressionConfig) -> int:
    """Upper bound on the number of encode passes for ``config``."""

    span = round((config.initial_quality - config.min_quality) / config.quality_step, QUALITY_PRECISION)
    return math.ceil(span) + 1


@dataclass(frozen=True, slots=True)
class EncodeLoopState:
    """Quality to try next and the most recent candidate."""

    quality: float
    candidate: EncodedCandidate | None = None

    def advance(self, candidate: EncodedCandidate, step: float) -> EncodeLoopState:
        return EncodeLoopState(
            quality=round(self.quality - step, QUALITY_PRECISION),
            candidate=candidate,
        )


class IterativeEncoder:
    """Re-encodes at decreasing quality until the size fits or the floor is hit."""

    def __init__(self, codec: ImageCodec, config: CompressionConfig) -> None:
        self._codec = codec
        self._config = config

    def _should_continue(self, state: EncodeLoopState, candidate: EncodedCandidate) -> bool:
        return candidate.size_bytes > self._config.max_size_bytes and state.quality > self._config.min_quality

    async def encode(
        self,
        image: Any,
        dimensions: Dimensions,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> EncodedCandidate:
        """Return the last candidate produced, even when it is still over budget."""

        config = self._config
        state = EncodeLoopState(quality=config.initial_quality)
        attempt = 0

        while True:
            attempt += 1
            raster = await self._codec.rasterize(image, dimensions)
            data = await self._codec.encode(raster, config.mime_type, state.quality)
            candidate = EncodedCandidate(data=data, quality=state.quality, attempt=attempt)
            state = state.advance(candidate, config.quality_step)

            if not self._should_continue(state, candidate):
                return candidate
            if cancel_event is not None and cancel_event.is_set():
                raise NormalizationCancelled(f"Cancelled after {attempt} encode attempt(s).")
