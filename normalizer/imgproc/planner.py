"""Target size computation that keeps the aspect ratio."""

from __future__ import annotations

import math

from normalizer.imgproc.types import Dimensions


def _round_half_up(value: float) -> int:
    return max(1, math.floor(value + 0.5))


def compute_scale(original: Dimensions, max_short_side: int, max_long_side: int) -> float:
    """Return the scale factor needed to fit both side limits, never above 1."""

    if original.short_side <= max_short_side and original.long_side <= max_long_side:
        return 1.0
    return min(max_short_side / original.short_side, max_long_side / original.long_side)


def plan_dimensions(original: Dimensions, max_short_side: int, max_long_side: int) -> Dimensions:
    """Return the dimensions the image should be rasterised at."""

    scale = compute_scale(original, max_short_side, max_long_side)
    if scale == 1.0:
        return original
    return Dimensions(
        width=_round_half_up(original.width * scale),
        height=_round_half_up(original.height * scale),
    )
