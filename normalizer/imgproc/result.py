"""Construction of the output resource."""

from __future__ import annotations

import re

from normalizer.imgproc.types import Dimensions, EncodedCandidate, OutputImage

CANONICAL_EXTENSIONS = {
    "image/webp": ".webp",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/avif": ".avif",
    "image/svg+xml": ".svg",
    "image/x-icon": ".ico",
    "image/vnd.microsoft.icon": ".ico",
}

_TRAILING_EXTENSION_RE = re.compile(r"\.[^.]*$")


def extension_for_mime(mime_type: str) -> str:
    """Return the canonical file extension, dot included, for ``mime_type``."""

    normalised = mime_type.strip().lower()
    if normalised in CANONICAL_EXTENSIONS:
        return CANONICAL_EXTENSIONS[normalised]

    subtype = normalised.split("/", 1)[-1].split("+", 1)[0]
    if subtype.startswith("x-"):
        subtype = subtype[2:]
    return f".{subtype}"


def rename_with_extension(name: str, extension: str) -> str:
    """Replace the trailing extension of ``name`` or append one."""

    if _TRAILING_EXTENSION_RE.search(name):
        return _TRAILING_EXTENSION_RE.sub(extension, name)
    return f"{name}{extension}"


def build_output(
    candidate: EncodedCandidate,
    mime_type: str,
    original_name: str,
    dimensions: Dimensions,
) -> OutputImage:
    """Wrap the final candidate into an :class:`OutputImage`."""

    return OutputImage(
        data=candidate.data,
        mime_type=mime_type,
        name=rename_with_extension(original_name, extension_for_mime(mime_type)),
        width=dimensions.width,
        height=dimensions.height,
        quality=candidate.quality,
        attempts=candidate.attempt,
    )
