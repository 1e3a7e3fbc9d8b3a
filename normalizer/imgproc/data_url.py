"""Conversions between ``data:`` URLs and raw bytes."""

from __future__ import annotations

import base64
import binascii
import re

from normalizer.imgproc.errors import DecodeError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$", re.DOTALL)


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Return ``(mime_type, bytes)`` for a base64 data URL."""

    match = _DATA_URL_RE.match(data_url.strip())
    if match is None:
        raise DecodeError("Expected a base64 encoded data URL.")

    mime_type = match.group("mime") or "application/octet-stream"
    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except (ValueError, binascii.Error) as exc:
        raise DecodeError("Data URL payload is not valid base64.") from exc
    return mime_type.lower(), payload


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode ``data`` as a base64 data URL."""

    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
