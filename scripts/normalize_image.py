"""Normalise an image file on disk to the configured size limits."""

from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
from pathlib import Path

from normalizer.config.settings import get_settings
from normalizer.imgproc import ImageNormalizer, ImageResource, OutputImage, SourceImage
from normalizer.monitoring.logging import configure_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("source", type=Path, help="Image file to normalise.")
    parser.add_argument("-o", "--output", type=Path, help="Destination path (defaults to the renamed source).")
    parser.add_argument("--mime-type", help="Output mime type, e.g. image/jpeg.")
    parser.add_argument("--max-size-bytes", type=int, help="Byte budget for the encoded image.")
    parser.add_argument("--max-long-side", type=int)
    parser.add_argument("--max-short-side", type=int)
    return parser.parse_args(argv)


def _format_result(source: SourceImage, result: ImageResource) -> str:
    if result is source:
        return f"{source.name}: not an image ({source.mime_type}), left unchanged"
    summary = f"{source.name} -> {result.name}: {source.size_bytes} -> {result.size_bytes} bytes"
    if isinstance(result, OutputImage):
        summary += f", {result.width}x{result.height}, quality {result.quality:.2f}, {result.attempts} attempt(s)"
    return summary


async def normalize_file(args: argparse.Namespace) -> str:
    config = get_settings().compression_config().with_overrides(
        mime_type=args.mime_type,
        max_size_bytes=args.max_size_bytes,
        max_long_side=args.max_long_side,
        max_short_side=args.max_short_side,
    )
    data = await asyncio.to_thread(args.source.read_bytes)
    mime_type, _ = mimetypes.guess_type(args.source.name)
    source = SourceImage(data=data, mime_type=mime_type or "application/octet-stream", name=args.source.name)

    result = await ImageNormalizer(config=config).normalize(source)
    if result is not source:
        output = args.output or args.source.with_name(result.name)
        if args.output is None and output == args.source:
            output = output.with_name(f"{output.stem}.normalized{output.suffix}")
        await asyncio.to_thread(output.write_bytes, result.data)
        logger.info("Wrote %s", output)
    return _format_result(source, result)


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    args = _parse_args(argv)
    print(asyncio.run(normalize_file(args)))


if __name__ == "__main__":
    main()
