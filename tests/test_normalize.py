"""End-to-end tests for the image normaliser."""

from __future__ import annotations

import asyncio
from io import BytesIO

import pytest
import pytest_mock
from PIL import Image

from normalizer.config.settings import get_settings
from normalizer.imgproc import (
    CompressionConfig,
    DecodeError,
    EncodeError,
    ImageNormalizer,
    OutputImage,
    PillowCodec,
    SourceImage,
)


def _png_source(width: int, height: int, name: str = "photo.png", mode: str = "RGB") -> SourceImage:
    buffer = BytesIO()
    Image.new(mode, (width, height), color=(200, 120, 40)).save(buffer, format="PNG")
    return SourceImage(data=buffer.getvalue(), mime_type="image/png", name=name)


@pytest.mark.asyncio
async def test_large_landscape_is_downscaled_to_webp() -> None:
    result = await ImageNormalizer(CompressionConfig()).normalize(_png_source(3000, 2000))

    assert isinstance(result, OutputImage)
    assert (result.width, result.height) == (1152, 768)
    assert result.mime_type == "image/webp"
    assert result.name == "photo.webp"
    with Image.open(BytesIO(result.data)) as encoded:
        assert encoded.format == "WEBP"
        assert encoded.size == (1152, 768)


@pytest.mark.asyncio
async def test_small_image_keeps_size_with_single_attempt() -> None:
    result = await ImageNormalizer(CompressionConfig()).normalize(_png_source(500, 400))

    assert isinstance(result, OutputImage)
    assert (result.width, result.height) == (500, 400)
    assert result.attempts == 1
    assert result.quality == pytest.approx(0.92)


@pytest.mark.asyncio
async def test_unreachable_budget_returns_floor_candidate() -> None:
    config = CompressionConfig(max_size_bytes=1)

    result = await ImageNormalizer(config).normalize(_png_source(300, 200))

    assert isinstance(result, OutputImage)
    assert result.attempts == 6
    assert result.quality == pytest.approx(0.57)
    assert result.size_bytes > config.max_size_bytes


@pytest.mark.asyncio
async def test_non_image_passes_through_without_codec_calls(mocker: pytest_mock.MockerFixture) -> None:
    codec = mocker.Mock()
    codec.decode = mocker.AsyncMock()
    codec.rasterize = mocker.AsyncMock()
    codec.encode = mocker.AsyncMock()
    source = SourceImage(data=b"%PDF-1.7", mime_type="application/pdf", name="invoice.pdf")

    result = await ImageNormalizer(CompressionConfig(), codec=codec).normalize(source)

    assert result is source
    codec.decode.assert_not_awaited()
    codec.rasterize.assert_not_awaited()
    codec.encode.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_image_raises_decode_error() -> None:
    source = SourceImage(data=b"not really a png", mime_type="image/png", name="broken.png")

    with pytest.raises(DecodeError):
        await ImageNormalizer(CompressionConfig()).normalize(source)


@pytest.mark.asyncio
async def test_unsupported_output_format_raises_encode_error() -> None:
    normalizer = ImageNormalizer(CompressionConfig(mime_type="image/x-unknown"))

    with pytest.raises(EncodeError):
        await normalizer.normalize(_png_source(20, 20))


@pytest.mark.asyncio
async def test_jpeg_output_from_transparent_png() -> None:
    config = CompressionConfig(mime_type="image/jpeg", max_short_side=100, max_long_side=200)

    result = await ImageNormalizer(config).normalize(_png_source(400, 300, name="logo.png", mode="RGBA"))

    assert result.name == "logo.jpg"
    with Image.open(BytesIO(result.data)) as encoded:
        assert encoded.format == "JPEG"
        assert encoded.size == (133, 100)


@pytest.mark.asyncio
async def test_independent_invocations_run_concurrently() -> None:
    normalizer = ImageNormalizer(CompressionConfig(), codec=PillowCodec())

    first, second = await asyncio.gather(
        normalizer.normalize(_png_source(2000, 1000, name="wide.png")),
        normalizer.normalize(_png_source(1000, 2000, name="tall.png")),
    )

    assert (first.name, first.width, first.height) == ("wide.webp", 1536, 768)
    assert (second.name, second.width, second.height) == ("tall.webp", 768, 1536)


def test_default_config_comes_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NORMALIZER_MAX_LONG_SIDE", "1024")
    monkeypatch.setenv("NORMALIZER_MIME_TYPE", "image/jpeg")
    get_settings.cache_clear()
    try:
        normalizer = ImageNormalizer()
    finally:
        get_settings.cache_clear()

    assert normalizer.config.max_long_side == 1024
    assert normalizer.config.mime_type == "image/jpeg"
