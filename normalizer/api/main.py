"""FastAPI entrypoint and HTTP routes."""

import logging
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from normalizer.api.errors import register_error_handlers
from normalizer.config.settings import get_settings
from normalizer.imgproc import (
    CompressionConfig,
    ImageNormalizer,
    ImageResource,
    OutputImage,
    PillowCodec,
    SourceImage,
    parse_data_url,
    to_data_url,
)
from normalizer.metrics.prometheus_exporter import (
    image_encode_attempts,
    image_normalization_total,
    image_over_budget_total,
)
from normalizer.monitoring.logging import configure_logging

logger = logging.getLogger(__name__)


class DataUrlRequest(BaseModel):
    """Image passed inline as a base64 data URL."""

    data_url: str
    name: str = "image"
    max_long_side: int | None = None
    max_short_side: int | None = None
    max_size_bytes: int | None = None
    mime_type: str | None = None


class DataUrlResponse(BaseModel):
    data_url: str
    name: str
    mime_type: str
    size_bytes: int


def _record_outcome(source: SourceImage, result: ImageResource, config: CompressionConfig) -> None:
    if result is source:
        image_normalization_total.labels(outcome="passthrough").inc()
        return

    image_normalization_total.labels(outcome="normalized").inc()
    if isinstance(result, OutputImage):
        image_encode_attempts.observe(result.attempts)
    if result.size_bytes > config.max_size_bytes:
        image_over_budget_total.inc()
        logger.warning(
            "%s is still %d bytes after reaching the quality floor (budget %d)",
            result.name,
            result.size_bytes,
            config.max_size_bytes,
        )


async def _run(request: Request, source: SourceImage, config: CompressionConfig) -> ImageResource:
    normalizer = ImageNormalizer(config=config, codec=request.app.state.codec)
    result = await normalizer.normalize(source)
    _record_outcome(source, result, config)
    return result


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Image Normalizer API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
    )
    app.state.codec = PillowCodec()
    register_error_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/metrics", tags=["system"])
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.post("/normalize", tags=["images"])
    async def normalize_upload(
        request: Request,
        file: UploadFile = File(...),
        max_long_side: int | None = Query(default=None, gt=0),
        max_short_side: int | None = Query(default=None, gt=0),
        max_size_bytes: int | None = Query(default=None, gt=0),
        mime_type: str | None = Query(default=None),
    ) -> Response:
        """Return the uploaded image resized and recompressed to the configured limits."""

        limit = settings.max_upload_bytes
        too_large = HTTPException(status_code=413, detail=f"Upload exceeds {limit} bytes.")
        if file.size is not None and file.size > limit:
            raise too_large
        data = await file.read(limit + 1)
        if len(data) > limit:
            raise too_large

        config = settings.compression_config().with_overrides(
            max_long_side=max_long_side,
            max_short_side=max_short_side,
            max_size_bytes=max_size_bytes,
            mime_type=mime_type,
        )
        source = SourceImage(
            data=data,
            mime_type=file.content_type or "application/octet-stream",
            name=file.filename or "upload",
        )
        result = await _run(request, source, config)

        headers = {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.name)}"}
        if isinstance(result, OutputImage):
            headers.update(
                {
                    "X-Image-Width": str(result.width),
                    "X-Image-Height": str(result.height),
                    "X-Encode-Quality": f"{result.quality:.2f}",
                    "X-Encode-Attempts": str(result.attempts),
                },
            )
        return Response(content=result.data, media_type=result.mime_type, headers=headers)

    @app.post("/normalize/data-url", tags=["images"], response_model=DataUrlResponse)
    async def normalize_data_url(request: Request, payload: DataUrlRequest) -> DataUrlResponse:
        """Same as ``/normalize`` for images sent inline as data URLs."""

        mime_type, data = parse_data_url(payload.data_url)
        config = settings.compression_config().with_overrides(
            max_long_side=payload.max_long_side,
            max_short_side=payload.max_short_side,
            max_size_bytes=payload.max_size_bytes,
            mime_type=payload.mime_type,
        )
        source = SourceImage(data=data, mime_type=mime_type, name=payload.name)
        result = await _run(request, source, config)

        return DataUrlResponse(
            data_url=to_data_url(result.data, result.mime_type),
            name=result.name,
            mime_type=result.mime_type,
            size_bytes=result.size_bytes,
        )

    return app


app = create_app()
