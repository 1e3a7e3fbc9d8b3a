"""Translation of pipeline failures into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from normalizer.imgproc.errors import ConfigurationError, DecodeError, EncodeError, NormalizationError
from normalizer.metrics.prometheus_exporter import image_normalization_total

logger = logging.getLogger(__name__)

# Client-side failures are logged at WARNING, everything else at ERROR.
_ERROR_STATUS = {
    DecodeError: (422, logging.WARNING, "decode_error"),
    ConfigurationError: (status.HTTP_400_BAD_REQUEST, logging.WARNING, None),
    EncodeError: (status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR, "encode_error"),
}


def create_error_response(exc: Exception, route: str) -> JSONResponse:
    """Log ``exc`` and build the JSON error payload for it."""

    status_code, level, outcome = _ERROR_STATUS.get(
        type(exc),
        (status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR, None),
    )
    error_type = type(exc).__name__
    logger.log(level, "Route: [%s] %s: %s", route, error_type, exc)
    if outcome:
        image_normalization_total.labels(outcome=outcome).inc()
    return JSONResponse(
        status_code=status_code,
        content={"error_type": error_type, "detail": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach handlers for normalisation and configuration errors."""

    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        return create_error_response(exc, request.url.path)

    app.add_exception_handler(NormalizationError, _handle)
    app.add_exception_handler(ConfigurationError, _handle)
