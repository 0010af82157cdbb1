from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Callable

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from pixelfilter.application.background_matte import BackgroundMatteFilter
from pixelfilter.application.denoise import DenoiseFilter
from pixelfilter.application.transform_image_use_case import EncodedImage, TransformImageUseCase
from pixelfilter.config import settings
from pixelfilter.domain.errors import (
    ImageProcessingError,
    MissingUploadError,
    ResponseWriteError,
    StagingError,
    UploadTooLargeError,
)
from pixelfilter.domain.image_filter import ImageFilter
from pixelfilter.infrastructure.metrics import metrics

logger = logging.getLogger("pixelfilter.api")
if not logger.handlers:
    logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Pixel Filters")

use_case = TransformImageUseCase()


@dataclass
class SlidingWindow:
    timestamps: deque[float]


class SlidingWindowRateLimiter:
    def __init__(self, window_seconds: float = 60.0, clock: Callable[[], float] = time.time) -> None:
        self._window = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._buckets: dict[str, SlidingWindow] = defaultdict(lambda: SlidingWindow(deque()))
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def allow(self, key: str, limit: int) -> bool:
        if limit <= 0:
            return True
        now = self._clock()
        window_start = now - self._window
        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(window_start)
                self._last_sweep = now

            bucket = self._buckets[key]
            while bucket.timestamps and bucket.timestamps[0] < window_start:
                bucket.timestamps.popleft()
            if len(bucket.timestamps) >= limit:
                return False
            bucket.timestamps.append(now)
            return True

    def _sweep(self, window_start: float) -> None:
        # Drop clients with no request inside the current window.
        for key in list(self._buckets):
            timestamps = self._buckets[key].timestamps
            while timestamps and timestamps[0] < window_start:
                timestamps.popleft()
            if not timestamps:
                del self._buckets[key]


rate_limiter = SlidingWindowRateLimiter()


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        request.state.request_id = request_id
        metrics.incr("http_requests_total")

        if request.url.path.startswith("/api/"):
            client_ip = request.client.host if request.client else "unknown"
            if not rate_limiter.allow(client_ip, settings.rate_limit_per_minute):
                metrics.incr("rate_limited_total")
                return JSONResponse(
                    {"detail": "Rate limit exceeded. Try again in a minute."},
                    status_code=429,
                    headers={"x-request-id": request_id},
                )

        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        response.headers["x-request-id"] = request_id
        logger.info(
            json.dumps(
                {
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "status": response.status_code,
                    "elapsed_ms": elapsed_ms,
                }
            )
        )
        return response


app.add_middleware(RequestContextMiddleware)


@app.exception_handler(ImageProcessingError)
async def image_processing_error_handler(request: Request, exc: ImageProcessingError) -> JSONResponse:
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


class ImageResponse(Response):
    """Binary image response; transport errors while sending become ``ResponseWriteError``."""

    async def __call__(self, scope, receive, send) -> None:  # type: ignore[override]
        try:
            await super().__call__(scope, receive, send)
        except OSError as exc:
            metrics.incr("response_write_failures_total")
            logger.warning("failed to send %s response: %s", self.media_type, exc)
            raise ResponseWriteError("Failed to send image response") from exc


def _safe_stem(name: str, fallback: str) -> str:
    stem = Path(name).stem
    safe = "".join(ch for ch in stem if ch.isalnum() or ch in ("-", "_"))
    return safe or fallback


def _read_upload(image: UploadFile | None) -> bytes:
    if image is None:
        raise MissingUploadError("Missing multipart file field 'image'")
    try:
        image_bytes = image.file.read(settings.max_image_bytes + 1)
    except OSError as exc:
        raise StagingError("Failed to read uploaded file") from exc
    finally:
        image.file.close()

    if not image_bytes:
        raise MissingUploadError(f"{image.filename or 'file'} is empty")
    if len(image_bytes) > settings.max_image_bytes:
        raise UploadTooLargeError(
            f"{image.filename or 'file'} is too large. Max size is {settings.max_image_bytes // (1024 * 1024)} MB"
        )
    return image_bytes


def _image_response(result: EncodedImage, image: UploadFile, image_filter: ImageFilter) -> Response:
    stem = _safe_stem(image.filename or "", "image")
    filename = f"{stem}-{image_filter.name.replace('_', '-')}.{result.extension}"
    return ImageResponse(
        content=result.data,
        media_type=result.media_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


def _parse_threshold(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return settings.matte_threshold
    try:
        threshold = int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="threshold must be an integer between 0 and 255") from exc
    if threshold < 0 or threshold > 255:
        raise HTTPException(status_code=400, detail="threshold must be between 0 and 255")
    return threshold


def _transform(image: UploadFile | None, image_filter: ImageFilter) -> Response:
    image_bytes = _read_upload(image)
    result = use_case.execute(image_bytes, image_filter)
    return _image_response(result, image, image_filter)


@app.post("/api/denoise")
@app.post("/upload", include_in_schema=False)
def denoise_image(image: UploadFile | None = File(None)) -> Response:
    return _transform(image, DenoiseFilter(kernel_size=settings.denoise_kernel_size))


@app.post("/api/remove-bg")
@app.post("/bg", include_in_schema=False)
def remove_image_background(
    image: UploadFile | None = File(None),
    threshold: str | None = Form(None),
) -> Response:
    return _transform(image, BackgroundMatteFilter(threshold=_parse_threshold(threshold)))


@app.get("/api/metrics")
def get_metrics() -> dict:
    snapshot = metrics.snapshot()
    snapshot["timestamp"] = int(datetime.now(timezone.utc).timestamp())
    return snapshot


@app.get("/api/metrics/prometheus")
def get_prometheus_metrics() -> PlainTextResponse:
    return PlainTextResponse(metrics.to_prometheus_text(), media_type="text/plain; version=0.0.4")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
