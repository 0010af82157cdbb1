from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from pixelfilter.domain.errors import FilterError, ImageProcessingError
from pixelfilter.domain.image_filter import ImageFilter
from pixelfilter.domain.raster import RasterImage
from pixelfilter.domain.target_format import TargetFormat
from pixelfilter.infrastructure.image_codec import decode_image, encode_image
from pixelfilter.infrastructure.metrics import MetricsStore, metrics as default_metrics

logger = logging.getLogger("pixelfilter.transform")

Decoder = Callable[[bytes], tuple[RasterImage, str]]
Encoder = Callable[[RasterImage, TargetFormat], bytes]


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    target_format: TargetFormat
    width: int
    height: int
    source_format: str

    @property
    def media_type(self) -> str:
        return self.target_format.media_type

    @property
    def extension(self) -> str:
        return self.target_format.extension


class TransformImageUseCase:
    """Runs decode, one filter and encode for a single upload, entirely in memory."""

    def __init__(
        self,
        decoder: Decoder = decode_image,
        encoder: Encoder = encode_image,
        metrics: MetricsStore | None = None,
    ) -> None:
        self._decode = decoder
        self._encode = encoder
        self._metrics = metrics or default_metrics

    def execute(self, image_bytes: bytes, image_filter: ImageFilter) -> EncodedImage:
        try:
            raster, source_format = self._decode(image_bytes)
            logger.info(
                "running %s on %s image %dx%d",
                image_filter.name,
                source_format,
                raster.width,
                raster.height,
            )

            started = time.perf_counter()
            result = self._apply(image_filter, raster)
            self._metrics.observe(image_filter.name, time.perf_counter() - started)

            data = self._encode(result, image_filter.target_format)
        except ImageProcessingError as exc:
            self._metrics.incr("transform_failures_total")
            logger.warning("%s failed: %s", image_filter.name, exc.message)
            raise

        self._metrics.incr(f"{image_filter.name}_total")
        return EncodedImage(
            data=data,
            target_format=image_filter.target_format,
            width=result.width,
            height=result.height,
            source_format=source_format,
        )

    @staticmethod
    def _apply(image_filter: ImageFilter, raster: RasterImage) -> RasterImage:
        try:
            result = image_filter.apply(raster)
        except Exception as exc:  # noqa: BLE001
            raise FilterError(f"{image_filter.name} failed: {exc}") from exc
        if result.size != raster.size:
            raise FilterError(f"{image_filter.name} changed image size from {raster.size} to {result.size}")
        return result
