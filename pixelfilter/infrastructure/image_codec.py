from __future__ import annotations

import io
import logging
from typing import BinaryIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from pixelfilter.config import settings
from pixelfilter.domain.errors import DecodeError, EncodeError
from pixelfilter.domain.raster import OPAQUE, RasterImage
from pixelfilter.domain.target_format import TargetFormat
from pixelfilter.infrastructure.image_validation import validate_image_bytes

logger = logging.getLogger("pixelfilter.codec")

# Single-channel modes Pillow uses for 16-bit (and 32-bit integer) grayscale.
_WIDE_GRAY_MODES = {"I", "I;16", "I;16L", "I;16B", "I;16N"}


def _to_rgba_array(image: Image.Image) -> np.ndarray:
    if image.mode in _WIDE_GRAY_MODES:
        gray = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF)
        gray8 = (gray >> 8).astype(np.uint8)
        alpha = np.full(gray8.shape, OPAQUE, dtype=np.uint8)
        return np.dstack([gray8, gray8, gray8, alpha])
    return np.asarray(image.convert("RGBA"), dtype=np.uint8)


def decode_image(
    image_bytes: bytes,
    allowed_formats: tuple[str, ...] | None = None,
    max_pixels: int | None = None,
) -> tuple[RasterImage, str]:
    """Decode ``image_bytes`` into an 8-bit RGBA raster.

    The container is sniffed from the content, never from a file name.
    Samples wider than 8 bits are truncated by dropping the low byte.
    """
    allowed = settings.supported_input_formats if allowed_formats is None else allowed_formats
    limit = settings.max_image_pixels if max_pixels is None else max_pixels
    width, height, fmt = validate_image_bytes(image_bytes, max_pixels=limit, allowed_formats=allowed)

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            pixels = _to_rgba_array(image)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError("Invalid or corrupted image file") from exc

    logger.debug("decoded %s image %dx%d", fmt, width, height)
    return RasterImage(pixels), fmt


def write_image(
    raster: RasterImage,
    target: TargetFormat,
    sink: BinaryIO,
    quality: int | None = None,
) -> None:
    if raster.is_empty:
        raise EncodeError("Cannot encode an empty image")

    image = Image.fromarray(np.array(raster.pixels))
    if not target.keeps_alpha:
        image = image.convert("RGB")

    params: dict[str, int] = {}
    if target is TargetFormat.JPEG:
        params["quality"] = settings.jpeg_quality if quality is None else quality

    try:
        image.save(sink, format=target.pil_format, **params)
    except (OSError, ValueError) as exc:
        raise EncodeError(f"Failed to encode image as {target.pil_format}") from exc


def encode_image(raster: RasterImage, target: TargetFormat, quality: int | None = None) -> bytes:
    output = io.BytesIO()
    write_image(raster, target, output, quality=quality)
    return output.getvalue()
