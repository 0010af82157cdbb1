from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from pixelfilter.domain.errors import DecodeError, MissingUploadError, UploadTooLargeError


def validate_image_bytes(
    image_bytes: bytes,
    max_pixels: int,
    max_bytes: int | None = None,
    allowed_formats: tuple[str, ...] | None = None,
) -> tuple[int, int, str]:
    if not image_bytes:
        raise MissingUploadError("Uploaded file is empty")
    if max_bytes is not None and len(image_bytes) > max_bytes:
        raise UploadTooLargeError(f"Uploaded file is too large. Max size is {max_bytes // (1024 * 1024)} MB")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.verify()
        with Image.open(io.BytesIO(image_bytes)) as image:
            width, height = image.size
            fmt = (image.format or "").upper() or "UNKNOWN"
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError("Invalid or corrupted image file") from exc

    if allowed_formats is not None and fmt not in allowed_formats:
        raise DecodeError(f"Unsupported image format {fmt}. Supported: {', '.join(allowed_formats)}")
    if width <= 0 or height <= 0:
        raise DecodeError("Invalid image dimensions")
    if width * height > max_pixels:
        raise DecodeError(f"Image too large in pixels. Max allowed is {max_pixels}")

    return width, height, fmt
