from __future__ import annotations

import os


class Settings:
    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(12 * 1024 * 1024)))
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", str(20_000_000)))
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "45"))

    matte_threshold: int = int(os.getenv("MATTE_THRESHOLD", "180"))
    denoise_kernel_size: int = int(os.getenv("DENOISE_KERNEL_SIZE", "3"))
    jpeg_quality: int = int(os.getenv("JPEG_QUALITY", "75"))
    supported_input_formats: tuple[str, ...] = tuple(
        x.strip().upper() for x in os.getenv("SUPPORTED_INPUT_FORMATS", "JPEG,PNG").split(",") if x.strip()
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
