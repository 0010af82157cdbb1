from __future__ import annotations

import numpy as np

from pixelfilter.domain.image_filter import ImageFilter
from pixelfilter.domain.raster import OPAQUE, RasterImage, narrow
from pixelfilter.domain.target_format import TargetFormat

DEFAULT_KERNEL_SIZE = 3


def denoise(raster: RasterImage, kernel_size: int = DEFAULT_KERNEL_SIZE) -> RasterImage:
    """Box-average R, G and B over a ``kernel_size`` square window.

    Neighbours that fall outside the image contribute nothing to the sum, but
    the divisor is always the full kernel area, so border pixels come out
    darker than a true local mean. Alpha is forced to fully opaque.
    """
    if kernel_size < 1 or kernel_size % 2 == 0:
        raise ValueError("kernel_size must be a positive odd integer")
    if raster.is_empty:
        return RasterImage.blank(raster.width, raster.height)

    half = kernel_size // 2
    area = kernel_size * kernel_size
    height, width = raster.height, raster.width

    # Zero padding is equivalent to skipping out-of-bounds taps.
    rgb = np.pad(
        raster.wide()[:, :, :3].astype(np.uint64),
        ((half, half), (half, half), (0, 0)),
        mode="constant",
    )

    totals = np.zeros((height, width, 3), dtype=np.uint64)
    for ky in range(kernel_size):
        for kx in range(kernel_size):
            totals += rgb[ky : ky + height, kx : kx + width]

    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, :3] = narrow(totals // area)
    out[:, :, 3] = OPAQUE
    return RasterImage(out)


class DenoiseFilter(ImageFilter):
    name = "denoise"
    target_format = TargetFormat.JPEG

    def __init__(self, kernel_size: int = DEFAULT_KERNEL_SIZE) -> None:
        if kernel_size < 1 or kernel_size % 2 == 0:
            raise ValueError("kernel_size must be a positive odd integer")
        self._kernel_size = kernel_size

    @property
    def kernel_size(self) -> int:
        return self._kernel_size

    def apply(self, raster: RasterImage) -> RasterImage:
        return denoise(raster, self._kernel_size)
