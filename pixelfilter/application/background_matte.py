from __future__ import annotations

import numpy as np

from pixelfilter.domain.image_filter import ImageFilter
from pixelfilter.domain.raster import RasterImage, narrow
from pixelfilter.domain.target_format import TargetFormat

DEFAULT_THRESHOLD = 180


def _check_threshold(threshold: int) -> int:
    if not 0 <= threshold <= 255:
        raise ValueError("threshold must be between 0 and 255")
    return int(threshold)


def remove_background(raster: RasterImage, threshold: int = DEFAULT_THRESHOLD) -> RasterImage:
    """Clear every pixel whose R, G, B and A are all strictly above ``threshold``.

    Matched pixels become transparent black (0, 0, 0, 0); all others are
    copied through unchanged.
    """
    threshold = _check_threshold(threshold)
    data = narrow(raster.wide())

    background = np.all(data > threshold, axis=2)
    data[background] = [0, 0, 0, 0]
    return RasterImage(data)


class BackgroundMatteFilter(ImageFilter):
    name = "remove_background"
    target_format = TargetFormat.PNG

    def __init__(self, threshold: int = DEFAULT_THRESHOLD) -> None:
        self._threshold = _check_threshold(threshold)

    @property
    def threshold(self) -> int:
        return self._threshold

    def apply(self, raster: RasterImage) -> RasterImage:
        return remove_background(raster, self._threshold)
