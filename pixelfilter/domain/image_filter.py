from __future__ import annotations

from abc import ABC, abstractmethod

from pixelfilter.domain.raster import RasterImage
from pixelfilter.domain.target_format import TargetFormat


class ImageFilter(ABC):
    name: str
    target_format: TargetFormat

    @abstractmethod
    def apply(self, raster: RasterImage) -> RasterImage:
        """Return a new raster of the same size; ``raster`` is left untouched."""
