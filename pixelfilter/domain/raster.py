from __future__ import annotations

from dataclasses import dataclass

import numpy as np

CHANNELS = 4
OPAQUE = 255


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Immutable RGBA raster backed by a ``(height, width, 4)`` uint8 array.

    Filters never write into ``pixels``; the array is flagged read-only on
    construction so an accidental in-place write raises instead of corrupting
    neighbour reads.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Raster must have shape (height, width, {CHANNELS}), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster samples must be uint8, got {pixels.dtype}")
        if pixels.flags.writeable:
            pixels = pixels.copy()
            pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def blank(cls, width: int, height: int) -> RasterImage:
        if width < 0 or height < 0:
            raise ValueError("Raster dimensions must be non-negative")
        return cls(np.zeros((height, width, CHANNELS), dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> RasterImage:
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def wide(self) -> np.ndarray:
        """Samples at 16-bit precision: ``v << 8 | v`` for every channel."""
        return self.pixels.astype(np.uint32) * 257


def narrow(wide_samples: np.ndarray) -> np.ndarray:
    """Bring 16-bit samples back to 8 bits by dropping the low byte."""
    return (np.asarray(wide_samples, dtype=np.uint32) >> 8).astype(np.uint8)
