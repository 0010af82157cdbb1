from __future__ import annotations

import numpy as np
import pytest

from pixelfilter.domain.raster import RasterImage, narrow


def test_raster_is_read_only() -> None:
    raster = RasterImage.filled(2, 2, (1, 2, 3, 4))

    with pytest.raises(ValueError):
        raster.pixels[0, 0, 0] = 9


def test_raster_copies_writeable_input() -> None:
    source = np.zeros((1, 1, 4), dtype=np.uint8)
    raster = RasterImage(source)

    source[0, 0] = (9, 9, 9, 9)

    assert raster.pixel(0, 0) == (0, 0, 0, 0)


def test_raster_dimensions() -> None:
    raster = RasterImage.blank(5, 3)

    assert raster.width == 5
    assert raster.height == 3
    assert raster.size == (5, 3)
    assert not raster.is_empty
    assert RasterImage.blank(0, 3).is_empty


@pytest.mark.parametrize(
    'pixels',
    [
        np.zeros((2, 2, 3), dtype=np.uint8),
        np.zeros((2, 2), dtype=np.uint8),
        np.zeros((2, 2, 4), dtype=np.uint16),
    ],
)
def test_raster_rejects_bad_arrays(pixels: np.ndarray) -> None:
    with pytest.raises(ValueError):
        RasterImage(pixels)


def test_wide_and_narrow() -> None:
    raster = RasterImage.filled(1, 1, (0, 1, 128, 255))

    wide = raster.wide()

    assert wide[0, 0].tolist() == [0, 0x0101, 0x8080, 0xFFFF]
    assert narrow(wide)[0, 0].tolist() == [0, 1, 128, 255]
