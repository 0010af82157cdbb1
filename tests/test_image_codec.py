from __future__ import annotations

import io

import numpy as np
from PIL import Image
import pytest

from pixelfilter.domain.errors import DecodeError, EncodeError
from pixelfilter.domain.raster import RasterImage
from pixelfilter.domain.target_format import TargetFormat
from pixelfilter.infrastructure.image_codec import decode_image, encode_image, write_image


def _encoded(image: Image.Image, fmt: str) -> bytes:
    out = io.BytesIO()
    image.save(out, format=fmt)
    return out.getvalue()


def test_png_round_trip_is_exact() -> None:
    rng = np.random.default_rng(1)
    raster = RasterImage(rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8))

    decoded, fmt = decode_image(encode_image(raster, TargetFormat.PNG))

    assert fmt == 'PNG'
    assert np.array_equal(decoded.pixels, raster.pixels)


def test_jpeg_encode_discards_alpha() -> None:
    raster = RasterImage.filled(8, 8, (128, 128, 128, 10))

    data = encode_image(raster, TargetFormat.JPEG)

    with Image.open(io.BytesIO(data)) as image:
        assert image.format == 'JPEG'
        assert image.mode == 'RGB'
    decoded, fmt = decode_image(data)
    assert fmt == 'JPEG'
    assert np.all(decoded.pixels[:, :, 3] == 255)


def test_decode_detects_format_from_content() -> None:
    data = _encoded(Image.new('RGB', (3, 2), (10, 20, 30)), 'JPEG')

    raster, fmt = decode_image(data)

    assert fmt == 'JPEG'
    assert raster.size == (3, 2)


def test_decode_rgb_png_is_opaque() -> None:
    data = _encoded(Image.new('RGB', (2, 2), (10, 20, 30)), 'PNG')

    raster, _ = decode_image(data)

    assert raster.pixel(1, 1) == (10, 20, 30, 255)


def test_decode_sixteen_bit_gray_drops_low_byte() -> None:
    wide = Image.fromarray(np.array([[0x1234, 0xFFFF, 0x00FF]], dtype=np.uint16))
    data = _encoded(wide, 'PNG')

    raster, _ = decode_image(data)

    assert raster.pixel(0, 0) == (0x12, 0x12, 0x12, 255)
    assert raster.pixel(1, 0) == (255, 255, 255, 255)
    assert raster.pixel(2, 0) == (0, 0, 0, 255)


def test_decode_rejects_garbage() -> None:
    with pytest.raises(DecodeError):
        decode_image(b'definitely not an image')


def test_decode_rejects_disallowed_format() -> None:
    data = _encoded(Image.new('RGB', (2, 2), 'red'), 'GIF')

    with pytest.raises(DecodeError):
        decode_image(data, allowed_formats=('JPEG', 'PNG'))

    raster, fmt = decode_image(data, allowed_formats=('GIF',))
    assert fmt == 'GIF'
    assert raster.size == (2, 2)


@pytest.mark.parametrize(
    ('extension', 'expected'),
    [('jpg', TargetFormat.JPEG), ('JPEG', TargetFormat.JPEG), ('.png', TargetFormat.PNG)],
)
def test_target_format_from_extension(extension: str, expected: TargetFormat) -> None:
    assert TargetFormat.from_extension(extension) is expected


@pytest.mark.parametrize('extension', ['gif', '', 'output'])
def test_target_format_rejects_unknown_extension(extension: str) -> None:
    with pytest.raises(EncodeError):
        TargetFormat.from_extension(extension)


def test_target_format_media_types() -> None:
    assert TargetFormat.JPEG.media_type == 'image/jpeg'
    assert TargetFormat.PNG.media_type == 'image/png'
    assert TargetFormat.PNG.keeps_alpha
    assert not TargetFormat.JPEG.keeps_alpha


def test_encode_rejects_empty_raster() -> None:
    with pytest.raises(EncodeError):
        encode_image(RasterImage.blank(0, 0), TargetFormat.PNG)


def test_write_image_wraps_sink_failures() -> None:
    class BrokenSink(io.BytesIO):
        def write(self, data) -> int:  # noqa: ARG002
            raise OSError('disk full')

    with pytest.raises(EncodeError):
        write_image(RasterImage.filled(2, 2, (1, 2, 3, 4)), TargetFormat.PNG, BrokenSink())


def test_write_image_to_sink() -> None:
    sink = io.BytesIO()

    write_image(RasterImage.filled(2, 2, (1, 2, 3, 4)), TargetFormat.PNG, sink)

    with Image.open(io.BytesIO(sink.getvalue())) as image:
        assert image.format == 'PNG'
        assert image.convert('RGBA').getpixel((0, 0)) == (1, 2, 3, 4)
