import struct

import numpy as np
import pytest

from ctiview.errors import PaletteIndexOutOfRange
from ctiview.models.cti_header import ColorType, CtiHeader, Compression, Palette
from ctiview.services.cti_decoder import CtiDecoder
from ctiview.services.pixel_normalizer import PixelNormalizer


def _header(width, height, color):
    return CtiHeader(
        version=1,
        flags=0,
        width=width,
        height=height,
        tile_size=max(width, height),
        tiles_x=1,
        tiles_y=1,
        color_type=color,
        compression=Compression.NONE,
        quality=0,
    )


@pytest.mark.parametrize(
    "color,raw,expected",
    [
        (ColorType.L8, b"\x10", (0x10, 0x10, 0x10, 255)),
        (ColorType.LA8, b"\x10\x80", (0x10, 0x10, 0x10, 0x80)),
        (ColorType.RGB8, b"\x01\x02\x03", (1, 2, 3, 255)),
        (ColorType.RGBA8, b"\x01\x02\x03\x04", (1, 2, 3, 4)),
        (ColorType.BGR8, b"\x01\x02\x03", (3, 2, 1, 255)),
        (ColorType.BGRA8, b"\x01\x02\x03\x04", (3, 2, 1, 4)),
        (ColorType.L16, struct.pack("<H", 0xABCD), (0xAB, 0xAB, 0xAB, 255)),
        (ColorType.RGB16, struct.pack("<3H", 0x1234, 0xFF00, 0x00FF), (0x12, 0xFF, 0x00, 255)),
        (ColorType.RGBA16, struct.pack("<4H", 0x0100, 0x0200, 0x0300, 0x8000), (1, 2, 3, 0x80)),
        (ColorType.L32, struct.pack("<I", 0xC0FFEE11), (0xC0, 0xC0, 0xC0, 255)),
    ],
)
def test_single_pixel_layouts(color, raw, expected):
    image = PixelNormalizer().normalize(raw, _header(1, 1, color))
    assert image.pixel(0, 0) == expected
    assert len(image.pixels) == 4


def test_output_length_is_exact():
    header = _header(7, 3, ColorType.RGB16)
    raw = bytes(header.raw_size)
    image = PixelNormalizer().normalize(raw, header)
    assert len(image.pixels) == 7 * 3 * 4


def test_palette_lookup():
    palette = Palette(entries=bytes([0, 0, 0, 255, 255, 0, 0, 255, 0, 0, 255, 128]))
    image = PixelNormalizer().normalize(bytes([2, 1, 0, 1]), _header(2, 2, ColorType.P8), palette)
    assert image.pixel(0, 0) == (0, 0, 255, 128)
    assert image.pixel(1, 0) == (255, 0, 0, 255)
    assert image.pixel(0, 1) == (0, 0, 0, 255)


def test_palette_index_out_of_range():
    palette = Palette(entries=bytes(8))  # two entries
    with pytest.raises(PaletteIndexOutOfRange):
        PixelNormalizer().normalize(bytes([0, 1, 2, 0]), _header(2, 2, ColorType.P8), palette)


def test_indexed_file_end_to_end(make_cti):
    palette = [(10, 20, 30, 255), (40, 50, 60, 0)]
    data = make_cti(bytes([0, 1, 1, 0]), 2, 2, ColorType.P8, Compression.RLE, palette=palette)
    image = CtiDecoder().decode(data)
    assert image.pixel(1, 0) == (40, 50, 60, 0)
    assert image.pixel(1, 1) == (10, 20, 30, 255)


def test_indexed_file_with_bad_index(make_cti):
    data = make_cti(bytes([0, 3, 0, 0]), 2, 2, ColorType.P8, palette=[(0, 0, 0, 255)])
    with pytest.raises(PaletteIndexOutOfRange):
        CtiDecoder().decode(data)


def test_inverse_rct_rgb8_clamps():
    # y=250, cb=+100, cr=+100 -> g = 250 - 50 = 200, r = b = 300 -> 255
    out = PixelNormalizer().inverse_rct(bytes([250, 100, 100]), ColorType.RGB8)
    assert out == bytes([255, 200, 255])


def test_inverse_rct_rgb16():
    tile = struct.pack("<Hhh", 1000, -40, 80)
    out = np.frombuffer(PixelNormalizer().inverse_rct(tile, ColorType.RGB16), dtype="<u2")
    # g = 1000 - (40 >> 2) = 990, r = 80 + 990, b = -40 + 990
    assert out.tolist() == [1070, 990, 950]


def test_inverse_rct_rejects_other_types():
    with pytest.raises(ValueError):
        PixelNormalizer().inverse_rct(b"\x00\x00\x00\x00", ColorType.RGBA8)
