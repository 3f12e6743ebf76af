import pytest
from PIL import Image

from ctiview import config
from ctiview.errors import ChecksumMismatch, DecodeError, InvalidMagic
from ctiview.models.cti_header import ColorType, Compression
from ctiview.services.display_service import DisplayService
from ctiview.services.image_service import ImageService


@pytest.fixture
def cti_file(tmp_path, make_cti):
    raw = bytes([255, 0, 0, 255, 0, 255, 0, 128, 0, 0, 255, 0, 10, 20, 30, 40])
    path = tmp_path / "sample.cti"
    path.write_bytes(make_cti(raw, 2, 2, ColorType.RGBA8, Compression.ZSTD))
    return path


def test_load_image(cti_file):
    data = ImageService().load_image(cti_file)
    assert data.path == cti_file
    assert (data.width, data.height) == (2, 2)
    assert data.size_bytes == cti_file.stat().st_size
    assert data.pil_image.mode == "RGBA"
    assert data.pil_image.getpixel((1, 1)) == (10, 20, 30, 40)
    assert data.header.compression is Compression.ZSTD


def test_read_info(cti_file):
    header = ImageService().read_info(str(cti_file))
    assert (header.width, header.height, header.color_type) == (2, 2, ColorType.RGBA8)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImageService().load_image(tmp_path / "nope.cti")


def test_not_a_cti_file(tmp_path):
    path = tmp_path / "fake.cti"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(100))
    with pytest.raises(InvalidMagic):
        ImageService().load_image(path)


def test_decode_errors_are_value_errors(tmp_path):
    path = tmp_path / "short.cti"
    path.write_bytes(b"CTI1")
    with pytest.raises(ValueError) as info:
        ImageService().load_image(path)
    assert isinstance(info.value, DecodeError)
    assert str(info.value).startswith("UnexpectedEof:")


def test_strict_checksum_from_config(tmp_path, make_cti):
    path = tmp_path / "bad_crc.cti"
    path.write_bytes(make_cti(bytes(16), 2, 2, crc_hook=lambda _i, crc: crc ^ 1))
    assert ImageService().load_image(path).image.warnings
    config.set_value("strict_checksum", "true")
    with pytest.raises(ChecksumMismatch):
        ImageService().load_image(path)


def _rgba(pixels):
    img = Image.new("RGBA", (len(pixels), 1))
    img.putdata(pixels)
    return img


def test_render_channel_single_plane():
    img = _rgba([(10, 20, 30, 40), (50, 60, 70, 80)])
    service = DisplayService()
    green = service.render_channel(img, "G")
    assert green.mode == "L"
    assert list(green.getdata()) == [20, 60]
    alpha = service.render_channel(img, "A")
    assert list(alpha.getdata()) == [40, 80]


def test_render_channel_passthrough_and_rgb():
    img = _rgba([(1, 2, 3, 4)])
    service = DisplayService()
    assert service.render_channel(img, "RGBA") is img
    assert service.render_channel(img, "RGB").getpixel((0, 0)) == (1, 2, 3)
    with pytest.raises(ValueError):
        service.render_channel(img, "X")


def test_channel_stats():
    img = _rgba([(0, 0, 100, 255), (0, 0, 200, 255)])
    assert DisplayService().channel_stats(img, "B") == (100, 200, 150.0)
