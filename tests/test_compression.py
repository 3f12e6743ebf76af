import lz4.block
import pytest
import zstandard

from ctiview.errors import InvalidHeader, PayloadCorrupt, PayloadOverrun, PayloadSizeMismatch, UnexpectedEof
from ctiview.models.cti_header import Compression
from ctiview.services import compression


def test_supported_modes_have_decompressors():
    unsupported = {Compression.LZ77, Compression.DELTA, Compression.PREDICTIVE}
    assert set(compression.DECOMPRESSORS) == set(Compression) - unsupported
    assert compression.SUPPORTED == set(compression.DECOMPRESSORS)


def test_rle_literal_and_run(packbits):
    data = b"\x01\x02\x03" + b"\x07" * 200 + b"\x09"
    assert compression.decompress_rle(packbits(data), len(data)) == data


def test_rle_decodes_known_packbits_stream():
    # classic Apple example
    packed = bytes.fromhex("FEAA 0280002A FDAA 0380002A22 F7AA")
    expected = bytes.fromhex("AAAAAA 80002A AAAAAAAA 80002A22") + b"\xaa" * 10
    assert compression.decompress_rle(packed, len(expected)) == expected


def test_rle_noop_control_byte_is_skipped():
    assert compression.decompress_rle(b"\x80\x00\x41", 1) == b"A"


def test_rle_run_past_output_is_overrun():
    with pytest.raises(PayloadOverrun):
        compression.decompress_rle(b"\xfd\x05", 2)  # run of 4


def test_rle_truncated_packet_is_eof():
    with pytest.raises(UnexpectedEof):
        compression.decompress_rle(b"\x03\x01\x02", 4)  # literal of 4, only 2 present
    with pytest.raises(UnexpectedEof):
        compression.decompress_rle(b"\xfe", 3)  # run without its value byte


def test_rle_short_output_is_size_mismatch():
    with pytest.raises(PayloadSizeMismatch):
        compression.decompress_rle(b"\xff\x05", 5)


def test_none_requires_exact_length():
    assert compression.decompress_none(b"abcd", 4) == b"abcd"
    with pytest.raises(PayloadSizeMismatch):
        compression.decompress_none(b"abc", 4)


def test_zstd_roundtrip_and_errors():
    data = bytes(range(256)) * 4
    packed = zstandard.ZstdCompressor().compress(data)
    assert compression.decompress_zstd(packed, len(data)) == data
    with pytest.raises(PayloadOverrun):
        compression.decompress_zstd(packed, len(data) - 10)
    with pytest.raises(PayloadSizeMismatch):
        compression.decompress_zstd(packed, len(data) + 10)
    with pytest.raises(PayloadCorrupt):
        compression.decompress_zstd(b"not a zstd frame at all", 16)


def test_zstd_truncated_frame_is_corrupt():
    data = bytes(range(256)) * 4
    packed = zstandard.ZstdCompressor().compress(data)
    with pytest.raises(PayloadCorrupt):
        compression.decompress_zstd(packed[: len(packed) // 2], len(data))
    with pytest.raises(PayloadCorrupt):
        compression.decompress_zstd(packed[:3], len(data))
    # bare magic followed by an empty, non-final block
    with pytest.raises(PayloadCorrupt):
        compression.decompress_zstd(b"\x28\xb5\x2f\xfd" + bytes(10), 16)


def test_zstd_without_declared_size():
    data = b"tile" * 64
    packed = zstandard.ZstdCompressor(write_content_size=False).compress(data)
    assert compression.decompress_zstd(packed, len(data)) == data
    with pytest.raises(PayloadOverrun):
        compression.decompress_zstd(packed, len(data) - 1)
    with pytest.raises(PayloadSizeMismatch):
        compression.decompress_zstd(packed, len(data) + 1)


def test_lz4_prefix_is_checked_before_decompressing():
    data = b"hello lz4 " * 20
    packed = lz4.block.compress(data)
    assert compression.decompress_lz4(packed, len(data)) == data
    with pytest.raises(PayloadOverrun):
        compression.decompress_lz4(packed, len(data) - 1)
    with pytest.raises(PayloadSizeMismatch):
        compression.decompress_lz4(packed, len(data) + 1)
    with pytest.raises(PayloadCorrupt):
        compression.decompress_lz4(b"\x01", 1)


def test_lz4_corrupt_body():
    data = b"abcdefgh" * 16
    packed = bytearray(lz4.block.compress(data))
    del packed[6:]
    with pytest.raises(PayloadCorrupt):
        compression.decompress_lz4(bytes(packed), len(data))


def test_unsupported_modes_raise_invalid_header():
    for mode in (Compression.LZ77, Compression.DELTA, Compression.PREDICTIVE):
        with pytest.raises(InvalidHeader):
            compression.decompress_tile(mode, b"", 0)
