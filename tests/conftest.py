"""Фикстуры: минимальный писатель CTI (только для тестов) и кодировщик PackBits."""
from __future__ import annotations

import struct
import zlib
from typing import Callable, List, Optional

import lz4.block
import pytest
import zstandard

from ctiview import config
from ctiview.models.cti_header import FLAG_NO_CHECKSUM, HEADER_SIZE, MAGIC, ColorType, Compression

TILE_ENTRY = struct.Struct("<QIII")


def packbits_encode(data: bytes) -> bytes:
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        run = 1
        while i + run < n and run < 128 and data[i + run] == data[i]:
            run += 1
        if run >= 2:
            out.append(257 - run)
            out.append(data[i])
            i += run
            continue
        start = i
        i += 1
        while i < n and i - start < 128:
            if i + 1 < n and data[i] == data[i + 1]:
                break
            i += 1
        out.append(i - start - 1)
        out += data[start:i]
    return bytes(out)


def compress(mode: Compression, tile: bytes) -> bytes:
    if mode is Compression.NONE:
        return tile
    if mode is Compression.RLE:
        return packbits_encode(tile)
    if mode is Compression.ZSTD:
        return zstandard.ZstdCompressor().compress(tile)
    if mode is Compression.LZ4:
        return lz4.block.compress(tile)  # size prepended by default
    raise ValueError(mode)


def header_bytes(
    width: int,
    height: int,
    color_type: int = ColorType.RGBA8,
    compression_id: int = Compression.NONE,
    tile_size: Optional[int] = None,
    tiles_x: Optional[int] = None,
    tiles_y: Optional[int] = None,
    version: int = 1,
    flags: int = 0,
    quality: int = 90,
    magic: bytes = MAGIC,
) -> bytes:
    ts = tile_size if tile_size is not None else max(width, height, 1)
    tx = tiles_x if tiles_x is not None else (-(-width // ts) if ts else 0)
    ty = tiles_y if tiles_y is not None else (-(-height // ts) if ts else 0)
    head = struct.pack(
        "<4sHHIIIIIBBB",
        magic, version, flags, width, height, ts, tx, ty, color_type, compression_id, quality,
    )
    return head + bytes(HEADER_SIZE - len(head))


def build_cti(
    raw: bytes,
    width: int,
    height: int,
    color_type: ColorType = ColorType.RGBA8,
    compression: Compression = Compression.NONE,
    tile_size: Optional[int] = None,
    flags: int = 0,
    palette: Optional[List[tuple]] = None,
    tile_hook: Optional[Callable[[int, bytes], bytes]] = None,
    crc_hook: Optional[Callable[[int, int], int]] = None,
) -> bytes:
    """Собирает файл CTI из сырого буфера всего изображения (row-major).

    `tile_hook(i, packed)` и `crc_hook(i, crc)` позволяют испортить плитку
    или контрольную сумму для негативных тестов.
    """
    bpp = color_type.bytes_per_pixel
    ts = tile_size or max(width, height)
    tiles_x = -(-width // ts)
    tiles_y = -(-height // ts)

    pal = b""
    if palette is not None:
        pal = struct.pack("<H", len(palette)) + b"".join(bytes(entry) for entry in palette)

    tiles = []
    for ty in range(tiles_y):
        for tx in range(tiles_x):
            x0, y0 = tx * ts, ty * ts
            w = min(x0 + ts, width) - x0
            h = min(y0 + ts, height) - y0
            rows = [raw[((y0 + r) * width + x0) * bpp:((y0 + r) * width + x0 + w) * bpp] for r in range(h)]
            tiles.append(b"".join(rows))

    index_size = len(tiles) * TILE_ENTRY.size
    offset = HEADER_SIZE + len(pal) + index_size
    index = bytearray()
    payload = bytearray()
    for i, tile in enumerate(tiles):
        packed = compress(compression, tile)
        if tile_hook is not None:
            packed = tile_hook(i, packed)
        crc = 0 if flags & FLAG_NO_CHECKSUM else zlib.crc32(tile) & 0xFFFFFFFF
        if crc_hook is not None:
            crc = crc_hook(i, crc)
        index += TILE_ENTRY.pack(offset + len(payload), len(packed), len(tile), crc)
        payload += packed

    head = header_bytes(width, height, color_type, compression, ts, tiles_x, tiles_y, flags=flags)
    return head + pal + bytes(index) + bytes(payload)


@pytest.fixture
def make_cti():
    return build_cti


@pytest.fixture
def make_header():
    return header_bytes


@pytest.fixture
def packbits():
    return packbits_encode


@pytest.fixture(autouse=True)
def restore_config():
    saved = dict(config.get_all())
    yield
    config.con_dict.clear()
    config.con_dict.update(saved)
