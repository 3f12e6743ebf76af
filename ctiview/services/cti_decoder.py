"""Декодер контейнера CTI: заголовок, палитра, индекс плиток, плитки.

Порядок проверок фиксирован: блок заголовка целиком, сигнатура, версия,
остальные поля. Ничего пропорционального `width * height` не выделяется,
пока заголовок не прошёл проверку.
"""
from __future__ import annotations

import logging
import zlib
from typing import List, Optional, Tuple

from ctiview import config
from ctiview.errors import (
    ChecksumMismatch,
    InvalidHeader,
    InvalidMagic,
    PayloadSizeMismatch,
    UnsupportedVersion,
)
from ctiview.models.cti_header import (
    HEADER_SIZE,
    MAGIC,
    SUPPORTED_VERSIONS,
    ColorType,
    Compression,
    CtiHeader,
    Palette,
    TileEntry,
)
from ctiview.models.image_model import CANONICAL_BYTES_PER_PIXEL, DecodedImage
from ctiview.services import compression
from ctiview.services.byte_reader import ByteReader
from ctiview.services.pixel_normalizer import PixelNormalizer

logger = logging.getLogger(__name__)

MAX_PALETTE_ENTRIES = 256


class CtiDecoder:
    def __init__(
        self,
        max_dimension: Optional[int] = None,
        max_decoded_bytes: Optional[int] = None,
        strict_checksum: Optional[bool] = None,
        normalizer: Optional[PixelNormalizer] = None,
    ) -> None:
        cfg = config.get_all()
        self.max_dimension = max_dimension if max_dimension is not None else cfg["max_dimension"]
        self.max_decoded_bytes = max_decoded_bytes if max_decoded_bytes is not None else cfg["max_decoded_bytes"]
        self.strict_checksum = strict_checksum if strict_checksum is not None else cfg["strict_checksum"]
        self._normalizer = normalizer or PixelNormalizer()

    # ---- Public API ----
    def read_header(self, buffer: bytes) -> CtiHeader:
        """Читает и проверяет только заголовок (быстрый просмотр метаданных)."""
        return self._read_header(ByteReader(buffer))

    def decode(self, buffer: bytes) -> DecodedImage:
        """Декодирует весь файл в `DecodedImage` (RGBA8).

        Raises:
            DecodeError: конкретный подкласс по виду ошибки. `ChecksumMismatch`
                поднимается только при `strict_checksum`, иначе попадает в
                `DecodedImage.warnings`.
        """
        reader = ByteReader(buffer)
        header = self._read_header(reader)
        logger.info(
            f"Decoding CTI {header.width}x{header.height} {header.color_type.name} "
            f"{header.compression.label}, {header.tile_count} tile(s)"
        )

        palette = self._read_palette(reader) if header.color_type.is_indexed else None
        entries = self._read_tile_index(reader, header)

        raw, warnings = self._read_tiles(reader, header, entries)
        image = self._normalizer.normalize(raw, header, palette, tuple(warnings))
        logger.info(f"Decoded {image.width}x{image.height}, {len(warnings)} warning(s)")
        return image

    # ---- Header ----
    def _read_header(self, reader: ByteReader) -> CtiHeader:
        block = reader.sub_reader(HEADER_SIZE)

        magic = block.read_bytes(4)
        if magic != MAGIC:
            raise InvalidMagic(f"Неверная сигнатура {magic!r}, ожидалась {MAGIC!r}")

        version = block.read_u16()
        if version not in SUPPORTED_VERSIONS:
            raise UnsupportedVersion(f"Версия формата {version} не поддерживается")

        flags = block.read_u16()
        width = block.read_u32()
        height = block.read_u32()
        tile_size = block.read_u32()
        tiles_x = block.read_u32()
        tiles_y = block.read_u32()
        color_id = block.read_u8()
        compression_id = block.read_u8()
        quality = block.read_u8()
        # remaining 33 bytes are reserved

        self._check_dimensions(width, height)
        color_type = self._parse_color_type(color_id)
        self._check_budget(width, height, color_type)
        mode = self._parse_compression(compression_id)
        self._check_tiling(width, height, tile_size, tiles_x, tiles_y)

        return CtiHeader(
            version=version,
            flags=flags,
            width=width,
            height=height,
            tile_size=tile_size,
            tiles_x=tiles_x,
            tiles_y=tiles_y,
            color_type=color_type,
            compression=mode,
            quality=quality,
        )

    def _check_dimensions(self, width: int, height: int) -> None:
        if width == 0 or height == 0:
            raise InvalidHeader(f"Нулевой размер изображения: {width}x{height}")
        if width > self.max_dimension or height > self.max_dimension:
            raise InvalidHeader(
                f"Размер {width}x{height} превышает предел {self.max_dimension} px по стороне"
            )

    def _check_budget(self, width: int, height: int, color_type: ColorType) -> None:
        pixels = width * height
        largest = pixels * max(color_type.bytes_per_pixel, CANONICAL_BYTES_PER_PIXEL)
        if largest > self.max_decoded_bytes:
            raise InvalidHeader(
                f"Изображение {width}x{height} требует {largest} байт, предел {self.max_decoded_bytes}"
            )

    def _parse_color_type(self, value: int) -> ColorType:
        try:
            return ColorType(value)
        except ValueError:
            raise InvalidHeader(f"Неизвестный цветовой тип {value}") from None

    def _parse_compression(self, value: int) -> Compression:
        try:
            mode = Compression(value)
        except ValueError:
            raise InvalidHeader(f"Неизвестный режим сжатия {value}") from None
        if mode not in compression.SUPPORTED:
            raise InvalidHeader(f"Сжатие {mode.label} не поддерживается просмотрщиком")
        return mode

    def _check_tiling(self, width: int, height: int, tile_size: int, tiles_x: int, tiles_y: int) -> None:
        if tile_size == 0:
            raise InvalidHeader("Нулевой размер плитки")
        expect_x = -(-width // tile_size)
        expect_y = -(-height // tile_size)
        if (tiles_x, tiles_y) != (expect_x, expect_y):
            raise InvalidHeader(
                f"Сетка плиток {tiles_x}x{tiles_y} не соответствует размеру "
                f"{width}x{height} при плитке {tile_size} (ожидалось {expect_x}x{expect_y})"
            )

    # ---- Palette & index ----
    def _read_palette(self, reader: ByteReader) -> Palette:
        count = reader.read_u16()
        if not 1 <= count <= MAX_PALETTE_ENTRIES:
            raise InvalidHeader(f"Недопустимый размер палитры: {count}")
        return Palette(entries=reader.read_bytes(count * 4))

    def _read_tile_index(self, reader: ByteReader, header: CtiHeader) -> List[TileEntry]:
        entries: List[TileEntry] = []
        for _ in range(header.tile_count):
            entries.append(
                TileEntry(
                    offset=reader.read_u64(),
                    compressed_size=reader.read_u32(),
                    original_size=reader.read_u32(),
                    crc32=reader.read_u32(),
                )
            )
        return entries

    # ---- Tiles ----
    def _read_tiles(
        self, reader: ByteReader, header: CtiHeader, entries: List[TileEntry]
    ) -> Tuple[bytearray, List[str]]:
        bpp = header.color_type.bytes_per_pixel
        row_bytes = header.width * bpp
        raw = bytearray(header.raw_size)
        warnings: List[str] = []

        for i, entry in enumerate(entries):
            expected = header.tile_raw_size(i)
            if entry.original_size != expected:
                raise PayloadSizeMismatch(
                    f"Плитка {i}: заявлено {entry.original_size} байт, ожидалось {expected}"
                )

            reader.seek(entry.offset)
            packed = reader.read_bytes(entry.compressed_size)
            tile = compression.decompress_tile(header.compression, packed, expected)

            if header.has_checksum:
                actual = zlib.crc32(tile) & 0xFFFFFFFF
                if actual != entry.crc32:
                    mismatch = ChecksumMismatch(
                        f"Плитка {i}: CRC {actual:08X}, в индексе {entry.crc32:08X}",
                        tile=i,
                        expected=entry.crc32,
                        actual=actual,
                    )
                    if self.strict_checksum:
                        raise mismatch
                    logger.warning(str(mismatch))
                    warnings.append(str(mismatch))

            if header.uses_rct:
                tile = self._normalizer.inverse_rct(tile, header.color_type)

            x0, y0, w, h = header.tile_rect(i)
            tile_row = w * bpp
            for row in range(h):
                dst = (y0 + row) * row_bytes + x0 * bpp
                src = row * tile_row
                raw[dst:dst + tile_row] = tile[src:src + tile_row]

        return raw, warnings
