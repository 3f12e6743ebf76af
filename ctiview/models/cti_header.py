"""Модели заголовка контейнера CTI.

Принципы:
- SRP: только описание полей и перечислений формата, без чтения байтов.
- Неизменяемость (`frozen=True`): заголовок не меняется после разбора.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

MAGIC = b"CTI1"
HEADER_SIZE = 64
TILE_ENTRY_SIZE = 20
SUPPORTED_VERSIONS = frozenset({1})

FLAG_RCT = 0x0001
FLAG_NO_CHECKSUM = 0x0002


class ColorType(IntEnum):
    L8 = 1
    L16 = 2
    RGB8 = 3
    RGBA8 = 4
    RGB16 = 5
    LA8 = 6
    BGR8 = 7
    BGRA8 = 8
    P8 = 9
    RGBA16 = 10
    L32 = 11

    @property
    def layout(self) -> str:
        return _COLOR_LAYOUTS[self][0]

    @property
    def bit_depth(self) -> int:
        return _COLOR_LAYOUTS[self][1]

    @property
    def channels(self) -> int:
        return len(self.layout)

    @property
    def bytes_per_pixel(self) -> int:
        return self.channels * self.bit_depth // 8

    @property
    def is_indexed(self) -> bool:
        return self is ColorType.P8


# layout letters: L gray, A alpha, R/G/B colour, P palette index
_COLOR_LAYOUTS: Dict[ColorType, Tuple[str, int]] = {
    ColorType.L8: ("L", 8),
    ColorType.L16: ("L", 16),
    ColorType.RGB8: ("RGB", 8),
    ColorType.RGBA8: ("RGBA", 8),
    ColorType.RGB16: ("RGB", 16),
    ColorType.LA8: ("LA", 8),
    ColorType.BGR8: ("BGR", 8),
    ColorType.BGRA8: ("BGRA", 8),
    ColorType.P8: ("P", 8),
    ColorType.RGBA16: ("RGBA", 16),
    ColorType.L32: ("L", 32),
}


class Compression(IntEnum):
    NONE = 0
    RLE = 1
    LZ77 = 2
    DELTA = 3
    PREDICTIVE = 4
    ZSTD = 10
    LZ4 = 11

    @property
    def label(self) -> str:
        return _COMPRESSION_LABELS[self]


_COMPRESSION_LABELS: Dict[Compression, str] = {
    Compression.NONE: "None",
    Compression.RLE: "RLE",
    Compression.LZ77: "LZ77",
    Compression.DELTA: "Delta",
    Compression.PREDICTIVE: "Predictive",
    Compression.ZSTD: "Zstd",
    Compression.LZ4: "LZ4",
}


def describe_compression(value: int) -> str:
    """Читаемое имя режима сжатия; для неизвестных значений включает число."""
    try:
        return Compression(value).label
    except ValueError:
        return f"Unknown({value})"


@dataclass(frozen=True)
class TileEntry:
    """Запись индекса плиток.

    Fields:
        offset: Абсолютное смещение сжатых данных плитки в файле.
        compressed_size: Размер сжатых данных, байт.
        original_size: Размер распакованной плитки, байт.
        crc32: CRC32 распакованной плитки.
    """
    offset: int
    compressed_size: int
    original_size: int
    crc32: int


@dataclass(frozen=True)
class CtiHeader:
    """Проверенный заголовок CTI (64 байта, little-endian).

    Fields:
        version: Версия формата.
        flags: Битовые флаги (`FLAG_RCT`, `FLAG_NO_CHECKSUM`).
        width: Ширина, px.
        height: Высота, px.
        tile_size: Сторона квадратной плитки, px.
        tiles_x: Число плиток по горизонтали.
        tiles_y: Число плиток по вертикали.
        color_type: Раскладка каналов и битность.
        compression: Режим сжатия плиток.
        quality: Информационное поле кодировщика.
    """
    version: int
    flags: int
    width: int
    height: int
    tile_size: int
    tiles_x: int
    tiles_y: int
    color_type: ColorType
    compression: Compression
    quality: int

    @property
    def tile_count(self) -> int:
        return self.tiles_x * self.tiles_y

    @property
    def uses_rct(self) -> bool:
        return bool(self.flags & FLAG_RCT) and self.color_type in (ColorType.RGB8, ColorType.RGB16)

    @property
    def has_checksum(self) -> bool:
        return not self.flags & FLAG_NO_CHECKSUM

    @property
    def raw_size(self) -> int:
        return self.width * self.height * self.color_type.bytes_per_pixel

    def tile_rect(self, index: int) -> Tuple[int, int, int, int]:
        """Возвращает (x0, y0, w, h) плитки с учётом обрезки по краю изображения."""
        tx = index % self.tiles_x
        ty = index // self.tiles_x
        x0 = tx * self.tile_size
        y0 = ty * self.tile_size
        w = min(x0 + self.tile_size, self.width) - x0
        h = min(y0 + self.tile_size, self.height) - y0
        return x0, y0, w, h

    def tile_raw_size(self, index: int) -> int:
        _x0, _y0, w, h = self.tile_rect(index)
        return w * h * self.color_type.bytes_per_pixel


@dataclass(frozen=True)
class Palette:
    """Таблица палитры для `ColorType.P8`: `entries` — RGBA8, по 4 байта на запись."""
    entries: bytes

    @property
    def size(self) -> int:
        return len(self.entries) // 4


def flags_summary(flags: int) -> str:
    parts = []
    if flags & FLAG_RCT:
        parts.append("RCT")
    if flags & FLAG_NO_CHECKSUM:
        parts.append("NO_CRC")
    return f"0x{flags:04X}" + (f" ({', '.join(parts)})" if parts else "")
