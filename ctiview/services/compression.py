"""Распаковка плиток CTI: одна функция на каждый режим `Compression`.

Каждая функция получает сжатые байты плитки и точный ожидаемый размер
результата и возвращает ровно `expected` байт либо поднимает ошибку
декодирования.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict

import lz4.block
import zstandard

from ctiview.errors import InvalidHeader, PayloadCorrupt, PayloadOverrun, PayloadSizeMismatch
from ctiview.models.cti_header import Compression
from ctiview.services.byte_reader import ByteReader

logger = logging.getLogger(__name__)

PACKBITS_MAX_RUN = 128

Decompressor = Callable[[bytes, int], bytes]


def decompress_none(data: bytes, expected: int) -> bytes:
    if len(data) != expected:
        raise PayloadSizeMismatch(f"Несжатая плитка: {len(data)} байт, ожидалось {expected}")
    return data


def decompress_rle(data: bytes, expected: int) -> bytes:
    """PackBits: управляющий байт n (со знаком).

    0..127   -> следующие n+1 байт копируются как есть;
    -127..-1 -> следующий байт повторяется 1-n раз;
    -128     -> пропуск.
    Обрыв внутри пакета даёт `UnexpectedEof` из `ByteReader`.
    """
    reader = ByteReader(data)
    out = bytearray()
    while reader.remaining():
        n = reader.read_u8()
        if n < 128:
            count = n + 1
            if len(out) + count > expected:
                raise PayloadOverrun(f"RLE: литерал длиной {count} выходит за {expected} байт")
            out += reader.read_bytes(count)
        elif n > 128:
            count = 257 - n
            value = reader.read_u8()
            if len(out) + count > expected:
                raise PayloadOverrun(f"RLE: серия длиной {count} выходит за {expected} байт")
            out += bytes((value,)) * count
    if len(out) != expected:
        raise PayloadSizeMismatch(f"RLE: распаковано {len(out)} байт, ожидалось {expected}")
    return bytes(out)


ZSTD_INPUT_CHUNK = 64 * 1024


def decompress_zstd(data: bytes, expected: int) -> bytes:
    """Один кадр zstd. Оборванный кадр считается повреждённым."""
    try:
        declared = zstandard.get_frame_parameters(data).content_size
    except zstandard.ZstdError as exc:
        raise PayloadCorrupt(f"zstd: {exc}") from exc
    if declared != zstandard.CONTENTSIZE_UNKNOWN:
        if declared > expected:
            raise PayloadOverrun(f"zstd: заявлено {declared} байт, ожидалось {expected}")
        if declared != expected:
            raise PayloadSizeMismatch(f"zstd: заявлено {declared} байт, ожидалось {expected}")

    # input is fed in slices so an oversized frame stops early
    dobj = zstandard.ZstdDecompressor().decompressobj()
    out = bytearray()
    try:
        for start in range(0, len(data), ZSTD_INPUT_CHUNK):
            out += dobj.decompress(data[start:start + ZSTD_INPUT_CHUNK])
            if len(out) > expected or dobj.eof:
                break
    except zstandard.ZstdError as exc:
        raise PayloadCorrupt(f"zstd: {exc}") from exc
    if len(out) > expected:
        raise PayloadOverrun(f"zstd: данные длиннее ожидаемых {expected} байт")
    if not dobj.eof:
        raise PayloadCorrupt(f"zstd: кадр оборван после {len(out)} байт")
    if len(out) != expected:
        raise PayloadSizeMismatch(f"zstd: распаковано {len(out)} байт, ожидалось {expected}")
    return bytes(out)


def decompress_lz4(data: bytes, expected: int) -> bytes:
    """LZ4 block с 4-байтовым префиксом размера (little-endian)."""
    if len(data) < 4:
        raise PayloadCorrupt("lz4: отсутствует префикс размера")
    declared = ByteReader(data[:4]).read_u32()
    if declared > expected:
        raise PayloadOverrun(f"lz4: заявлено {declared} байт, ожидалось {expected}")
    if declared != expected:
        raise PayloadSizeMismatch(f"lz4: заявлено {declared} байт, ожидалось {expected}")
    try:
        out = lz4.block.decompress(data)
    except lz4.block.LZ4BlockError as exc:
        raise PayloadCorrupt(f"lz4: {exc}") from exc
    if len(out) != expected:
        raise PayloadSizeMismatch(f"lz4: распаковано {len(out)} байт, ожидалось {expected}")
    return out


DECOMPRESSORS: Dict[Compression, Decompressor] = {
    Compression.NONE: decompress_none,
    Compression.RLE: decompress_rle,
    Compression.ZSTD: decompress_zstd,
    Compression.LZ4: decompress_lz4,
}

# LZ77, DELTA and PREDICTIVE are known ids without a decoder
SUPPORTED = frozenset(DECOMPRESSORS)


def decompress_tile(mode: Compression, data: bytes, expected: int) -> bytes:
    try:
        decompress = DECOMPRESSORS[mode]
    except KeyError:
        raise InvalidHeader(f"Сжатие {mode.label} не поддерживается просмотрщиком") from None
    logger.debug(f"Decompressing {len(data)} bytes ({mode.label}) -> {expected}")
    return decompress(data, expected)
