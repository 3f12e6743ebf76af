"""Курсор по неизменяемому буферу байтов с проверкой границ.

Каждое чтение за пределами буфера поднимает `UnexpectedEof` и не сдвигает
курсор. Это единственная точка, через которую парсер читает файл.
"""
from __future__ import annotations

import struct
from typing import Dict, Tuple

from ctiview.errors import UnexpectedEof

_STRUCTS: Dict[Tuple[str, int], struct.Struct] = {
    (endian, size): struct.Struct(("<" if endian == "little" else ">") + code)
    for endian in ("little", "big")
    for size, code in ((1, "B"), (2, "H"), (4, "I"), (8, "Q"))
}


class ByteReader:
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data)

    # ---- Cursor ----
    def position(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def seek(self, pos: int) -> None:
        """Переставляет курсор; позиция, равная длине буфера, допустима (пустой остаток)."""
        if pos < 0:
            raise ValueError(f"negative position: {pos}")
        if pos > len(self._data):
            raise UnexpectedEof(
                f"Переход на позицию {pos} за концом данных ({len(self._data)} байт)",
                position=self._pos,
                requested=pos - self._pos,
                available=self.remaining(),
            )
        self._pos = pos

    def skip(self, n: int) -> None:
        self._require(n)
        self._pos += n

    # ---- Primitive reads ----
    def read_u8(self) -> int:
        return self._unpack(1, "little")

    def read_u16(self, endian: str = "little") -> int:
        return self._unpack(2, endian)

    def read_u32(self, endian: str = "little") -> int:
        return self._unpack(4, endian)

    def read_u64(self, endian: str = "little") -> int:
        return self._unpack(8, endian)

    def read_bytes(self, n: int) -> bytes:
        self._require(n)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def sub_reader(self, n: int) -> "ByteReader":
        """Отдельный курсор по следующим `n` байтам (основной курсор сдвигается)."""
        return ByteReader(self.read_bytes(n))

    # ---- Internals ----
    def _require(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"negative read size: {n}")
        if n > self.remaining():
            raise UnexpectedEof(
                f"Требуется {n} байт на позиции {self._pos}, доступно {self.remaining()}",
                position=self._pos,
                requested=n,
                available=self.remaining(),
            )

    def _unpack(self, size: int, endian: str) -> int:
        try:
            fmt = _STRUCTS[(endian, size)]
        except KeyError:
            raise ValueError(f"unknown endianness: {endian!r}") from None
        self._require(size)
        (value,) = fmt.unpack_from(self._data, self._pos)
        self._pos += size
        return value
