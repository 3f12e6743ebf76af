"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from ctiview.models.cti_header import CtiHeader

CANONICAL_FORMAT = "RGBA8"
CANONICAL_BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class DecodedImage:
    """Результат успешного декодирования в каноническом формате.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        pixels: RGBA8, row-major, ровно `width * height * 4` байт.
        header: Заголовок исходного файла (для панели информации).
        warnings: Нефатальные замечания декодера (например, несовпадение CRC).
        pixel_format: Тег канонического формата.
    """
    width: int
    height: int
    pixels: bytes
    header: CtiHeader
    warnings: Tuple[str, ...] = ()
    pixel_format: str = CANONICAL_FORMAT

    def __post_init__(self) -> None:
        expected = self.width * self.height * CANONICAL_BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(f"pixel buffer is {len(self.pixels)} bytes, expected {expected}")

    def as_array(self) -> np.ndarray:
        """Только для чтения: массив (height, width, 4) поверх буфера."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.height, self.width, 4)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        off = (y * self.width + x) * CANONICAL_BYTES_PER_PIXEL
        r, g, b, a = self.pixels[off:off + 4]
        return r, g, b, a

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.pixels)


@dataclass(frozen=True)
class ImageData:
    """Открытый документ: декодированное изображение и метаданные файла.

    Fields:
        path: Путь к исходному файлу.
        image: Декодированное изображение.
        pil_image: То же изображение как `PIL.Image` (RGBA) для отрисовки.
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    image: DecodedImage
    pil_image: Image.Image
    size_bytes: Optional[int]

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def header(self) -> CtiHeader:
        return self.image.header
