"""Загрузка файлов CTI с диска и упаковка метаданных.

Принципы:
- SRP: класс отвечает только за чтение файла и вызов декодера.
- OCP: новые источники (буфер, поток) можно добавить отдельными методами.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ctiview.models.cti_header import CtiHeader
from ctiview.models.image_model import ImageData
from ctiview.services.cti_decoder import CtiDecoder

logger = logging.getLogger(__name__)


class ImageService:
    def __init__(self, decoder: Optional[CtiDecoder] = None) -> None:
        self._decoder = decoder or CtiDecoder()

    def load_image(self, file_path: str | Path) -> ImageData:
        """Читает и декодирует файл CTI, возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла `.cti`.

        Returns:
            `ImageData` c `DecodedImage`, `PIL.Image.Image` (в режиме RGBA) и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeError: если файл повреждён или не является CTI.
        """
        path = self._existing_file(file_path)
        buffer = path.read_bytes()
        logger.info(f"Opening {path.name} ({len(buffer)} bytes)")

        image = self._decoder.decode(buffer)
        return ImageData(
            path=path,
            image=image,
            pil_image=image.to_pil(),
            size_bytes=len(buffer),
        )

    def read_info(self, file_path: str | Path) -> CtiHeader:
        """Только заголовок файла, без распаковки плиток."""
        path = self._existing_file(file_path)
        return self._decoder.read_header(path.read_bytes())

    def _existing_file(self, file_path: str | Path) -> Path:
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")
        return path
