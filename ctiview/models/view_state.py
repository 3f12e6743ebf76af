"""Состояние просмотра: масштаб, сдвиг, размер окна и перетаскивание.

Принципы:
- SRP: только данные; переходы живут в `ViewStateEngine`.
- Неизменяемость: каждый переход возвращает новый экземпляр.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ViewState:
    """Fields:
        scale: Экранных пикселей на пиксель изображения.
        offset_x, offset_y: Экранная позиция начала координат изображения.
        viewport_width, viewport_height: Размер области отрисовки, px.
        image_width, image_height: Размер изображения, px (0 — нет изображения).
        dragging: Идёт перетаскивание.
        anchor: Последняя точка указателя при перетаскивании.
        user_adjusted: Пользователь менял масштаб/сдвиг после загрузки или «Fit».
    """
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    viewport_width: int = 1
    viewport_height: int = 1
    image_width: int = 0
    image_height: int = 0
    dragging: bool = False
    anchor: Optional[Tuple[float, float]] = None
    user_adjusted: bool = False

    @property
    def mode(self) -> str:
        return "Dragging" if self.dragging else "Idle"

    @property
    def has_image(self) -> bool:
        return self.image_width > 0 and self.image_height > 0

    @property
    def zoom_percent(self) -> int:
        return int(round(self.scale * 100))


@dataclass(frozen=True)
class Transform:
    """Аффинное отображение «изображение -> экран»: screen = image * scale + translate."""
    scale: float
    translate_x: float
    translate_y: float

    def to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale + self.translate_x, y * self.scale + self.translate_y

    def to_image(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.translate_x) / self.scale, (sy - self.translate_y) / self.scale


@dataclass(frozen=True)
class ViewRegion:
    """Видимая часть изображения и куда её рисовать.

    Fields:
        box: (left, top, right, bottom) в пикселях изображения, для `Image.crop`.
        dest_x, dest_y: Экранная позиция левого верхнего угла.
        dest_width, dest_height: Экранный размер после масштабирования.
    """
    box: Tuple[int, int, int, int]
    dest_x: int
    dest_y: int
    dest_width: int
    dest_height: int
