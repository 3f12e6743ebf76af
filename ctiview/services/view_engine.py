"""Чистый автомат состояния просмотра: события ввода -> `ViewState` -> `Transform`.

Никакого tkinter: виджет передаёт события и рисует по `visible_region`.
Состояния: Idle и Dragging; колесо и клавиши не меняют режим перетаскивания.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple, Type

from ctiview import config
from ctiview.models.view_state import Transform, ViewRegion, ViewState


# ---- Events ----
@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Scroll:
    """`notches` > 0 — приблизить, < 0 — отдалить."""
    x: float
    y: float
    notches: float


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class ImageLoaded:
    width: int
    height: int


@dataclass(frozen=True)
class FitRequested:
    pass


@dataclass(frozen=True)
class KeyPress:
    key: str


class ViewStateEngine:
    def __init__(
        self,
        min_scale: Optional[float] = None,
        max_scale: Optional[float] = None,
        zoom_step: Optional[float] = None,
        pan_step: Optional[int] = None,
    ) -> None:
        cfg = config.get_all()
        self.min_scale = min_scale if min_scale is not None else cfg["min_scale"]
        self.max_scale = max_scale if max_scale is not None else cfg["max_scale"]
        self.zoom_step = zoom_step if zoom_step is not None else cfg["zoom_step"]
        self.pan_step = pan_step if pan_step is not None else cfg["pan_step"]
        self._handlers: Dict[Type, Callable[[ViewState, object], ViewState]] = {
            PointerDown: lambda s, e: self.pointer_down(s, e.x, e.y),
            PointerMove: lambda s, e: self.pointer_move(s, e.x, e.y),
            PointerUp: lambda s, e: self.pointer_up(s),
            Scroll: lambda s, e: self.zoom_at(s, e.x, e.y, e.notches),
            Resize: lambda s, e: self.viewport_resized(s, e.width, e.height),
            ImageLoaded: lambda s, e: self.image_loaded(s, e.width, e.height),
            FitRequested: lambda s, e: self.fit(s),
            KeyPress: lambda s, e: self.key_pressed(s, e.key),
        }

    def apply(self, state: ViewState, event: object) -> ViewState:
        """Применяет одно событие ввода; неизвестный тип события — ошибка программиста."""
        try:
            handler = self._handlers[type(event)]
        except KeyError:
            raise TypeError(f"unsupported view event: {event!r}") from None
        return handler(state, event)

    # ---- Lifecycle ----
    def image_loaded(self, state: ViewState, width: int, height: int) -> ViewState:
        state = replace(state, image_width=width, image_height=height, dragging=False, anchor=None)
        return self.fit(state)

    def viewport_resized(self, state: ViewState, width: int, height: int) -> ViewState:
        state = replace(state, viewport_width=max(1, int(width)), viewport_height=max(1, int(height)))
        if state.user_adjusted:
            return state
        return self.fit(state)

    def fit(self, state: ViewState) -> ViewState:
        """Наибольший масштаб, при котором изображение целиком в окне, по центру."""
        if not state.has_image:
            return replace(state, scale=1.0, offset_x=0.0, offset_y=0.0, user_adjusted=False)
        scale = self.fit_scale(state)
        return replace(
            state,
            scale=scale,
            offset_x=(state.viewport_width - state.image_width * scale) / 2.0,
            offset_y=(state.viewport_height - state.image_height * scale) / 2.0,
            user_adjusted=False,
        )

    def fit_scale(self, state: ViewState) -> float:
        if not state.has_image:
            return 1.0
        scale = min(state.viewport_width / state.image_width, state.viewport_height / state.image_height)
        return self._clamp(scale)

    # ---- Dragging ----
    def pointer_down(self, state: ViewState, x: float, y: float) -> ViewState:
        return replace(state, dragging=True, anchor=(x, y))

    def pointer_move(self, state: ViewState, x: float, y: float) -> ViewState:
        if not state.dragging or state.anchor is None:
            return state
        ax, ay = state.anchor
        return replace(
            state,
            offset_x=state.offset_x + (x - ax),
            offset_y=state.offset_y + (y - ay),
            anchor=(x, y),
            user_adjusted=True,
        )

    def pointer_up(self, state: ViewState) -> ViewState:
        return replace(state, dragging=False, anchor=None)

    def pan_by(self, state: ViewState, dx: float, dy: float) -> ViewState:
        if not state.has_image:
            return state
        return replace(state, offset_x=state.offset_x + dx, offset_y=state.offset_y + dy, user_adjusted=True)

    # ---- Zoom ----
    def zoom_at(self, state: ViewState, x: float, y: float, notches: float = 1.0) -> ViewState:
        """Масштаб с якорем под курсором: точка изображения под (x, y) остаётся под (x, y)."""
        return self.zoom_to(state, state.scale * self.zoom_step ** notches, (x, y))

    def zoom_to(
        self, state: ViewState, scale: float, point: Optional[Tuple[float, float]] = None
    ) -> ViewState:
        if not state.has_image:
            return state
        old = state.scale
        new = self._clamp(scale)
        if abs(new - old) < 1e-9:
            return state
        if point is None:
            point = (state.viewport_width / 2.0, state.viewport_height / 2.0)
        px, py = point
        ix = (px - state.offset_x) / old
        iy = (py - state.offset_y) / old
        return replace(
            state,
            scale=new,
            offset_x=px - ix * new,
            offset_y=py - iy * new,
            user_adjusted=True,
        )

    def actual_size(self, state: ViewState) -> ViewState:
        """1:1 относительно центра окна."""
        return self.zoom_to(state, 1.0)

    # ---- Keyboard ----
    def key_pressed(self, state: ViewState, key: str) -> ViewState:
        step = self.pan_step
        cx, cy = state.viewport_width / 2.0, state.viewport_height / 2.0
        if key in ("plus", "equal", "+", "=", "KP_Add"):
            return self.zoom_at(state, cx, cy, 1)
        if key in ("minus", "-", "KP_Subtract"):
            return self.zoom_at(state, cx, cy, -1)
        if key in ("0", "KP_0"):
            return self.actual_size(state)
        if key in ("f", "F"):
            return self.fit(state)
        # arrows move the view, i.e. the image goes the other way
        arrows = {"Left": (step, 0), "Right": (-step, 0), "Up": (0, step), "Down": (0, -step)}
        if key in arrows:
            dx, dy = arrows[key]
            return self.pan_by(state, dx, dy)
        return state

    # ---- Output ----
    def transform(self, state: ViewState) -> Transform:
        return Transform(scale=state.scale, translate_x=state.offset_x, translate_y=state.offset_y)

    def visible_region(self, state: ViewState) -> Optional[ViewRegion]:
        """Часть изображения, попадающая в окно, и её экранный прямоугольник.

        Возвращает None, если изображение целиком вне окна или не загружено.
        """
        if not state.has_image:
            return None
        s = state.scale
        left = max(0, math.floor(-state.offset_x / s))
        top = max(0, math.floor(-state.offset_y / s))
        right = min(state.image_width, math.ceil((state.viewport_width - state.offset_x) / s))
        bottom = min(state.image_height, math.ceil((state.viewport_height - state.offset_y) / s))
        if right <= left or bottom <= top:
            return None
        dest_x = int(round(state.offset_x + left * s))
        dest_y = int(round(state.offset_y + top * s))
        return ViewRegion(
            box=(left, top, right, bottom),
            dest_x=dest_x,
            dest_y=dest_y,
            dest_width=max(1, int(round(state.offset_x + right * s)) - dest_x),
            dest_height=max(1, int(round(state.offset_y + bottom * s)) - dest_y),
        )

    def image_point(self, state: ViewState, sx: float, sy: float) -> Optional[Tuple[int, int]]:
        """Пиксель изображения под экранной точкой или None вне изображения."""
        if not state.has_image:
            return None
        ix, iy = self.transform(state).to_image(sx, sy)
        x, y = math.floor(ix), math.floor(iy)
        if 0 <= x < state.image_width and 0 <= y < state.image_height:
            return x, y
        return None

    def _clamp(self, scale: float) -> float:
        return max(self.min_scale, min(self.max_scale, scale))
