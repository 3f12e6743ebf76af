"""Виджет просмотра изображений: масштабирование, панорамирование, «вписать в окно».

Принципы:
- SRP: отвечает только за представление; вся математика масштаба в `ViewStateEngine`.
- Чистый код: чёткое разделение публичного API и внутренних обработчиков событий.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from ctiview import config
from ctiview.models.view_state import ViewState
from ctiview.services.view_engine import (
    FitRequested,
    ImageLoaded,
    KeyPress,
    PointerDown,
    PointerMove,
    PointerUp,
    Resize,
    Scroll,
    ViewStateEngine,
)

_RESAMPLE = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "lanczos": Image.Resampling.LANCZOS,
}


class ImageViewer(ctk.CTkFrame):
    """Канва, которая рисует изображение по текущему `ViewState`."""
    def __init__(self, master: ctk.CTk | tk.Misc, engine: Optional[ViewStateEngine] = None, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._engine = engine or ViewStateEngine()
        self._state = ViewState()

        self._source_image: Optional[Image.Image] = None   # RGBA, for sampling
        self._display_image: Optional[Image.Image] = None  # channel view actually drawn
        self._tk_image: Optional[ImageTk.PhotoImage] = None

        self.on_cursor_move: Optional[Callable[[Optional[int], Optional[int], Optional[Tuple[int, int, int, int]]], None]] = None
        self.on_zoom_change: Optional[Callable[[int], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)
        self._canvas.bind("<Motion>", self._on_mouse_move)
        self._canvas.bind("<Leave>", self._on_mouse_leave)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

        # Panning with left mouse drag
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._canvas.bind("<ButtonRelease-1>", self._on_pan_end)

        self._canvas.bind("<KeyPress>", self._on_key)

    # ---- Public API ----
    def set_image(self, image: Image.Image, display: Optional[Image.Image] = None) -> None:
        """Устанавливает новое изображение и сбрасывает вид на «вписать в окно»."""
        self._source_image = image if image.mode == "RGBA" else image.convert("RGBA")
        self._display_image = display or self._source_image
        self._dispatch(ImageLoaded(*self._source_image.size))

    def set_display_image(self, display: Image.Image) -> None:
        """Меняет только то, что рисуется (например, отдельный канал); вид не сбрасывается."""
        self._display_image = display
        self._render_image()

    def set_zoom_to_fit(self) -> None:
        self._dispatch(FitRequested())

    def set_zoom_percent(self, zoom_percent: int) -> None:
        """Устанавливает масштаб в процентах относительно центра окна."""
        self._update_state(self._engine.zoom_to(self._state, zoom_percent / 100.0))

    def set_zoom_actual(self) -> None:
        """1:1 относительно центра окна."""
        self._update_state(self._engine.actual_size(self._state))

    def zoom_step(self, notches: int) -> None:
        """Шаг масштаба кнопками «+»/«−» относительно центра окна."""
        cx = self._state.viewport_width / 2.0
        cy = self._state.viewport_height / 2.0
        self._dispatch(Scroll(cx, cy, notches))

    def get_zoom_percent(self) -> int:
        return self._state.zoom_percent

    @property
    def view_state(self) -> ViewState:
        return self._state

    # ---- Internals ----
    def _dispatch(self, event: object) -> None:
        self._update_state(self._engine.apply(self._state, event))

    def _update_state(self, new_state: ViewState) -> None:
        zoom_changed = new_state.scale != self._state.scale
        self._state = new_state
        self._render_image()
        if zoom_changed and self.on_zoom_change:
            self.on_zoom_change(self.get_zoom_percent())

    def _on_canvas_resize(self, event: tk.Event) -> None:
        self._dispatch(Resize(event.width, event.height))

    def _render_image(self) -> None:
        self._canvas.delete("all")
        if self._display_image is None:
            self._tk_image = None
            return

        region = self._engine.visible_region(self._state)
        if region is None:
            self._tk_image = None
            return

        resample = _RESAMPLE.get(config.get_all()["resample"], Image.Resampling.BILINEAR)
        if self._state.scale >= 1.0 and resample is not Image.Resampling.NEAREST:
            # magnified pixels stay crisp
            resample = Image.Resampling.NEAREST
        crop = self._display_image.crop(region.box)
        resized = crop.resize((region.dest_width, region.dest_height), resample)

        self._tk_image = ImageTk.PhotoImage(resized)
        self._canvas.create_image(region.dest_x, region.dest_y, image=self._tk_image, anchor="nw")

    def _on_mouse_move(self, event: tk.Event) -> None:
        if self._source_image is None or self.on_cursor_move is None:
            return
        point = self._engine.image_point(self._state, event.x, event.y)
        if point is None:
            self.on_cursor_move(None, None, None)
            return
        x, y = point
        self.on_cursor_move(x, y, self._source_image.getpixel((x, y)))

    def _on_mouse_leave(self, _event: tk.Event) -> None:
        if self.on_cursor_move:
            self.on_cursor_move(None, None, None)

    def _get_canvas_bg(self) -> str:
        # Soft checker-like color; CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if self._source_image is None:
            return
        delta = event.delta
        if delta == 0:
            return
        self._dispatch(Scroll(event.x, event.y, 1 if delta > 0 else -1))

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        if self._source_image is None:
            return
        notches = 1 if getattr(event, "num", None) == 4 else -1
        self._dispatch(Scroll(event.x, event.y, notches))

    # ---- Panning ----
    def _on_pan_start(self, event: tk.Event) -> None:
        self._canvas.focus_set()
        if self._source_image is None:
            return
        self._dispatch(PointerDown(event.x, event.y))

    def _on_pan_move(self, event: tk.Event) -> None:
        if not self._state.dragging:
            return
        self._dispatch(PointerMove(event.x, event.y))

    def _on_pan_end(self, event: tk.Event) -> None:
        self._dispatch(PointerUp(event.x, event.y))

    def _on_key(self, event: tk.Event) -> str | None:
        if self._source_image is None:
            return None
        before = self._state
        self._dispatch(KeyPress(event.keysym))
        return "break" if self._state is not before else None
