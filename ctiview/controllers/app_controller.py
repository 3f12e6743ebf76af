"""Контроллер приложения: оркестрация UI и сервисов.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без логики декодирования).
- DIP: зависит от сервисов как от абстрактных ролей; конкретные реализации инкапсулированы.
Clean Code:
- Обработчики компактны; тяжёлая логика вынесена в сервисы.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import filedialog, messagebox, TclError
from typing import Optional, Tuple

import customtkinter as ctk

from ctiview.errors import DecodeError
from ctiview.models.image_model import ImageData
from ctiview.services.display_service import DisplayService
from ctiview.services.image_service import ImageService
from ctiview.ui.image_viewer import ImageViewer
from ctiview.ui.sidebar import Sidebar
from ctiview.ui.bottom_bar import BottomBar

logger = logging.getLogger(__name__)


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка и декодирование файлов через `ImageService`.
    - Показ ошибок без потери ранее открытого изображения.
    - Синхронизация масштаба и выбранного канала.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk

    _image_service: ImageService = field(default_factory=ImageService)
    _display_service: DisplayService = field(default_factory=DisplayService)
    _current_image: Optional[ImageData] = None
    _channel: str = "RGBA"
    _last_dir: Optional[Path] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами.

        Сохраняет слабую связность: компоненты UI ничего не знают друг о друге,
        общаются через контроллер.
        """
        self.sidebar.on_open_file = self._handle_open_file
        self.viewer.on_cursor_move = self._handle_cursor_move
        self.viewer.on_zoom_change = self._handle_viewer_zoom_changed

        self.bottom.on_zoom_change = self._handle_zoom_change
        self.bottom.on_zoom_fit = self._handle_zoom_fit
        self.bottom.on_zoom_actual = self._handle_zoom_actual
        self.bottom.on_zoom_step = self._handle_zoom_step
        self.bottom.on_channel_change = self._handle_channel_change

        self.window.bind("<Control-o>", lambda _e: self._handle_open_file())
        self.window.bind("<Control-Key-0>", lambda _e: self._handle_zoom_actual())

    def open_path(self, file_path: str | Path) -> bool:
        """Открывает файл; при ошибке показывает диалог и оставляет текущее изображение."""
        path = Path(file_path)
        try:
            image_data = self._image_service.load_image(path)
        except (DecodeError, OSError) as exc:
            logger.error(f"Failed to open {path}: {exc}")
            messagebox.showerror("Ошибка открытия", f"{path.name}\n\n{exc}", parent=self.window)
            return False

        self._last_dir = path.parent
        self._current_image = image_data
        self._show_current(reset_view=True)
        self.sidebar.set_image_info(image_data)
        self.bottom.set_controls_enabled(True)
        self.window.title(f"CTI View — {path.name}")

        if image_data.image.warnings:
            messagebox.showwarning(
                "Контрольная сумма",
                "Изображение открыто, но проверка CRC не прошла:\n\n" + "\n".join(image_data.image.warnings),
                parent=self.window,
            )
        return True

    # ---- Handlers ----
    def _handle_open_file(self) -> None:
        try:
            file_path = filedialog.askopenfilename(
                title="Выберите файл CTI",
                initialdir=str(self._last_dir) if self._last_dir else None,
                filetypes=(
                    ("CTI images", "*.cti"),
                    ("All files", "*.*"),
                ),
            )
        except TclError:
            # Silent fail if dialog cannot open
            logger.warning("File dialog could not be opened")
            return

        if not file_path:
            return
        self.open_path(file_path)

    def _handle_zoom_change(self, zoom_percent: int) -> None:
        self.viewer.set_zoom_percent(zoom_percent)

    def _handle_cursor_move(self, x: Optional[int], y: Optional[int], rgba: Optional[Tuple[int, int, int, int]]) -> None:
        self.sidebar.update_cursor_info(x, y, rgba)

    def _handle_viewer_zoom_changed(self, zoom_percent: int) -> None:
        self.bottom.set_zoom_percent(zoom_percent)

    def _handle_zoom_fit(self) -> None:
        self.viewer.set_zoom_to_fit()

    def _handle_zoom_actual(self) -> None:
        self.viewer.set_zoom_actual()

    def _handle_zoom_step(self, notches: int) -> None:
        self.viewer.zoom_step(notches)

    def _handle_channel_change(self, channel: str) -> None:
        self._channel = channel
        self._show_current(reset_view=False)

    # ---- Helpers ----
    def _show_current(self, reset_view: bool) -> None:
        """Передаёт текущее изображение в просмотрщик в выбранном канале."""
        if self._current_image is None:
            return
        src = self._current_image.pil_image
        display = self._display_service.render_channel(src, self._channel)
        if reset_view:
            self.viewer.set_image(src, display)
        else:
            self.viewer.set_display_image(display)
        self.sidebar.set_channel_stats(self._channel, self._display_service.channel_stats(src, self._channel))
        self.bottom.set_zoom_percent(self.viewer.get_zoom_percent())
