"""Боковая панель: открытие файла, информация о заголовке CTI, курсор.

Принципы:
- SRP: управляет только UI, не содержит логики декодирования.
- ISP: события через `on_*`, обновление через компактные методы `set_*`/`update_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk

from ctiview.models.cti_header import describe_compression, flags_summary
from ctiview.models.image_model import ImageData


def _rgba_to_hex(rgba: Tuple[int, int, int, int]) -> str:
    """Преобразует RGBA в HEX (без альфа)."""
    r, g, b, _a = rgba
    return f"#{r:02X}{g:02X}{b:02X}"


class Sidebar(ctk.CTkFrame):
    """Панель с блоками: файл, информация, курсор, канал."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_file: Optional[Callable[[], None]] = None

        # Controls
        self._title = ctk.CTkLabel(self, text="Файл", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btn = ctk.CTkButton(self, text="Открыть CTI…", command=self._emit_open_file)
        self._open_btn.grid(row=1, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Info section
        self._info_title = ctk.CTkLabel(self, text="Информация", font=ctk.CTkFont(size=16, weight="bold"))
        self._info_title.grid(row=2, column=0, padx=8, pady=(8, 4), sticky="w")

        self._info_vars = {}
        info_rows = ("path", "size", "dims", "color", "compression", "tiles", "version", "flags", "warnings")
        for offset, key in enumerate(info_rows):
            var = ctk.StringVar(value="—")
            label = ctk.CTkLabel(self, textvariable=var, wraplength=250, anchor="w", justify="left")
            label.grid(row=3 + offset, column=0, padx=8, pady=(0, 2), sticky="ew")
            self._info_vars[key] = var

        # Cursor section
        self._cursor_title = ctk.CTkLabel(self, text="Курсор", font=ctk.CTkFont(size=16, weight="bold"))
        self._cursor_title.grid(row=20, column=0, padx=8, pady=(8, 4), sticky="w")

        self._cursor_xy_val = ctk.StringVar(value="—")
        self._cursor_rgba_val = ctk.StringVar(value="—")
        self._cursor_hex_val = ctk.StringVar(value="—")

        self._cursor_xy = ctk.CTkLabel(self, textvariable=self._cursor_xy_val, anchor="w", justify="left")
        self._cursor_rgba = ctk.CTkLabel(self, textvariable=self._cursor_rgba_val, anchor="w", justify="left")
        self._cursor_hex = ctk.CTkLabel(self, textvariable=self._cursor_hex_val, anchor="w", justify="left")

        self._cursor_xy.grid(row=21, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._cursor_rgba.grid(row=22, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._cursor_hex.grid(row=23, column=0, padx=8, pady=(0, 2), sticky="ew")

        # Channel section
        self._channel_title = ctk.CTkLabel(self, text="Канал", font=ctk.CTkFont(size=16, weight="bold"))
        self._channel_title.grid(row=30, column=0, padx=8, pady=(8, 4), sticky="w")
        self._channel_val = ctk.StringVar(value="—")
        self._channel_info = ctk.CTkLabel(self, textvariable=self._channel_val, anchor="w", justify="left")
        self._channel_info.grid(row=31, column=0, padx=8, pady=(0, 8), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

    # ---- Public API ----
    def set_image_info(self, image_data: ImageData) -> None:
        """Отображает метаданные загруженного файла и его заголовка."""
        h = image_data.header
        v = self._info_vars
        v["path"].set(str(image_data.path))
        v["size"].set(self._format_size(image_data.size_bytes))
        v["dims"].set(f"{h.width} × {h.height} px")
        v["color"].set(
            f"Цвет: {h.color_type.name} ({h.color_type.channels} кан., {h.color_type.bit_depth} бит)"
        )
        v["compression"].set(f"Сжатие: {describe_compression(h.compression)}")
        v["tiles"].set(f"Плитки: {h.tiles_x} × {h.tiles_y} (плитка {h.tile_size})")
        v["version"].set(f"Версия: {h.version}, качество: {h.quality}")
        v["flags"].set(f"Флаги: {flags_summary(h.flags)}")
        warnings = image_data.image.warnings
        v["warnings"].set(f"Предупреждения: {len(warnings)}" if warnings else "Предупреждений нет")

    def update_cursor_info(self, x: Optional[int], y: Optional[int], rgba: Optional[Tuple[int, int, int, int]]) -> None:
        """Обновляет информацию по курсору (координаты, RGBA, HEX)."""
        if x is None or y is None or rgba is None:
            self._cursor_xy_val.set("—")
            self._cursor_rgba_val.set("—")
            self._cursor_hex_val.set("—")
            return
        self._cursor_xy_val.set(f"({x}, {y})")
        r, g, b, a = rgba
        self._cursor_rgba_val.set(f"RGBA: {r}, {g}, {b}, {a}")
        self._cursor_hex_val.set(f"HEX: {_rgba_to_hex(rgba)}")

    def set_channel_stats(self, channel: str, stats: Tuple[int, int, float]) -> None:
        lo, hi, mean = stats
        self._channel_val.set(f"{channel}: min {lo}, max {hi}, среднее {mean:.1f}")

    # ---- Events ----
    def _emit_open_file(self) -> None:
        if self.on_open_file:
            self.on_open_file()

    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        value = size_bytes / (1024**4)
        return f"{value:.1f} ГБ"
