from __future__ import annotations

import numpy as np
from PIL import Image

CHANNEL_MODES = ("RGBA", "RGB", "R", "G", "B", "A")


class DisplayService:
    def render_channel(self, image: Image.Image, channel: str) -> Image.Image:
        """
        Подготовка изображения к показу в выбранном канале.
        RGBA — как есть, RGB — без альфы, R/G/B/A — отдельный канал в оттенках серого (L).
        """
        if channel not in CHANNEL_MODES:
            raise ValueError(f"Неизвестный канал: {channel}")
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        if channel == "RGBA":
            return rgba
        if channel == "RGB":
            return rgba.convert("RGB")
        arr = np.asarray(rgba, dtype=np.uint8)
        plane = np.ascontiguousarray(arr[:, :, "RGBA".index(channel)])
        return Image.fromarray(plane)  # 2-D uint8 -> "L"

    def channel_stats(self, image: Image.Image, channel: str) -> tuple[int, int, float]:
        """
        Минимум, максимум и среднее значение канала (0..255) для панели информации.
        Для RGBA/RGB — по яркости (L).
        """
        if channel in ("RGBA", "RGB"):
            arr = np.asarray(image.convert("L"), dtype=np.float32)
        else:
            arr = np.asarray(self.render_channel(image, channel), dtype=np.float32)
        if arr.size == 0:
            return 0, 0, 0.0
        return int(arr.min()), int(arr.max()), float(arr.mean())
