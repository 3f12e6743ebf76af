"""Приведение сырых сэмплов CTI к каноническому формату RGBA8.

Политика битности: сэмплы 16 и 32 бит урезаются до старших 8 бит
(`v >> 8`, `v >> 24`). Потеря точности осознанная и одинаковая для всех
цветовых типов. Сэмплы читаются как little-endian.

Результат всегда row-major, без выравнивания строк, длиной ровно
`width * height * 4` байт.
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ctiview.errors import InvalidHeader, PaletteIndexOutOfRange
from ctiview.models.cti_header import ColorType, CtiHeader, Palette
from ctiview.models.image_model import DecodedImage

_SAMPLE_DTYPES = {8: np.dtype("u1"), 16: np.dtype("<u2"), 32: np.dtype("<u4")}


class PixelNormalizer:
    def normalize(
        self,
        raw: bytes | bytearray,
        header: CtiHeader,
        palette: Optional[Palette] = None,
        warnings: Tuple[str, ...] = (),
    ) -> DecodedImage:
        """Преобразует сырой буфер всего изображения в `DecodedImage` (RGBA8)."""
        color = header.color_type
        if len(raw) != header.raw_size:
            raise ValueError(f"raw buffer is {len(raw)} bytes, expected {header.raw_size}")

        samples = self._to_8bit(raw, color.bit_depth)
        samples = samples.reshape(header.height, header.width, color.channels)
        rgba = self._to_rgba(samples, color, palette)

        return DecodedImage(
            width=header.width,
            height=header.height,
            pixels=rgba.tobytes(),
            header=header,
            warnings=warnings,
        )

    def inverse_rct(self, tile: bytes, color: ColorType) -> bytes:
        """Обратное обратимое цветовое преобразование (YCbCr-подобное) для RGB8/RGB16.

        y хранится без знака, cb/cr — со знаком той же разрядности:
        g = y - ((cb + cr) >> 2), r = cr + g, b = cb + g, с ограничением диапазона.
        """
        if color is ColorType.RGB8:
            unsigned, signed, top = np.dtype("u1"), np.dtype("i1"), 255
        elif color is ColorType.RGB16:
            unsigned, signed, top = np.dtype("<u2"), np.dtype("<i2"), 65535
        else:
            raise ValueError(f"RCT is defined only for RGB8/RGB16, got {color.name}")

        px_u = np.frombuffer(tile, dtype=unsigned).reshape(-1, 3)
        px_s = np.frombuffer(tile, dtype=signed).reshape(-1, 3)
        y = px_u[:, 0].astype(np.int32)
        cb = px_s[:, 1].astype(np.int32)
        cr = px_s[:, 2].astype(np.int32)

        g = y - ((cb + cr) >> 2)
        r = cr + g
        b = cb + g
        out = np.stack([r, g, b], axis=1)
        return np.clip(out, 0, top).astype(unsigned).tobytes()

    # ---------- Вспомогательные функции ----------
    def _to_8bit(self, raw: bytes | bytearray, depth: int) -> np.ndarray:
        try:
            dtype = _SAMPLE_DTYPES[depth]
        except KeyError:
            raise InvalidHeader(f"Неподдерживаемая битность канала: {depth}") from None
        arr = np.frombuffer(bytes(raw), dtype=dtype)
        if depth == 8:
            return arr
        return (arr >> (depth - 8)).astype(np.uint8)

    def _to_rgba(self, samples: np.ndarray, color: ColorType, palette: Optional[Palette]) -> np.ndarray:
        h, w, _c = samples.shape
        layout = color.layout

        if layout == "P":
            return self._apply_palette(samples[:, :, 0], palette)

        out = np.empty((h, w, 4), dtype=np.uint8)
        out[:, :, 3] = 255
        if layout == "L":
            out[:, :, :3] = samples[:, :, 0:1]
        elif layout == "LA":
            out[:, :, :3] = samples[:, :, 0:1]
            out[:, :, 3] = samples[:, :, 1]
        else:
            for dst, name in enumerate("RGBA"):
                idx = layout.find(name)
                if idx >= 0:
                    out[:, :, dst] = samples[:, :, idx]
        return out

    def _apply_palette(self, indices: np.ndarray, palette: Optional[Palette]) -> np.ndarray:
        if palette is None or palette.size == 0:
            raise InvalidHeader("Индексированное изображение без палитры")
        table = np.frombuffer(palette.entries, dtype=np.uint8).reshape(-1, 4)
        if indices.size:
            top = int(indices.max())
            if top >= palette.size:
                y, x = np.argwhere(indices == top)[0]
                raise PaletteIndexOutOfRange(
                    f"Индекс палитры {top} в точке ({x}, {y}) вне таблицы из {palette.size} записей"
                )
        return table[indices]
