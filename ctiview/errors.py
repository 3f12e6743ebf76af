"""Ошибки декодирования CTI.

Все ошибки разбора наследуют `DecodeError` (а значит и `ValueError`), чтобы
контроллер мог перехватить их одним `except` и показать пользователю.
"""
from __future__ import annotations


class DecodeError(ValueError):
    """Базовая ошибка декодирования; `kind` совпадает с именем класса."""

    kind = "DecodeError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class UnexpectedEof(DecodeError):
    kind = "UnexpectedEof"

    def __init__(self, message: str, position: int = 0, requested: int = 0, available: int = 0) -> None:
        super().__init__(message)
        self.position = position
        self.requested = requested
        self.available = available


class InvalidMagic(DecodeError):
    kind = "InvalidMagic"


class UnsupportedVersion(DecodeError):
    kind = "UnsupportedVersion"


class InvalidHeader(DecodeError):
    kind = "InvalidHeader"


class PayloadSizeMismatch(DecodeError):
    kind = "PayloadSizeMismatch"


class PayloadOverrun(DecodeError):
    kind = "PayloadOverrun"


class PayloadCorrupt(DecodeError):
    kind = "PayloadCorrupt"


class ChecksumMismatch(DecodeError):
    kind = "ChecksumMismatch"

    def __init__(self, message: str, tile: int = -1, expected: int = 0, actual: int = 0) -> None:
        super().__init__(message)
        self.tile = tile
        self.expected = expected
        self.actual = actual


class PaletteIndexOutOfRange(DecodeError):
    kind = "PaletteIndexOutOfRange"
