"""Исключения генератора.

Ошибки проверки входных данных наследуются от `ValueError`, ошибки файловой
системы от `OSError`, чтобы вызывающий код мог ловить их привычными типами.
"""
from __future__ import annotations

from typing import Optional


class InvalidTargetError(ValueError):
    """Целевой размер не положителен."""


class UnsupportedFormatError(ValueError):
    """Формат изображения не поддерживается."""


class CLIValidationError(ValueError):
    """Неверный аргумент командной строки."""


class FileNameValidationError(ValueError):
    """Недопустимое имя файла."""


class FileSystemError(OSError):
    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message
