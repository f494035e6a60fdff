"""Вспомогательные функции: перевод единиц, форматирование размеров, имена по умолчанию."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

BYTES_PER_MB = 1024 * 1024
_UNITS = ("B", "KB", "MB", "GB", "TB")


def mb_to_bytes(mb: float) -> float:
    return mb * BYTES_PER_MB


def bytes_to_mb(size_bytes: float) -> float:
    return size_bytes / BYTES_PER_MB


def format_size_mb(value: float) -> str:
    """Форматирует число мегабайт без лишнего ".0": 1.0 -> "1", 1.5 -> "1.5"."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_file_size(size_bytes: int) -> str:
    """Переводит число байт в человекочитаемую строку.

    Байты выводятся без дробной части, остальные единицы с двумя знаками.
    Значения больше терабайта остаются в TB.

    Raises:
        ValueError: если размер отрицательный.
    """
    if size_bytes < 0:
        raise ValueError(f"File size must be non-negative, got {size_bytes}")
    if size_bytes == 0:
        return "0 B"

    i = 0
    size = float(size_bytes)
    while size >= 1024 and i < len(_UNITS) - 1:
        size /= 1024
        i += 1
    if i == 0:
        return f"{size:.0f} {_UNITS[i]}"
    return f"{size:.2f} {_UNITS[i]}"


def generate_default_name(size_mb: float, now: Optional[datetime] = None) -> str:
    """Имя файла по умолчанию: "{размер}MB-YYYY-MM-DD-HH_mm_ss" (без расширения).

    Двоеточия заменены подчёркиваниями, чтобы имя было допустимо в Windows.
    """
    if size_mb <= 0:
        raise ValueError(f"Size must be greater than 0, got {size_mb}")
    now = now or datetime.now()
    return f"{format_size_mb(size_mb)}MB-{now:%Y-%m-%d-%H_%M_%S}"
