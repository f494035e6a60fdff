"""Модель сохранённого файла."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SavedFile:
    """Сведения о записанном на диск изображении.

    Fields:
        name: Имя файла с расширением.
        path: Абсолютный путь.
        size: Размер на диске, байт.
    """
    name: str
    path: Path
    size: int
