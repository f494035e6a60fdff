"""Модели данных генерации изображения заданного размера.

Принципы:
- SRP: только структуры данных и их собственная проверка, без рендеринга.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости; состояние
  цикла подбора передаётся явной записью `LoopState`, а не скрытыми полями.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from imagegen import config
from imagegen.errors import InvalidTargetError, UnsupportedFormatError
from imagegen.utils import bytes_to_mb, mb_to_bytes


def normalize_format(image_format: str) -> str:
    """Приводит формат к нижнему регистру и проверяет, что он поддерживается.

    Raises:
        UnsupportedFormatError: если формат не входит в jpg, jpeg, png.
    """
    normalized = str(image_format).strip().lower()
    if normalized not in config.SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported format: {image_format}. "
            f"Supported formats: {', '.join(config.SUPPORTED_FORMATS)}"
        )
    return normalized


def is_jpeg_format(image_format: str) -> bool:
    return image_format.lower() in config.JPEG_FORMATS


@dataclass(frozen=True)
class GenerationConfig:
    """Неизменяемые параметры одной генерации.

    Fields:
        target_size_mb: Целевой размер файла, МБ (1 МБ = 1024 * 1024 байт).
        format: Формат вывода: jpg, jpeg или png (регистр не важен).
        background_color: Цвет фона, например "#ffffff".
        text_color: Цвет подписи.
        font_family: Шрифт (путь или имя TrueType); None выбирает рендерер.
        max_iterations: Предел числа попыток рендеринга.
        tolerance: Допустимое относительное отклонение, (0, 1).
    """
    target_size_mb: float
    format: str = "jpg"
    background_color: str = config.DEFAULT_BACKGROUND_COLOR
    text_color: str = config.DEFAULT_TEXT_COLOR
    font_family: Optional[str] = config.DEFAULT_FONT_FAMILY
    max_iterations: int = config.DEFAULT_MAX_ITERATIONS
    tolerance: float = config.DEFAULT_TOLERANCE

    def validate(self) -> "GenerationConfig":
        """Проверяет параметры и возвращает копию с нормализованным форматом.

        Raises:
            InvalidTargetError: если `target_size_mb <= 0`.
            UnsupportedFormatError: если формат не поддерживается.
            ValueError: если `max_iterations` или `tolerance` вне допустимых границ.
        """
        if not self.target_size_mb > 0:
            raise InvalidTargetError("Target size must be greater than 0")
        normalized = normalize_format(self.format)
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if not 0 < self.tolerance < 1:
            raise ValueError(f"tolerance must be in (0, 1), got {self.tolerance}")
        return replace(self, format=normalized)

    @property
    def target_size_bytes(self) -> float:
        return mb_to_bytes(self.target_size_mb)

    @property
    def is_jpeg(self) -> bool:
        return is_jpeg_format(self.format)


@dataclass(frozen=True)
class DimensionPair:
    width: int
    height: int

    @property
    def pixels(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def exceeds(self, limit: int) -> bool:
        return self.width > limit or self.height > limit

    def reaches(self, limit: int) -> bool:
        return self.width >= limit or self.height >= limit


@dataclass(frozen=True)
class RenderResult:
    """Результат одной попытки: закодированный буфер и его длина в байтах."""
    buffer: bytes
    actual_size_bytes: int

    @classmethod
    def from_buffer(cls, buffer: bytes) -> "RenderResult":
        return cls(buffer=buffer, actual_size_bytes=len(buffer))


class SearchMode(Enum):
    DIMENSION = "dimension"
    QUALITY = "quality"


@dataclass(frozen=True)
class LoopState:
    """Состояние цикла подбора между итерациями.

    Fields:
        dimensions: Текущие размеры холста.
        quality: Качество JPEG (для png не используется).
        iteration: Число уже выполненных попыток рендеринга.
        mode: Текущий режим поиска; переход DIMENSION -> QUALITY необратим.
    """
    dimensions: DimensionPair
    quality: int = config.DEFAULT_QUALITY
    iteration: int = 0
    mode: SearchMode = SearchMode.DIMENSION

    def with_quality_mode(self) -> "LoopState":
        return replace(self, mode=SearchMode.QUALITY)


@dataclass(frozen=True)
class GenerationOutcome:
    """Итог генерации.

    Fields:
        buffer: Закодированное изображение.
        width: Ширина возвращаемого изображения, px.
        height: Высота возвращаемого изображения, px.
        actual_size_bytes: Фактический размер буфера.
        target_size_mb: Запрошенный размер, МБ.
        iterations: Число выполненных рендерингов.
        format: Нормализованный формат.
        quality: Итоговое качество JPEG; None для png.
        converged: False, если бюджет итераций исчерпан без попадания в допуск.
        max_iterations: Бюджет итераций, с которым выполнялся подбор.
    """
    buffer: bytes = field(repr=False)
    width: int
    height: int
    actual_size_bytes: int
    target_size_mb: float
    iterations: int
    format: str
    quality: Optional[int] = None
    converged: bool = True
    max_iterations: int = config.DEFAULT_MAX_ITERATIONS

    @property
    def actual_size_mb(self) -> float:
        return bytes_to_mb(self.actual_size_bytes)

    @property
    def warning(self) -> Optional[str]:
        if self.converged:
            return None
        return (
            f"Reached maximum iterations ({self.max_iterations}). "
            "Final size may not be exact."
        )
