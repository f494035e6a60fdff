"""Модель размера: оценка начальных размеров холста и шаги их коррекции.

Все методы чистые: результат зависит только от аргументов.
"""
from __future__ import annotations

import math

from imagegen import config
from imagegen.errors import InvalidTargetError
from imagegen.models.generation_model import DimensionPair


class DimensionService:
    def __init__(self, max_dimension: int = config.MAX_DIMENSION) -> None:
        self.max_dimension = max_dimension

    # ---------- Начальная оценка ----------
    def compression_factor(self, image_format: str) -> float:
        return config.COMPRESSION_FACTORS.get(
            image_format.lower(), config.FALLBACK_COMPRESSION_FACTOR
        )

    def estimate(self, target_size_bytes: float, image_format: str) -> DimensionPair:
        """Оценивает размеры холста 16:9 для целевого размера файла.

        Число пикселей = байты / коэффициент сжатия формата. Если одна из сторон
        превышает потолок, обе уменьшаются пропорционально так, чтобы большая
        сторона стала равна потолку. Результат округляется и ограничивается
        снизу 100x56.

        Args:
            target_size_bytes: Целевой размер, байт.
            image_format: Формат (jpg, jpeg, png).

        Returns:
            `DimensionPair` с начальными размерами.

        Raises:
            InvalidTargetError: если целевой размер не положителен.
        """
        if not target_size_bytes > 0:
            raise InvalidTargetError("Target size must be greater than 0")

        estimated_pixels = target_size_bytes / self.compression_factor(image_format)
        aspect = config.ASPECT_RATIO
        width = math.sqrt(estimated_pixels * aspect)
        height = estimated_pixels / width

        limit = self.max_dimension
        if width > limit or height > limit:
            if width > height:
                width, height = limit, limit / aspect
            else:
                width, height = limit * aspect, limit
            width = min(width, limit)
            height = min(height, limit)

        return DimensionPair(
            width=max(round(width), config.MIN_ESTIMATED_WIDTH),
            height=max(round(height), config.MIN_ESTIMATED_HEIGHT),
        )

    # ---------- Коррекция размеров ----------
    def adjust(self, dimensions: DimensionPair, actual_size: float, target_size: float) -> DimensionPair:
        """Масштабирует площадь пропорционально отношению размеров.

        Обе стороны умножаются на sqrt(target / actual), поэтому площадь меняется
        в target / actual раз при сохранении пропорций. Нижняя граница 50 px.
        """
        scale = math.sqrt(target_size / actual_size)
        floor = config.MIN_ADJUSTED_DIMENSION
        return DimensionPair(
            width=max(round(dimensions.width * scale), floor),
            height=max(round(dimensions.height * scale), floor),
        )

    def clamp_to_ceiling(self, dimensions: DimensionPair) -> DimensionPair:
        """Вписывает размеры в потолок с сохранением соотношения сторон."""
        limit = self.max_dimension
        if not dimensions.exceeds(limit):
            return dimensions

        aspect = dimensions.aspect_ratio
        if dimensions.width > dimensions.height:
            width, height = limit, round(limit / aspect)
        else:
            width, height = round(limit * aspect), limit
        return DimensionPair(
            width=max(min(width, limit), 1),
            height=max(min(height, limit), 1),
        )

    # ---------- Качество и допуск ----------
    def seed_quality(self, target_size_bytes: float, dimensions: DimensionPair) -> int:
        """Грубая начальная оценка качества JPEG по требуемым байтам на пиксель."""
        bytes_per_pixel = target_size_bytes / dimensions.pixels
        if bytes_per_pixel > 2.0:
            return 100
        if bytes_per_pixel > 1.5:
            return 95
        if bytes_per_pixel > 1.0:
            return 90
        if bytes_per_pixel > 0.5:
            return 80
        return 70

    def step_quality(self, quality: int, actual_size: float, target_size: float) -> int:
        if actual_size < target_size:
            return min(config.MAX_QUALITY, quality + config.QUALITY_STEP)
        return max(config.MIN_QUALITY, quality - config.QUALITY_STEP)

    @staticmethod
    def is_within_tolerance(actual_size: float, target_size: float, tolerance: float) -> bool:
        # strict: a difference equal to the allowance is a miss
        return abs(actual_size - target_size) < target_size * tolerance


_default_service = DimensionService()


def estimate(target_size_bytes: float, image_format: str) -> DimensionPair:
    return _default_service.estimate(target_size_bytes, image_format)
