"""Рендеринг и кодирование холста с подписью.

Принципы:
- SRP: класс только рисует и кодирует; подбор размеров живёт в `GenerationService`.
- Детерминированность: шум фона берётся из генератора с фиксированным seed,
  поэтому одинаковые параметры дают одинаковые байты.
"""
from __future__ import annotations

import io
import logging
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from imagegen import config
from imagegen.models.generation_model import is_jpeg_format, normalize_format

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
_PIL_FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG"}


def parse_color(value: Optional[str], default: RGB) -> RGB:
    """Разбирает "#rrggbb", "#rgb" или имя цвета Pillow; иначе возвращает `default`."""
    if not value:
        return default
    try:
        rgb = ImageColor.getrgb(value.strip())
    except ValueError:
        logger.debug("Unparseable color %r, using %s", value, default)
        return default
    return tuple(rgb[:3])


def calculate_font_size(width: int, height: int, text: str) -> int:
    """Размер шрифта по ширине холста, длине подписи и высоте, в пределах 12..72."""
    # an average glyph is roughly 0.6 em wide
    by_width = width * 0.8 / (max(len(text), 1) * 0.6)
    by_height = height * 0.25
    size = int(min(by_width, by_height))
    return max(config.MIN_FONT_SIZE, min(config.MAX_FONT_SIZE, size))


@lru_cache(maxsize=32)
def load_font(font_family: Optional[str], size: int) -> ImageFont.ImageFont:
    if font_family:
        try:
            return ImageFont.truetype(font_family, size)
        except OSError:
            logger.warning("Font %r not found, falling back to the default font", font_family)
    return ImageFont.load_default(size=size)


class RenderService:
    def __init__(
        self,
        noise_amplitude: int = config.NOISE_AMPLITUDE,
        seed: int = config.NOISE_SEED,
        max_dimension: int = config.MAX_DIMENSION,
    ) -> None:
        self.noise_amplitude = max(0, int(noise_amplitude))
        self.seed = seed
        self.max_dimension = max_dimension

    def validate_dimensions(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Image dimensions must be positive numbers")
        if width > self.max_dimension or height > self.max_dimension:
            raise ValueError(
                f"Image dimensions too large: {width}x{height}. "
                f"Maximum allowed: {self.max_dimension}x{self.max_dimension}"
            )

    # ---------- Холст ----------
    def _build_canvas(self, width: int, height: int, background: RGB) -> Image.Image:
        """Фон заданного цвета с равномерным шумом амплитуды `noise_amplitude`."""
        if self.noise_amplitude == 0:
            return Image.new("RGB", (width, height), color=background)

        amp = self.noise_amplitude
        rng = np.random.default_rng(self.seed)
        arr = rng.integers(-amp, amp + 1, size=(height, width, 3), dtype=np.int16)
        arr += np.asarray(background, dtype=np.int16)
        np.clip(arr, 0, 255, out=arr)
        return Image.fromarray(arr.astype(np.uint8))

    def _draw_label(self, image: Image.Image, label: str, color: RGB, font_family: Optional[str]) -> None:
        width, height = image.size
        font = load_font(font_family, calculate_font_size(width, height, label))
        draw = ImageDraw.Draw(image)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        text_x = (width - (right - left)) / 2 - left
        text_y = (height - (bottom - top)) / 2 - top
        draw.text((text_x, text_y), label, font=font, fill=color)

    # ---------- Публичный API ----------
    def render(
        self,
        width: int,
        height: int,
        format: str,
        label: str,
        background_color: str = config.DEFAULT_BACKGROUND_COLOR,
        text_color: str = config.DEFAULT_TEXT_COLOR,
        font_family: Optional[str] = None,
        quality: int = config.DEFAULT_QUALITY,
    ) -> bytes:
        """Рисует холст с подписью по центру и кодирует его в нужный формат.

        Args:
            width: Ширина, px.
            height: Высота, px.
            format: jpg, jpeg или png.
            label: Текст подписи.
            background_color: Цвет фона.
            text_color: Цвет текста.
            font_family: Шрифт TrueType; None или недоступный шрифт даёт шрифт Pillow по умолчанию.
            quality: Качество JPEG, для png игнорируется.

        Returns:
            Закодированное изображение.

        Raises:
            ValueError: если размеры не положительны или превышают потолок.
            UnsupportedFormatError: если формат не поддерживается.
        """
        self.validate_dimensions(width, height)
        image_format = normalize_format(format)

        image = self._build_canvas(width, height, parse_color(background_color, (255, 255, 255)))
        self._draw_label(image, label, parse_color(text_color, (0, 0, 0)), font_family)

        buf = io.BytesIO()
        if is_jpeg_format(image_format):
            image.save(buf, format=_PIL_FORMATS[image_format], quality=int(quality))
        else:
            image.save(buf, format=_PIL_FORMATS[image_format])
        return buf.getvalue()
