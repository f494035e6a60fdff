"""Подбор изображения под целевой размер файла.

Цикл: оценка размеров -> рендеринг -> измерение -> коррекция, пока размер не
попадёт в допуск или не кончится бюджет итераций.

Принципы:
- SRP: сервис только управляет циклом; рисование делегировано функции `render`,
  математика размеров `DimensionService`.
- DIP: рендерер передаётся как вызываемый объект, поэтому цикл тестируется
  без Pillow.
- Состояние итерации хранится в неизменяемой записи `LoopState`, каждый шаг
  возвращает новую запись.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from imagegen.models.generation_model import (
    DimensionPair,
    GenerationConfig,
    GenerationOutcome,
    LoopState,
    RenderResult,
    SearchMode,
)
from imagegen.services.dimension_service import DimensionService
from imagegen.services.render_service import RenderService
from imagegen.utils import format_size_mb

logger = logging.getLogger(__name__)

RenderFn = Callable[..., bytes]


def build_label(target_size_mb: float, dimensions: DimensionPair) -> str:
    return f"{format_size_mb(target_size_mb)}MB {dimensions.width} × {dimensions.height}"


class GenerationService:
    def __init__(
        self,
        render: Optional[RenderFn] = None,
        dimension_service: Optional[DimensionService] = None,
    ) -> None:
        self._render = render or RenderService().render
        self._dimensions = dimension_service or DimensionService()

    # ---------- Шаги цикла ----------
    def initial_state(self, cfg: GenerationConfig) -> LoopState:
        return LoopState(dimensions=self._dimensions.estimate(cfg.target_size_bytes, cfg.format))

    def prepare_iteration(self, state: LoopState, cfg: GenerationConfig) -> LoopState:
        """Проверка потолка перед рендерингом.

        Размеры сверх потолка вписываются в него с сохранением пропорций. Для
        JPEG упор в потолок переводит цикл в режим подбора качества; при входе
        в этот режим качество один раз оценивается по байтам на пиксель.
        Для png режим не меняется.
        """
        limit = self._dimensions.max_dimension
        dims = state.dimensions
        if dims.exceeds(limit):
            clamped = self._dimensions.clamp_to_ceiling(dims)
            logger.debug("Clamped %dx%d to %dx%d", dims.width, dims.height, clamped.width, clamped.height)
            state = replace(state, dimensions=clamped)

        if cfg.is_jpeg and state.mode is SearchMode.DIMENSION and state.dimensions.reaches(limit):
            quality = self._dimensions.seed_quality(cfg.target_size_bytes, state.dimensions)
            logger.info(
                "Pixel ceiling reached at %dx%d, switching to quality search (quality=%d)",
                state.dimensions.width,
                state.dimensions.height,
                quality,
            )
            state = replace(state.with_quality_mode(), quality=quality)
        return state

    def render_attempt(self, state: LoopState, cfg: GenerationConfig) -> RenderResult:
        dims = state.dimensions
        buffer = self._render(
            width=dims.width,
            height=dims.height,
            format=cfg.format,
            label=build_label(cfg.target_size_mb, dims),
            background_color=cfg.background_color,
            text_color=cfg.text_color,
            font_family=cfg.font_family,
            quality=state.quality,
        )
        return RenderResult.from_buffer(buffer)

    def adjust_state(self, state: LoopState, actual_size: int, target_size: float) -> LoopState:
        if state.mode is SearchMode.QUALITY:
            return replace(state, quality=self._dimensions.step_quality(state.quality, actual_size, target_size))
        return replace(state, dimensions=self._dimensions.adjust(state.dimensions, actual_size, target_size))

    # ---------- Публичный API ----------
    def generate(self, config: GenerationConfig) -> GenerationOutcome:
        """Генерирует изображение, размер которого попадает в допуск от целевого.

        Args:
            config: Параметры генерации.

        Returns:
            `GenerationOutcome` с последним отрендеренным буфером. Если бюджет
            итераций исчерпан, результат всё равно возвращается с `converged=False`.

        Raises:
            InvalidTargetError: если целевой размер не положителен (до рендеринга).
            UnsupportedFormatError: если формат не поддерживается (до рендеринга).
            Exception: ошибки рендерера пробрасываются без изменений.
        """
        cfg = config.validate()
        target = cfg.target_size_bytes
        state = self.initial_state(cfg)
        logger.debug(
            "Target %s bytes (%s), initial estimate %dx%d",
            target,
            cfg.format,
            state.dimensions.width,
            state.dimensions.height,
        )

        result: Optional[RenderResult] = None
        rendered = state
        converged = False
        while state.iteration < cfg.max_iterations:
            state = self.prepare_iteration(state, cfg)
            result = self.render_attempt(state, cfg)
            rendered = state = replace(state, iteration=state.iteration + 1)
            logger.debug(
                "Iteration %d: %dx%d quality=%d -> %d bytes",
                state.iteration,
                state.dimensions.width,
                state.dimensions.height,
                state.quality,
                result.actual_size_bytes,
            )

            if self._dimensions.is_within_tolerance(result.actual_size_bytes, target, cfg.tolerance):
                converged = True
                break
            if state.iteration < cfg.max_iterations:
                state = self.adjust_state(state, result.actual_size_bytes, target)

        assert result is not None  # max_iterations > 0 is validated
        return GenerationOutcome(
            buffer=result.buffer,
            width=rendered.dimensions.width,
            height=rendered.dimensions.height,
            actual_size_bytes=result.actual_size_bytes,
            target_size_mb=cfg.target_size_mb,
            iterations=rendered.iteration,
            format=cfg.format,
            quality=rendered.quality if cfg.is_jpeg else None,
            converged=converged,
            max_iterations=cfg.max_iterations,
        )


def target_size(config: GenerationConfig, render: Optional[RenderFn] = None) -> GenerationOutcome:
    return GenerationService(render=render).generate(config)
