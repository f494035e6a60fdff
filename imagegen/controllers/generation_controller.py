"""Контроллер: связывает параметры командной строки, генерацию и сохранение файла.

SOLID:
- SRP: класс только оркестрирует сервисы, сам не рисует и не пишет на диск.
- DIP: сервисы передаются полями dataclass и подменяются в тестах.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from imagegen.cli import CliOptions
from imagegen.models.file_model import SavedFile
from imagegen.models.generation_model import GenerationConfig, GenerationOutcome
from imagegen.services.file_service import FileService
from imagegen.services.generation_service import GenerationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationReport:
    outcome: GenerationOutcome
    saved: SavedFile


@dataclass
class GenerationController:
    """Выполняет полный сценарий: конфигурация -> подбор -> имя файла -> запись."""
    generation_service: GenerationService = field(default_factory=GenerationService)
    file_service: FileService = field(default_factory=FileService)

    def build_config(self, options: CliOptions) -> GenerationConfig:
        return GenerationConfig(
            target_size_mb=options.size,
            format=options.format,
            background_color=options.background_color,
            text_color=options.text_color,
            font_family=options.font_family,
            max_iterations=options.max_iterations,
            tolerance=options.tolerance,
        )

    def run(self, options: CliOptions) -> GenerationReport:
        outcome = self.generation_service.generate(self.build_config(options))
        if not outcome.converged:
            logger.warning(outcome.warning)

        file_name = self.file_service.generate_file_name(options.name, options.size, outcome.format)
        output_dir = self.file_service.ensure_output_directory(options.output)
        file_name = self.file_service.generate_unique_file_name(file_name, output_dir)
        saved = self.file_service.save_image_file(outcome.buffer, file_name, output_dir)
        logger.info("Saved %s (%d bytes, %d iterations)", saved.path, saved.size, outcome.iterations)
        return GenerationReport(outcome=outcome, saved=saved)
