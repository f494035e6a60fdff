"""Точка входа в приложение."""
from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from imagegen import cli, config
from imagegen.controllers.generation_controller import GenerationController
from imagegen.errors import CLIValidationError, FileSystemError
from imagegen.utils import format_file_size


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(format=config.LOG_FORMAT, level=level)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Разбирает аргументы, генерирует и сохраняет изображение; возвращает код выхода."""
    try:
        options = cli.parse_arguments(argv)
    except CLIValidationError as exc:
        cli.display_error(exc)
        return 1

    configure_logging(options.verbose)
    cli.display_progress(f"Генерация изображения {options.format.upper()} размером {options.size:g} МБ")
    try:
        report = GenerationController().run(options)
    except (ValueError, FileSystemError) as exc:
        cli.display_error(exc)
        return 1

    outcome = report.outcome
    cli.display_success(
        "Изображение создано",
        file_path=str(report.saved.path),
        file_size=format_file_size(report.saved.size),
        dimensions=f"{outcome.width} × {outcome.height}",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
