"""Разбор аргументов командной строки и вывод сообщений пользователю."""
from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from imagegen import config
from imagegen.errors import CLIValidationError

PROG_NAME = "image-gen"
VERSION = "1.0.0"

EXAMPLES = """\
Примеры:
  $ image-gen -s 10                           # JPG на 10 МБ
  $ image-gen -s 5 -f png                     # PNG на 5 МБ
  $ image-gen -s 20 -n my-image               # 20 МБ, своё имя файла
  $ image-gen -s 15 -f jpeg -o ./output       # JPEG на 15 МБ в каталог ./output
  $ image-gen -s 1.5 -f png -n test -o ./img  # все параметры

Замечания:
  - размер указывается в МБ, допускаются дробные значения (1.5)
  - расширение к имени файла добавляется автоматически
  - если файл уже существует, к имени добавляется числовой суффикс
  - в центре изображения выводятся размер и разрешение
"""


@dataclass(frozen=True)
class CliOptions:
    size: float
    format: str = "jpg"
    name: Optional[str] = None
    output: Path = Path.cwd()
    background_color: str = config.DEFAULT_BACKGROUND_COLOR
    text_color: str = config.DEFAULT_TEXT_COLOR
    font_family: Optional[str] = config.DEFAULT_FONT_FAMILY
    max_iterations: int = config.DEFAULT_MAX_ITERATIONS
    tolerance: float = config.DEFAULT_TOLERANCE
    verbose: bool = False


# ---------- Валидация ----------
def validate_format(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in config.SUPPORTED_FORMATS:
        raise CLIValidationError(
            f"Неподдерживаемый формат: {value}. Поддерживаются: {', '.join(config.SUPPORTED_FORMATS)}"
        )
    return normalized


def validate_size(value: str) -> float:
    try:
        size = float(value)
    except (TypeError, ValueError):
        raise CLIValidationError(f"Неверный размер: {value}, требуется число") from None

    if size != size:  # NaN
        raise CLIValidationError(f"Неверный размер: {value}, требуется число")
    if size <= 0:
        raise CLIValidationError(f"Размер должен быть больше 0, получено: {value}")
    if size > config.MAX_CLI_SIZE_MB:
        raise CLIValidationError(
            f"Слишком большой размер: {value} МБ, максимум {config.MAX_CLI_SIZE_MB:g} МБ"
        )
    return size


def validate_name(value: Optional[str]) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise CLIValidationError("Имя файла не может быть пустым")
    if any(ch in trimmed for ch in '<>"/\\|?*'):
        raise CLIValidationError(
            f'Имя файла содержит недопустимые символы: {trimmed}. Нельзя использовать: < > " / \\ | ? *'
        )
    return trimmed


def validate_output(value: Optional[str]) -> Path:
    trimmed = (value or "").strip()
    if not trimmed:
        raise CLIValidationError("Каталог вывода не может быть пустым")
    return Path(trimmed).resolve()


def validate_max_iterations(value: str) -> int:
    try:
        iterations = int(value)
    except (TypeError, ValueError):
        raise CLIValidationError(f"Неверное число итераций: {value}") from None
    if iterations <= 0:
        raise CLIValidationError(f"Число итераций должно быть больше 0, получено: {value}")
    return iterations


def validate_tolerance(value: str) -> float:
    try:
        tolerance = float(value)
    except (TypeError, ValueError):
        raise CLIValidationError(f"Неверный допуск: {value}") from None
    if not 0 < tolerance < 1:
        raise CLIValidationError(f"Допуск должен быть в интервале (0, 1), получено: {value}")
    return tolerance


# ---------- Парсер ----------
def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description=(
            "Генерация изображения заданного размера файла.\n\n"
            "Поддерживаются форматы JPG и PNG. В центре изображения выводятся\n"
            "размер и разрешение."
        ),
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-s", "--size", required=True,
        help=f"размер файла в МБ, больше 0 и не более {config.MAX_CLI_SIZE_MB:g}",
    )
    parser.add_argument("-f", "--format", default="jpg", help="формат: jpg, jpeg, png (по умолчанию jpg)")
    parser.add_argument("-n", "--name", help="имя файла без расширения; по умолчанию генерируется")
    parser.add_argument("-o", "--output", default=os.getcwd(), help="каталог вывода (по умолчанию текущий)")
    parser.add_argument("--background", default=config.DEFAULT_BACKGROUND_COLOR, help="цвет фона, например #ffffff")
    parser.add_argument("--text-color", default=config.DEFAULT_TEXT_COLOR, help="цвет текста, например #000000")
    parser.add_argument("--font", default=config.DEFAULT_FONT_FAMILY, help="шрифт TrueType (имя или путь)")
    parser.add_argument(
        "--max-iterations", default=str(config.DEFAULT_MAX_ITERATIONS),
        help=f"максимум попыток подбора (по умолчанию {config.DEFAULT_MAX_ITERATIONS})",
    )
    parser.add_argument(
        "--tolerance", default=str(config.DEFAULT_TOLERANCE),
        help=f"допустимое относительное отклонение (по умолчанию {config.DEFAULT_TOLERANCE})",
    )
    parser.add_argument("--verbose", action="store_true", help="подробный журнал итераций")
    return parser


def parse_arguments(argv: Optional[Sequence[str]] = None) -> CliOptions:
    """Разбирает аргументы и проверяет значения.

    Raises:
        CLIValidationError: если значение аргумента недопустимо.
        SystemExit: при отсутствии обязательных аргументов, --help и --version (поведение argparse).
    """
    args = create_parser().parse_args(argv)
    return CliOptions(
        size=validate_size(args.size),
        format=validate_format(args.format),
        name=validate_name(args.name) if args.name is not None else None,
        output=validate_output(args.output),
        background_color=args.background,
        text_color=args.text_color,
        font_family=args.font,
        max_iterations=validate_max_iterations(args.max_iterations),
        tolerance=validate_tolerance(args.tolerance),
        verbose=args.verbose,
    )


# ---------- Вывод ----------
def show_examples() -> None:
    print(EXAMPLES)


def display_error(error: BaseException) -> None:
    print("\n❌ Ошибка:", file=sys.stderr)
    print(f"   {error}", file=sys.stderr)
    if isinstance(error, CLIValidationError):
        print("\n💡 Подсказка: используйте --help для справки", file=sys.stderr)
    print("", file=sys.stderr)


def display_success(message: str, file_path: Optional[str] = None, file_size: Optional[str] = None,
                    dimensions: Optional[str] = None) -> None:
    print("\n✅ Готово:")
    print(f"   {message}")
    if file_path:
        print(f"   Файл: {file_path}")
    if file_size:
        print(f"   Размер: {file_size}")
    if dimensions:
        print(f"   Разрешение: {dimensions}")
    print("")


def display_progress(message: str) -> None:
    print(f"⏳ {message}...")
