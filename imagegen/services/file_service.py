"""Имена файлов и запись изображений на диск.

Принципы:
- SRP: сервис отвечает только за файловую систему; сгенерированный буфер
  приходит готовым.
- Ошибки `OSError` переводятся в `FileSystemError` с понятным сообщением
  и именем errno в `code`.
"""
from __future__ import annotations

import errno
import os
import re
from pathlib import Path
from typing import Optional

from imagegen.errors import FileNameValidationError, FileSystemError
from imagegen.models.file_model import SavedFile
from imagegen.utils import generate_default_name

_INVALID_CHARS = re.compile(r'[<>"/\\|?*]')
_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)
_IMAGE_EXTENSIONS = frozenset([".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tif", ".tiff"])
MAX_NAME_SUFFIX = 9999


def _errno_name(exc: OSError) -> Optional[str]:
    if exc.errno is None:
        return None
    return errno.errorcode.get(exc.errno)


class FileService:
    # ---------- Имена ----------
    def validate_file_name(self, filename: Optional[str]) -> bool:
        """Проверяет имя: непустое, без < > " / \\ | ? * и не зарезервированное в Windows."""
        if not filename or not isinstance(filename, str):
            return False
        if _INVALID_CHARS.search(filename):
            return False
        return Path(filename).stem.upper() not in _RESERVED_NAMES

    def process_file_name(self, filename: str, image_format: str) -> str:
        """Гарантирует расширение `.{format}`: оставляет верное, заменяет чужое.

        Расширением считается только суффикс известного графического формата,
        поэтому "1.5MB-..." получает расширение, а не теряет ".5MB-...".
        """
        if not self.validate_file_name(filename):
            raise FileNameValidationError(f"Недопустимое имя файла: {filename}")

        ext = f".{image_format.lower()}"
        path = Path(filename)
        suffix = path.suffix.lower()
        if suffix == ext:
            return filename
        if suffix in _IMAGE_EXTENSIONS:
            return path.stem + ext
        return filename + ext

    def generate_file_name(self, user_file_name: Optional[str], size_mb: float, image_format: str) -> str:
        if user_file_name and user_file_name.strip():
            base_name = user_file_name.strip()
        else:
            base_name = generate_default_name(size_mb)
        return self.process_file_name(base_name, image_format)

    def generate_unique_file_name(self, file_name: str, output_dir: str | Path = ".") -> str:
        """Добавляет суффикс "(n)", если файл с таким именем уже есть."""
        directory = Path(output_dir)
        if not (directory / file_name).exists():
            return file_name

        path = Path(file_name)
        for counter in range(1, MAX_NAME_SUFFIX + 1):
            candidate = f"{path.stem}({counter}){path.suffix}"
            if not (directory / candidate).exists():
                return candidate
        raise FileSystemError("Не удалось подобрать уникальное имя файла, проверьте каталог вывода")

    # ---------- Файловая система ----------
    def ensure_output_directory(self, output_dir: str | Path) -> Path:
        directory = Path(output_dir)
        if directory.exists():
            return directory
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(f"Не удалось создать каталог вывода: {directory}", _errno_name(exc)) from exc
        return directory

    def check_write_permission(self, file_path: str | Path) -> None:
        directory = Path(file_path).parent
        if not os.access(directory, os.W_OK):
            raise FileSystemError(f"Нет прав на запись: {directory}", "EACCES")

    def save_image_file(self, image_buffer: bytes, filename: str, output_dir: str | Path = ".") -> SavedFile:
        """Записывает буфер в `output_dir/filename`.

        Returns:
            `SavedFile` с абсолютным путём и размером на диске.

        Raises:
            FileSystemError: если каталог нельзя создать, он не каталог, нет прав
                на запись или запись не удалась.
        """
        directory = self.ensure_output_directory(output_dir)
        full_path = (directory / filename).resolve()
        if not directory.is_dir():
            raise FileSystemError(f"Путь вывода не является каталогом: {directory}", "ENOTDIR")
        self.check_write_permission(full_path)

        try:
            full_path.write_bytes(image_buffer)
            size = full_path.stat().st_size
        except OSError as exc:
            code = _errno_name(exc)
            if code == "ENOSPC":
                message = "Недостаточно места на диске"
            elif code == "EACCES":
                message = "Нет прав на запись файла"
            elif code == "EEXIST":
                message = "Файл уже существует"
            else:
                message = f"Не удалось сохранить файл: {exc}"
            raise FileSystemError(message, code) from exc

        return SavedFile(name=filename, path=full_path, size=size)
