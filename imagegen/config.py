"""Настройки генератора: константы модели сжатия и значения по умолчанию.

Значения по умолчанию можно переопределить переменными окружения или файлом
`.env` в рабочем каталоге.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path.cwd() / ".env")

# Hard pixel ceiling per side
MAX_DIMENSION = 32767

SUPPORTED_FORMATS = ("jpg", "jpeg", "png")
JPEG_FORMATS = ("jpg", "jpeg")

# Empirical encoded bytes per pixel, tuned to the renderer
COMPRESSION_FACTORS = {
    "jpg": 1.5,
    "jpeg": 1.5,
    "png": 1.2,
}
FALLBACK_COMPRESSION_FACTOR = 1.5
ASPECT_RATIO = 16 / 9

# Estimator floor; the adjustment step uses its own floor
MIN_ESTIMATED_WIDTH = 100
MIN_ESTIMATED_HEIGHT = 56
MIN_ADJUSTED_DIMENSION = 50

DEFAULT_QUALITY = 90
QUALITY_STEP = 5
MIN_QUALITY = 10
MAX_QUALITY = 100

DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_TEXT_COLOR = "#000000"

MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 72

MAX_CLI_SIZE_MB = 25.0

DEFAULT_MAX_ITERATIONS = int(os.environ.get("IMAGEGEN_MAX_ITERATIONS", "20"))
DEFAULT_TOLERANCE = float(os.environ.get("IMAGEGEN_TOLERANCE", "0.05"))
DEFAULT_FONT_FAMILY = os.environ.get("IMAGEGEN_FONT") or None

# Amplitude of the per-pixel background noise, 0 gives a flat background
NOISE_AMPLITUDE = int(os.environ.get("IMAGEGEN_NOISE", "24"))
NOISE_SEED = int(os.environ.get("IMAGEGEN_NOISE_SEED", "0"))

LOG_LEVEL = os.environ.get("IMAGEGEN_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s - Line %(lineno)d"
