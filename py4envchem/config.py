"""Global configuration constants for the project.

Defines paths, filenames and rendering defaults used across the book
builder, the exercise checker and the data helpers. ``BookSettings``
layers environment variables (and an optional project ``.env``) on top
of these constants for CI and local overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from py4envchem.exceptions import ConfigurationError

# Project directories
PACKAGE_DIR: Path = Path(__file__).resolve().parent
PROJECT_ROOT: Path = PACKAGE_DIR.parent
LOG_DIR: Path = PROJECT_ROOT / "logs"
BOOK_DIR: Path = PROJECT_ROOT / "book"
DATA_DIR: Path = BOOK_DIR / "data"
EXERCISES_DIR: Path = PROJECT_ROOT / "exercises"
TEMPLATES_DIR: Path = PACKAGE_DIR / "templates"

# Requirements
REQUIREMENTS_LOCK_FILE: Path = PROJECT_ROOT / "requirements.lock"

# Book configuration
BOOK_CONFIG_FILENAME: str = "book.json"
DEFAULT_OUTPUT_DIR: Path = PROJECT_ROOT / "docs"
DEFAULT_FORMATS: list[str] = ["html"]
SUPPORTED_FORMATS: tuple[str, ...] = ("html", "pdf")
CHAPTER_SUFFIX: str = ".md"

# Rendering
PAGE_TEMPLATE_PATH: Path = TEMPLATES_DIR / "page.html"
INDEX_PAGE_NAME: str = "index.html"
FIGURES_SUBDIR: str = "figures"
DATA_SUBDIR: str = "data"
BUILD_MANIFEST_FILENAME: str = ".build-manifest.json"
NOJEKYLL_FILENAME: str = ".nojekyll"
DEFAULT_FIGURE_DPI: int = 120
MARKDOWN_EXTRAS: list[str] = [
    "tables",
    "fenced-code-blocks",
    "header-ids",
    "footnotes",
    "code-friendly",
]
CHUNK_LANGUAGE: str = "python"
MAX_TABLE_ROWS: int = 10
TABLE_CSS_CLASS: str = "book-table"

# Data import
MISSING_VALUE_MARKERS: list[str] = ["", "NA", "N/A", "NaN", "nan"]
DELIMITERS_BY_SUFFIX: dict[str, str] = {
    ".csv": ",",
    ".tsv": "\t",
    ".tab": "\t",
}

# Modelling
LOD_FACTOR: float = 3.3
LOQ_FACTOR: float = 10.0
MIN_REGRESSION_POINTS: int = 3
DEFAULT_ALPHA: float = 0.05
CURVE_FIT_MAXFEV: int = 20000

# Exercises
EXERCISE_SCRIPT_CHECK_NAME: str = "script runs"
DEFAULT_CHECK_TOLERANCE: float = 1e-6

# Logging
LOG_FILENAME_RENDER: str = "render_book.log"
LOG_FILENAME_EXERCISES: str = "exercises.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class BookSettings:
    r"""Runtime settings for the book build, read from the environment.

    Loads a project-level ``.env`` file through ``python-dotenv`` when one is
    present and then resolves each setting from environment variables,
    falling back to the module constants above.

    Attributes
    ----------
    book_dir : Path
        Directory holding ``book.json`` and the chapter sources.
    output_dir : Path
        Directory the rendered site is written to.
    log_level : str
        Logging level name.
    figure_dpi : int
        Resolution used when saving chunk figures.
    formats : list[str]
        Output formats to build (subset of ``SUPPORTED_FORMATS``).

    Raises
    ------
    ConfigurationError
        If ``PY4EC_FIGURE_DPI`` is not a positive integer or
        ``PY4EC_FORMATS`` names an unsupported format.

    Examples
    --------
    With ``PY4EC_FORMATS=html,pdf`` in the environment or ``.env``:

    >>> BookSettings().formats  # doctest: +SKIP
    ['html', 'pdf']
    """

    def __init__(self, env_root: Path | None = None) -> None:
        root = Path(env_root) if env_root is not None else PROJECT_ROOT
        env_path = root / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=True)
        self.book_dir: Path = Path(os.getenv("PY4EC_BOOK_DIR", str(BOOK_DIR)))
        raw_output = os.getenv("PY4EC_OUTPUT_DIR")
        self.output_dir: Path = Path(raw_output) if raw_output else DEFAULT_OUTPUT_DIR
        self.output_dir_from_env: bool = bool(raw_output)
        self.log_level: str = os.getenv("PY4EC_LOG_LEVEL", "INFO").upper()
        raw_dpi = os.getenv("PY4EC_FIGURE_DPI", str(DEFAULT_FIGURE_DPI))
        try:
            self.figure_dpi = int(raw_dpi)
        except ValueError as exc:
            raise ConfigurationError(
                "PY4EC_FIGURE_DPI must be an integer",
                context={"value": raw_dpi},
            ) from exc
        if self.figure_dpi <= 0:
            raise ConfigurationError(
                "PY4EC_FIGURE_DPI must be positive", context={"value": raw_dpi}
            )
        raw_formats = os.getenv("PY4EC_FORMATS")
        if raw_formats:
            formats = [f.strip().lower() for f in raw_formats.split(",") if f.strip()]
        else:
            formats = list(DEFAULT_FORMATS)
        unsupported = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unsupported:
            raise ConfigurationError(
                f"Unsupported output format(s): {', '.join(unsupported)}",
                context={"supported": list(SUPPORTED_FORMATS)},
            )
        self.formats: list[str] = formats
        self.formats_from_env: bool = bool(raw_formats)
