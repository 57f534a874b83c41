"""Book configuration and chapter discovery.

A book is a directory holding ``book.json`` and the chapter sources::

    {
      "title": "Python for Environmental Chemists",
      "author": "...",
      "chapters": ["index.md", "01-importing-data.md", "..."],
      "output_dir": "../docs",
      "formats": ["html"]
    }

Chapters render in the listed order. A chapter named ``index.md`` becomes
the site's landing page.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from py4envchem.config import (
    BOOK_CONFIG_FILENAME,
    DEFAULT_FORMATS,
    DEFAULT_OUTPUT_DIR,
    INDEX_PAGE_NAME,
    SUPPORTED_FORMATS,
)
from py4envchem.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^#\s+(.+?)\s*(\{[^}]*\})?\s*$", re.MULTILINE)
_FENCE = re.compile(r"^(```|~~~)")


@dataclass(frozen=True)
class Chapter:
    """One chapter source file."""

    path: Path
    slug: str
    title: str
    order: int

    @property
    def output_name(self) -> str:
        return INDEX_PAGE_NAME if self.slug == "index" else f"{self.slug}.html"

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass(frozen=True)
class BookConfig:
    """Parsed ``book.json``."""

    title: str
    author: str
    book_dir: Path
    chapters: list[Chapter]
    output_dir: Path
    formats: list[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))

    @property
    def has_index(self) -> bool:
        return any(c.slug == "index" for c in self.chapters)


def chapter_title(text: str, fallback: str) -> str:
    """Return the first level-one heading outside code fences, or ``fallback``.

    Examples
    --------
    >>> chapter_title("```python\\n# not a title\\n```\\n# Importing data {#import}\\n", "x")
    'Importing data'
    """
    in_fence = False
    for line in text.splitlines():
        if _FENCE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = _HEADING.match(line)
        if match:
            return match.group(1)
    return fallback


def _slug(path: Path) -> str:
    return re.sub(r"[^a-z0-9-]+", "-", path.stem.lower()).strip("-") or "chapter"


def load_book_config(book_dir: Path | str) -> BookConfig:
    """Read ``book.json`` from ``book_dir`` and resolve its chapters.

    Parameters
    ----------
    book_dir : Path | str
        Directory containing ``book.json``.

    Returns
    -------
    BookConfig
        Configuration with chapters in render order.

    Raises
    ------
    ConfigurationError
        If ``book.json`` is missing or invalid, lists no chapters, lists a
        chapter that does not exist, lists a chapter twice or requests an
        unsupported output format.
    """
    book_dir = Path(book_dir)
    config_path = book_dir / BOOK_CONFIG_FILENAME
    if not config_path.exists():
        raise ConfigurationError(
            f"{BOOK_CONFIG_FILENAME} not found in {book_dir}",
            context={"book_dir": str(book_dir)},
        )
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"{BOOK_CONFIG_FILENAME} is not valid JSON: {exc}"
        ) from exc
    names = data.get("chapters") or []
    if not names:
        raise ConfigurationError(f"{BOOK_CONFIG_FILENAME} lists no chapters")
    missing = [n for n in names if not (book_dir / n).is_file()]
    if missing:
        raise ConfigurationError(
            f"Chapter file(s) not found: {', '.join(missing)}",
            context={"book_dir": str(book_dir)},
        )
    chapters: list[Chapter] = []
    seen: set[str] = set()
    for order, name in enumerate(names):
        path = book_dir / name
        slug = _slug(path)
        if slug in seen:
            raise ConfigurationError(f"Chapter '{name}' is listed twice")
        seen.add(slug)
        fallback = slug.replace("-", " ").title()
        title = chapter_title(path.read_text(encoding="utf-8"), fallback)
        chapters.append(Chapter(path=path, slug=slug, title=title, order=order))
    formats = [str(f).lower() for f in data.get("formats", DEFAULT_FORMATS)]
    unsupported = [f for f in formats if f not in SUPPORTED_FORMATS]
    if unsupported:
        raise ConfigurationError(
            f"Unsupported output format(s): {', '.join(unsupported)}",
            context={"supported": list(SUPPORTED_FORMATS)},
        )
    output_dir = data.get("output_dir")
    config = BookConfig(
        title=str(data.get("title", "Untitled book")),
        author=str(data.get("author", "")),
        book_dir=book_dir,
        chapters=chapters,
        output_dir=(book_dir / output_dir).resolve() if output_dir else DEFAULT_OUTPUT_DIR,
        formats=formats,
    )
    logger.debug("Loaded book '%s' with %d chapters", config.title, len(chapters))
    return config
