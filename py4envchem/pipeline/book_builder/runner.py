"""Render the whole book into a static site (and optionally a PDF).

Usage Examples
--------------
Programmatic build with configured defaults::

    from py4envchem.pipeline.book_builder.runner import run_from_config
    ok = run_from_config()

Explicit paths, forcing every chapter to re-run::

    from pathlib import Path
    from py4envchem.pipeline.book_builder.runner import render_book

    result = render_book(Path("book"), Path("site"), formats=["html", "pdf"], force=True)
    print(result.rendered, result.skipped)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.table import Table

from py4envchem.config import (
    DATA_SUBDIR,
    DEFAULT_FIGURE_DPI,
    FIGURES_SUBDIR,
    INDEX_PAGE_NAME,
    LOG_DIR,
    LOG_FILENAME_RENDER,
    LOG_FORMAT,
    NOJEKYLL_FILENAME,
    PAGE_TEMPLATE_PATH,
    REQUIREMENTS_LOCK_FILE,
    SUPPORTED_FORMATS,
    BookSettings,
)
from py4envchem.exceptions import ConfigurationError
from py4envchem.fs_utils import copy_tree

from .cache import BuildManifest, chapter_hash, directory_digest
from .chapters import load_book_config
from .pdf import write_pdf
from .renderer import (
    RenderedChapter,
    assemble_index_page,
    assemble_page,
    render_chapter,
    write_html_output,
)
from .templating import load_template_and_placeholders

logger = logging.getLogger(__name__)


def configure_logging(
    log_level: str = "INFO",
    enable_file: bool = True,
    log_filename: str = LOG_FILENAME_RENDER,
) -> None:
    """Configure root logging with a console handler and an optional log file.

    Existing root handlers are removed first, so repeated calls do not
    duplicate output. A log file that cannot be opened is skipped.

    Examples
    --------
    >>> configure_logging(log_level="DEBUG", enable_file=False)
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(0, logging.FileHandler(LOG_DIR / log_filename, mode="a"))
        except OSError:
            pass
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


@dataclass
class BuildResult:
    """What a call to ``render_book`` produced."""

    output_dir: Path
    formats: list[str]
    rendered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    pages: list[Path] = field(default_factory=list)
    figures: list[Path] = field(default_factory=list)
    pdf: Path | None = None


def _book_slug(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-") or "book"


def render_book(
    book_dir: Path,
    output_dir: Path | None = None,
    formats: list[str] | None = None,
    force: bool = False,
    lockfile: Path | None = REQUIREMENTS_LOCK_FILE,
    template_path: Path = PAGE_TEMPLATE_PATH,
    dpi: int = DEFAULT_FIGURE_DPI,
) -> BuildResult:
    """Render every chapter of the book in ``book_dir``.

    Parameters
    ----------
    book_dir : Path
        Directory with ``book.json`` and the chapter sources.
    output_dir : Path | None, optional
        Site directory; defaults to the book's configured ``output_dir``.
    formats : list[str] | None, optional
        Output formats; defaults to the book's configured formats.
    force : bool, optional
        Re-run every chapter even when its cached hash matches.
    lockfile : Path | None, optional
        Dependency lockfile folded into each chapter's cache hash.
    template_path : Path, optional
        HTML page template.
    dpi : int, optional
        Resolution of chunk figures.

    Returns
    -------
    BuildResult
        Chapters rendered and skipped, pages and figures written, PDF path.

    Raises
    ------
    ConfigurationError
        If the book, template or requested formats are invalid.
    ChunkExecutionError
        If any chunk raises. No partial site is considered valid.
    """
    config = load_book_config(Path(book_dir).resolve())
    # Chunks run from the book directory, so every output path must be absolute.
    output_dir = Path(output_dir if output_dir is not None else config.output_dir).resolve()
    formats = [f.lower() for f in (formats or config.formats)]
    unsupported = [f for f in formats if f not in SUPPORTED_FORMATS]
    if unsupported:
        raise ConfigurationError(
            f"Unsupported output format(s): {', '.join(unsupported)}",
            context={"supported": list(SUPPORTED_FORMATS)},
        )
    write_html = "html" in formats
    write_pdf_file = "pdf" in formats
    template, _ = load_template_and_placeholders(template_path)
    manifest = BuildManifest.load(output_dir)
    nav_key = json.dumps([[c.slug, c.title] for c in config.chapters])
    data_dir = config.book_dir / DATA_SUBDIR
    inputs_key = nav_key + directory_digest(data_dir)
    figure_dir = output_dir / FIGURES_SUBDIR
    result = BuildResult(output_dir=output_dir, formats=formats)
    rendered_chapters: list[RenderedChapter] = []

    logger.info(
        "Rendering '%s' (%d chapters) to %s as %s",
        config.title,
        len(config.chapters),
        output_dir,
        ", ".join(formats),
    )
    for chapter in config.chapters:
        digest = chapter_hash(chapter.read(), lockfile, template_path, inputs_key)
        page = output_dir / chapter.output_name
        if (
            write_html
            and not write_pdf_file
            and not force
            and manifest.is_current(chapter.slug, digest, page)
        ):
            logger.info("Skipping unchanged chapter %s", chapter.slug)
            result.skipped.append(chapter.slug)
            continue
        logger.info("Rendering chapter %s", chapter.slug)
        rendered = render_chapter(chapter, config.book_dir, figure_dir, dpi=dpi)
        rendered_chapters.append(rendered)
        result.rendered.append(chapter.slug)
        result.figures.extend(rendered.figures)
        if write_html:
            write_html_output(assemble_page(template, config, chapter, rendered.body_html), page)
            result.pages.append(page)
            manifest.record(chapter.slug, digest)

    if write_html:
        if not config.has_index:
            index_page = output_dir / INDEX_PAGE_NAME
            write_html_output(assemble_index_page(template, config), index_page)
            result.pages.append(index_page)
        if data_dir.is_dir():
            copied = copy_tree(data_dir, output_dir / DATA_SUBDIR)
            logger.debug("Copied %d data files", copied)
        (output_dir / NOJEKYLL_FILENAME).touch()
        manifest.prune({c.slug for c in config.chapters})
        manifest.save()
    if write_pdf_file:
        result.pdf = write_pdf(
            rendered_chapters,
            output_dir / f"{_book_slug(config.title)}.pdf",
            title=config.title,
            author=config.author,
        )
    logger.info(
        "Build finished: %d rendered, %d skipped", len(result.rendered), len(result.skipped)
    )
    return result


def build_summary_table(result: BuildResult) -> Table:
    """Build a Rich table listing each chapter's build status."""
    table = Table(
        title=f"Book build: {result.output_dir}",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("Chapter", style="bold")
    table.add_column("Status")
    for slug in result.rendered:
        table.add_row(slug, "[green]rendered[/green]")
    for slug in result.skipped:
        table.add_row(slug, "[dim]unchanged[/dim]")
    if result.pdf is not None:
        table.add_row(result.pdf.name, "[green]written[/green]")
    return table


def run_from_config(
    book_dir: Path | None = None,
    output_dir: Path | None = None,
    formats: list[str] | None = None,
    force: bool = False,
    settings: BookSettings | None = None,
    console: Console | None = None,
) -> bool:
    """Render the book using explicit arguments or configured settings.

    Arguments left as ``None`` fall back to ``BookSettings`` (environment
    and ``.env``). Formats from ``PY4EC_FORMATS`` override those in
    ``book.json``.

    Returns
    -------
    bool
        ``True`` if the build succeeded; ``False`` if any error occurred
        (the error is logged).
    """
    try:
        settings = settings or BookSettings()
        if formats is None and settings.formats_from_env:
            formats = settings.formats
        if output_dir is None and settings.output_dir_from_env:
            output_dir = settings.output_dir
        result = render_book(
            Path(book_dir) if book_dir is not None else settings.book_dir,
            output_dir=Path(output_dir) if output_dir is not None else None,
            formats=formats,
            force=force,
            dpi=settings.figure_dpi,
        )
    except Exception:
        logger.exception("Failed to render book")
        return False
    if console is not None:
        console.print(build_summary_table(result))
    return True


__all__ = [
    "BuildResult",
    "build_summary_table",
    "configure_logging",
    "render_book",
    "run_from_config",
]
