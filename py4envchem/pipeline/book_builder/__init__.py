"""Book builder: literate chapters to a static site and PDF.

Chapters listed in ``book.json`` are parsed into prose and executable
Python chunks (``chunks``), run in one namespace per chapter with their
output spliced back in and converted to HTML (``renderer``), assembled
into pages with navigation, cached by content hash (``cache``), and
optionally laid out as a PDF (``pdf``). ``publish`` copies the finished
site into a hosting directory.
"""

from .cache import BuildManifest, chapter_hash
from .chapters import BookConfig, Chapter, chapter_title, load_book_config
from .chunks import (
    ChunkExecutor,
    ChunkOutput,
    CodeChunk,
    TextChunk,
    parse_chunk_options,
    parse_chunks,
)
from .pdf import write_pdf
from .publish import publish
from .renderer import (
    RenderedChapter,
    clean_html_output,
    markdown_to_html,
    render_chapter,
    write_html_output,
)
from .runner import BuildResult, configure_logging, render_book, run_from_config

__all__ = [
    "BookConfig",
    "BuildManifest",
    "BuildResult",
    "Chapter",
    "ChunkExecutor",
    "ChunkOutput",
    "CodeChunk",
    "RenderedChapter",
    "TextChunk",
    "chapter_hash",
    "chapter_title",
    "clean_html_output",
    "configure_logging",
    "load_book_config",
    "markdown_to_html",
    "parse_chunk_options",
    "parse_chunks",
    "publish",
    "render_book",
    "render_chapter",
    "run_from_config",
    "write_html_output",
    "write_pdf",
]
