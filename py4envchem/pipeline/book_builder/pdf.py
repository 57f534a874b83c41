"""PDF output target.

Lays out rendered chapters on a reportlab canvas: a title page, then each
chapter starting on a new page with its headings, wrapped paragraphs,
monospaced code and output listings, tables and figures. Inline Markdown
markup is reduced to plain text; the HTML site remains the primary
format.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from py4envchem.config import MAX_TABLE_ROWS

from .renderer import Block, RenderedChapter

logger = logging.getLogger(__name__)

MARGIN = 2.0 * cm
BODY_FONT = ("Helvetica", 10)
CODE_FONT = ("Courier", 8)
HEADING_SIZES = {1: 18, 2: 14, 3: 12}

_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_EMPHASIS = re.compile(r"(\*\*|__|\*|`)")
_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*(\{#[^}]*\})?\s*$")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+\.)\s+")


def plain_text(markdown_text: str) -> str:
    """Strip inline Markdown markup.

    Examples
    --------
    >>> plain_text("Use **`read_delimited`** from [the loader](loader.html).")
    'Use read_delimited from the loader.'
    """
    return _EMPHASIS.sub("", _LINK.sub(r"\1", markdown_text))


class _PdfWriter:
    """Cursor-based page layout on a reportlab canvas."""

    def __init__(self, path: Path, title: str) -> None:
        self.canvas = canvas.Canvas(str(path), pagesize=A4)
        self.canvas.setTitle(title)
        self.width, self.height = A4
        self.text_width = self.width - 2 * MARGIN
        self.y = self.height - MARGIN

    def new_page(self) -> None:
        self.canvas.showPage()
        self.y = self.height - MARGIN

    def _ensure(self, needed: float) -> None:
        if self.y - needed < MARGIN:
            self.new_page()

    def lines(self, lines: list[str], font: tuple[str, int], gap: float = 4.0) -> None:
        name, size = font
        leading = size * 1.3
        self.canvas.setFont(name, size)
        for line in lines:
            self._ensure(leading)
            self.canvas.setFont(name, size)
            self.canvas.drawString(MARGIN, self.y - size, line)
            self.y -= leading
        self.y -= gap

    def paragraph(self, text: str, font: tuple[str, int] = BODY_FONT, indent: str = "") -> None:
        wrapped = simpleSplit(indent + text, font[0], font[1], self.text_width)
        self.lines(wrapped, font)

    def heading(self, text: str, level: int) -> None:
        size = HEADING_SIZES.get(level, 11)
        self._ensure(size * 3)
        self.y -= size * 0.4
        self.paragraph(text, ("Helvetica-Bold", size))

    def code(self, text: str) -> None:
        name, size = CODE_FONT
        wrapped: list[str] = []
        for line in text.splitlines() or [""]:
            wrapped.extend(simpleSplit(line, name, size, self.text_width) or [""])
        self.lines(wrapped, CODE_FONT, gap=8.0)

    def image(self, path: Path, caption: str | None) -> None:
        reader = ImageReader(str(path))
        img_width, img_height = reader.getSize()
        scale = min(self.text_width / img_width, (self.height / 2.5) / img_height, 1.0)
        width, height = img_width * scale, img_height * scale
        self._ensure(height + 20)
        self.canvas.drawImage(
            reader, MARGIN + (self.text_width - width) / 2, self.y - height, width, height
        )
        self.y -= height + 6
        if caption:
            self.paragraph(caption, ("Helvetica-Oblique", 9))

    def save(self) -> None:
        self.canvas.save()


def _markdown_block(writer: _PdfWriter, text: str) -> None:
    paragraph: list[str] = []
    code: list[str] | None = None

    def flush() -> None:
        if paragraph:
            writer.paragraph(plain_text(" ".join(paragraph)))
            paragraph.clear()

    for line in text.splitlines():
        if code is not None:
            if line.startswith(("```", "~~~")):
                writer.code("\n".join(code))
                code = None
            else:
                code.append(line)
            continue
        if line.startswith(("```", "~~~")):
            flush()
            code = []
            continue
        heading = _HEADING.match(line)
        if heading:
            flush()
            writer.heading(plain_text(heading.group(2)), len(heading.group(1)))
        elif not line.strip():
            flush()
        elif line.lstrip().startswith("|"):
            flush()
            writer.lines([line.strip()], CODE_FONT, gap=0.0)
        elif _LIST_ITEM.match(line):
            flush()
            writer.paragraph(plain_text(_LIST_ITEM.sub("", line)), indent="• ")
        else:
            paragraph.append(line.strip())
    flush()
    if code is not None:
        writer.code("\n".join(code))


def _block(writer: _PdfWriter, block: Block) -> None:
    if block.kind == "markdown":
        _markdown_block(writer, block.text)
    elif block.kind in ("code", "output"):
        writer.code(block.text)
    elif block.kind == "table" and block.frame is not None:
        shown = block.frame.head(MAX_TABLE_ROWS).round(3)
        writer.code(shown.to_string(index=False))
    elif block.kind == "figure" and block.path is not None:
        writer.image(block.path, block.caption)


def write_pdf(
    chapters: list[RenderedChapter],
    path: Path,
    title: str,
    author: str = "",
) -> Path:
    """Write rendered chapters to a single PDF file.

    Parameters
    ----------
    chapters : list[RenderedChapter]
        Chapters in book order, with their chunks already executed.
    path : Path
        Destination file; parent directories are created.
    title, author : str
        Shown on the title page and in the document metadata.

    Returns
    -------
    Path
        The written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    writer = _PdfWriter(path, title)
    writer.y = writer.height / 2 + 40
    writer.paragraph(title, ("Helvetica-Bold", 24))
    if author:
        writer.paragraph(author, ("Helvetica", 14))
    for rendered in chapters:
        writer.new_page()
        for block in rendered.blocks:
            _block(writer, block)
    writer.save()
    logger.info("Wrote PDF with %d chapters to %s", len(chapters), path)
    return path
