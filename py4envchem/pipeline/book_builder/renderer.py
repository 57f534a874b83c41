"""Chapter rendering: run chunks, splice their output, convert to HTML.

This module turns one literate chapter into a list of render blocks
(prose, echoed code, captured output, tables and figures), and the blocks
into Markdown and then HTML via ``markdown2``. It also assembles complete
pages from the package template, with a table of contents and
previous/next navigation.

Unlike a best-effort site generator, every error here propagates: a chunk
that raises, a missing template or an unwritable output file fails the
build.

Example
-------
>>> from py4envchem.pipeline.book_builder.renderer import markdown_to_html
>>> markdown_to_html("# Ozone {#ozone}\\n\\nDaily maxima.")  # doctest: +ELLIPSIS
'<h1 id="ozone">Ozone</h1><p>Daily maxima.</p>'
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import markdown2
import pandas as pd

from py4envchem import __version__
from py4envchem.config import DEFAULT_FIGURE_DPI, FIGURES_SUBDIR, MARKDOWN_EXTRAS
from py4envchem.fs_utils import working_directory

from .chapters import BookConfig, Chapter
from .chunks import ChunkExecutor, ChunkOutput, CodeChunk, parse_chunks
from .templating import render_template

logger = logging.getLogger(__name__)

_HEADING_ID = re.compile(r"^(#{1,6}\s+.+?)\s*\{#([A-Za-z0-9_-]+)\}\s*$", re.MULTILINE)
_PRE_BLOCK = re.compile(r"<pre\b.*?</pre>", re.DOTALL)
_STASH = re.compile(r"<\x00(\d+)\x00>")


@dataclass
class Block:
    """One piece of a rendered chapter.

    ``kind`` is one of ``markdown``, ``code``, ``output``, ``table`` or
    ``figure``.
    """

    kind: str
    text: str = ""
    frame: pd.DataFrame | None = None
    path: Path | None = None
    caption: str | None = None


@dataclass
class RenderedChapter:
    """A chapter after its chunks have run."""

    chapter: Chapter
    blocks: list[Block] = field(default_factory=list)
    body_html: str = ""

    @property
    def figures(self) -> list[Path]:
        return [b.path for b in self.blocks if b.kind == "figure" and b.path is not None]

    @property
    def markdown(self) -> str:
        return blocks_to_markdown(self.blocks)


def _output_blocks(output: ChunkOutput, caption: str | None) -> list[Block]:
    blocks: list[Block] = []
    text = output.stdout.rstrip("\n")
    if output.warnings:
        text = "\n".join([text, *(f"Warning: {w}" for w in output.warnings)]).strip("\n")
    if text:
        blocks.append(Block("output", text))
    if output.value_html is not None:
        blocks.append(Block("table", output.value_html, frame=output.value_frame))
    elif output.value_repr is not None:
        blocks.append(Block("output", output.value_repr))
    for path in output.figures:
        blocks.append(Block("figure", path=path, caption=caption))
    return blocks


def run_chapter(
    chapter: Chapter,
    book_dir: Path,
    figure_dir: Path,
    dpi: int = DEFAULT_FIGURE_DPI,
) -> list[Block]:
    """Execute a chapter's code chunks and return its render blocks.

    Chunks run from ``book_dir`` so relative data paths such as
    ``data/lake_metals.csv`` resolve the same way for every chapter.

    Raises
    ------
    ChunkExecutionError
        If any chunk raises.
    ConfigurationError
        If the chapter's chunk syntax is invalid.
    """
    chunks = parse_chunks(chapter.read())
    executor = ChunkExecutor(chapter.slug, figure_dir, dpi=dpi)
    blocks: list[Block] = []
    with working_directory(book_dir):
        for chunk in chunks:
            if not isinstance(chunk, CodeChunk):
                if not chunk.text.strip():
                    continue
                blocks.append(Block("markdown", executor.eval_inline(chunk.text, chunk.line)))
                continue
            output = executor.run(chunk)
            if not chunk.options["include"]:
                continue
            if chunk.options["echo"]:
                blocks.append(Block("code", chunk.code))
            if chunk.options["output"]:
                blocks.extend(_output_blocks(output, chunk.options["fig_caption"]))
    logger.debug("Ran %d chunks of %s", len(chunks), chapter.slug)
    return blocks


def blocks_to_markdown(blocks: list[Block]) -> str:
    """Join render blocks into a single Markdown document.

    Outputs are written as raw HTML blocks separated by blank lines so
    ``markdown2`` passes them through unchanged.
    """
    parts: list[str] = []
    for block in blocks:
        if block.kind == "markdown":
            parts.append(block.text)
        elif block.kind == "code":
            parts.append(f"```python\n{block.text}\n```")
        elif block.kind == "output":
            parts.append(
                f'<pre class="chunk-output"><code>{html.escape(block.text)}</code></pre>'
            )
        elif block.kind == "table":
            parts.append(f'<div class="chunk-table">\n{block.text}\n</div>')
        elif block.kind == "figure" and block.path is not None:
            src = f"{FIGURES_SUBDIR}/{block.path.name}"
            alt = html.escape(block.caption or block.path.stem)
            lines = ['<div class="figure">', f'<img src="{src}" alt="{alt}">']
            if block.caption:
                lines.append(f'<p class="caption">{html.escape(block.caption)}</p>')
            lines.append("</div>")
            parts.append("\n".join(lines))
    return "\n\n".join(parts) + "\n"


def clean_html_output(html_content: str) -> str:
    r"""Normalise generated HTML.

    Removes empty paragraphs, repeated breaks and whitespace between tags.
    The content of ``<pre>`` blocks is left untouched.

    Raises
    ------
    TypeError
        If input is not str.

    Examples
    --------
    >>> clean_html_output("<p></p><h1>Hi</h1>\n\n<pre>a\n  b</pre><br><br>")
    '<h1>Hi</h1><pre>a\n  b</pre><br>'
    """
    if not isinstance(html_content, str):
        raise TypeError("Input must be a string.")
    preserved: list[str] = []

    def stash(match: re.Match[str]) -> str:
        preserved.append(match.group(0))
        return f"<\x00{len(preserved) - 1}\x00>"

    html_content = _PRE_BLOCK.sub(stash, html_content)
    html_content = re.sub(r"<p>\s*</p>", "", html_content)
    html_content = re.sub(r"<p>&nbsp;</p>", "", html_content)
    html_content = re.sub(r"<p><br\s*/?>\s*</p>", "", html_content)
    html_content = re.sub(r"(<br\s*/?>\s*){2,}", "<br>", html_content)
    html_content = re.sub(r"\n\s*\n\s*\n+", "\n\n", html_content)
    html_content = re.sub(r">\s+<", "><", html_content)
    html_content = _STASH.sub(lambda m: preserved[int(m.group(1))], html_content)
    return html_content.strip()


def markdown_to_html(markdown_text: str) -> str:
    """Convert chapter Markdown to cleaned HTML.

    Pandoc-style heading identifiers (``# Title {#id}``) become ``id``
    attributes.
    """
    ids: dict[str, str] = {}

    def strip_id(match: re.Match[str]) -> str:
        heading = match.group(1)
        ids[heading.lstrip("#").strip()] = match.group(2)
        return heading

    markdown_text = _HEADING_ID.sub(strip_id, markdown_text)
    converted = str(markdown2.markdown(markdown_text, extras=MARKDOWN_EXTRAS))
    for text, anchor in ids.items():
        converted = re.sub(
            rf'<h([1-6])(?: id="[^"]*")?>{re.escape(html.escape(text, quote=False))}</h\1>',
            lambda m, a=anchor, t=text: f'<h{m.group(1)} id="{a}">{html.escape(t, quote=False)}</h{m.group(1)}>',
            converted,
            count=1,
        )
    return clean_html_output(converted)


def render_chapter(
    chapter: Chapter,
    book_dir: Path,
    figure_dir: Path,
    dpi: int = DEFAULT_FIGURE_DPI,
) -> RenderedChapter:
    """Run a chapter and convert it to an HTML fragment."""
    blocks = run_chapter(chapter, book_dir, figure_dir, dpi=dpi)
    rendered = RenderedChapter(chapter, blocks)
    rendered.body_html = markdown_to_html(rendered.markdown)
    return rendered


def build_toc(chapters: list[Chapter], current: Chapter | None = None) -> str:
    """Return the sidebar table of contents as an ordered list."""
    items = []
    for chapter in chapters:
        css = ' class="current"' if current is not None and chapter.slug == current.slug else ""
        items.append(
            f'<li{css}><a href="{chapter.output_name}">{html.escape(chapter.title)}</a></li>'
        )
    return "<ol>" + "".join(items) + "</ol>"


def nav_links(chapters: list[Chapter], position: int) -> tuple[str, str]:
    """Return the previous and next links for the chapter at ``position``."""
    prev_link = next_link = ""
    if position > 0:
        prev = chapters[position - 1]
        prev_link = f'<a href="{prev.output_name}">&larr; {html.escape(prev.title)}</a>'
    if position < len(chapters) - 1:
        nxt = chapters[position + 1]
        next_link = f'<a href="{nxt.output_name}">{html.escape(nxt.title)} &rarr;</a>'
    return prev_link, next_link


def assemble_page(
    template: str,
    config: BookConfig,
    chapter: Chapter,
    body_html: str,
) -> str:
    """Fill the page template for one chapter."""
    position = config.chapters.index(chapter)
    prev_link, next_link = nav_links(config.chapters, position)
    return render_template(
        template,
        {
            "version": __version__,
            "page_title": html.escape(chapter.title),
            "book_title": html.escape(config.title),
            "author": html.escape(config.author),
            "toc": build_toc(config.chapters, chapter),
            "content": body_html,
            "prev_link": prev_link,
            "next_link": next_link,
        },
    )


def assemble_index_page(template: str, config: BookConfig) -> str:
    """Build a contents page for books without an ``index.md`` chapter."""
    body = (
        f"<h1>{html.escape(config.title)}</h1>"
        + (f"<p>{html.escape(config.author)}</p>" if config.author else "")
        + build_toc(config.chapters)
    )
    first = config.chapters[0]
    return render_template(
        template,
        {
            "version": __version__,
            "page_title": "Contents",
            "book_title": html.escape(config.title),
            "author": html.escape(config.author),
            "toc": build_toc(config.chapters),
            "content": body,
            "next_link": f'<a href="{first.output_name}">{html.escape(first.title)} &rarr;</a>',
        },
    )


def write_html_output(html_content: str, output_file: Path) -> None:
    """Write ``html_content`` to ``output_file``, creating parent directories.

    Raises
    ------
    OSError
        If the file cannot be written.
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(html_content, encoding="utf-8")
