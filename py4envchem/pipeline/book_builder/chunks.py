"""Parse literate chapters into chunks and execute their code.

Chapters are Markdown with *executable* fenced blocks whose info string is
wrapped in braces, optionally followed by chunk options written as Python
call arguments::

    ```{python ozone-plot, echo=False, fig_caption="Daily maximum ozone"}
    ax = line_by_group(ozone_long, "date", "o3_ppb", "site")
    ```

Plain ```` ```python ```` fences are static listings and are never run.
Inline expressions written as `` `py expr` `` inside prose are evaluated
and replaced by their value.

Code runs sequentially in one namespace per chapter, from the book
directory, with stdout captured and open matplotlib figures saved as PNG
files. Any exception aborts the build with ``ChunkExecutionError``.
"""

from __future__ import annotations

import ast
import contextlib
import io
import logging
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.artist import Artist
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from py4envchem.config import CHUNK_LANGUAGE, DEFAULT_FIGURE_DPI
from py4envchem.exceptions import ChunkExecutionError, ConfigurationError

from ..plotting.figures import save_figure
from ..plotting.tables import format_table

logger = logging.getLogger(__name__)

_CHUNK_OPEN = re.compile(r"^```\{(?P<lang>[A-Za-z0-9_]+)(?P<opts>[^}]*)\}\s*$")
_FENCE = re.compile(r"^(?P<fence>```+|~~~+)")
_INLINE = re.compile(r"`py ([^`]+)`")

DEFAULT_OPTIONS: dict[str, Any] = {
    "label": None,
    "echo": True,
    "eval": True,
    "include": True,
    "output": True,
    "fig_caption": None,
}


@dataclass(frozen=True)
class TextChunk:
    """Prose between code chunks."""

    text: str
    line: int


@dataclass(frozen=True)
class CodeChunk:
    """An executable code chunk."""

    code: str
    options: dict[str, Any]
    line: int


@dataclass
class ChunkOutput:
    """Everything a chunk produced."""

    stdout: str = ""
    value_html: str | None = None
    value_frame: pd.DataFrame | None = None
    value_repr: str | None = None
    figures: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def parse_chunk_options(info: str, line: int = 0) -> dict[str, Any]:
    """Parse a chunk's option string into a dict of options.

    The first positional argument, if any, is the chunk label. Keyword
    values must be Python literals.

    Raises
    ------
    ConfigurationError
        If the options are not valid call arguments, a value is not a
        literal, or an option name is unknown.

    Examples
    --------
    >>> opts = parse_chunk_options(" calib-plot, echo=False, fig_caption='Calibration'")
    >>> opts["label"], opts["echo"], opts["fig_caption"]
    ('calib-plot', False, 'Calibration')
    """
    options = dict(DEFAULT_OPTIONS)
    text = info.strip().lstrip(",").strip()
    if not text:
        return options
    keywords = text
    first, _, rest = text.partition(",")
    if "=" not in first:
        options["label"] = first.strip().strip("'\"")
        keywords = rest
    try:
        call = ast.parse(f"_({keywords})", mode="eval").body
    except SyntaxError as exc:
        raise ConfigurationError(
            f"Line {line}: invalid chunk options '{info.strip()}'", context={"line": line}
        ) from exc
    if not isinstance(call, ast.Call) or call.args:
        raise ConfigurationError(
            f"Line {line}: only one positional label is allowed in chunk options",
            context={"line": line},
        )
    for keyword in call.keywords:
        if keyword.arg not in DEFAULT_OPTIONS:
            raise ConfigurationError(
                f"Line {line}: unknown chunk option '{keyword.arg}'",
                context={"line": line, "known": sorted(DEFAULT_OPTIONS)},
            )
        try:
            options[keyword.arg] = ast.literal_eval(keyword.value)
        except ValueError as exc:
            raise ConfigurationError(
                f"Line {line}: option '{keyword.arg}' must be a literal",
                context={"line": line},
            ) from exc
    return options


def parse_chunks(text: str) -> list[TextChunk | CodeChunk]:
    """Split chapter source into alternating text and code chunks.

    Raises
    ------
    ConfigurationError
        If an executable chunk is never closed, or uses a language other
        than Python.
    """
    chunks: list[TextChunk | CodeChunk] = []
    buffer: list[str] = []
    buffer_start = 1
    lines = text.splitlines()
    index = 0
    static_fence: str | None = None
    while index < len(lines):
        line = lines[index]
        number = index + 1
        if static_fence is not None:
            buffer.append(line)
            if line.strip() == static_fence:
                static_fence = None
            index += 1
            continue
        opening = _CHUNK_OPEN.match(line)
        if opening is None:
            fence = _FENCE.match(line)
            if fence is not None:
                static_fence = fence.group("fence")
            buffer.append(line)
            index += 1
            continue
        if opening.group("lang").lower() != CHUNK_LANGUAGE:
            raise ConfigurationError(
                f"Line {number}: unsupported chunk language '{opening.group('lang')}'",
                context={"line": number},
            )
        if buffer:
            chunks.append(TextChunk("\n".join(buffer), buffer_start))
            buffer = []
        options = parse_chunk_options(opening.group("opts"), number)
        code_lines: list[str] = []
        index += 1
        while index < len(lines) and lines[index].strip() != "```":
            code_lines.append(lines[index])
            index += 1
        if index >= len(lines):
            raise ConfigurationError(
                f"Line {number}: code chunk is not closed", context={"line": number}
            )
        chunks.append(CodeChunk("\n".join(code_lines), options, number))
        index += 1
        buffer_start = index + 1
    if buffer:
        chunks.append(TextChunk("\n".join(buffer), buffer_start))
    return chunks


def _is_plot_object(value: Any) -> bool:
    if isinstance(value, (Axes, Figure, Artist)):
        return True
    if isinstance(value, (list, tuple)) and value:
        return all(isinstance(v, Artist) for v in value)
    return False


class ChunkExecutor:
    """Run a chapter's chunks in a shared namespace.

    Parameters
    ----------
    chapter : str
        Chapter slug, used in figure names and error messages.
    figure_dir : Path
        Directory figures are written to.
    dpi : int, optional
        Resolution of saved figures.
    namespace : dict | None, optional
        Initial namespace; a fresh ``__main__``-like dict by default.
    """

    def __init__(
        self,
        chapter: str,
        figure_dir: Path,
        dpi: int = DEFAULT_FIGURE_DPI,
        namespace: dict[str, Any] | None = None,
    ) -> None:
        self.chapter = chapter
        self.figure_dir = Path(figure_dir)
        self.dpi = dpi
        self.namespace: dict[str, Any] = (
            namespace if namespace is not None else {"__name__": "__main__"}
        )
        self._chunk_count = 0
        plt.close("all")

    def run(self, chunk: CodeChunk) -> ChunkOutput:
        """Execute one chunk and collect its output.

        Raises
        ------
        ChunkExecutionError
            If the chunk's code raises.
        """
        self._chunk_count += 1
        output = ChunkOutput()
        if not chunk.options["eval"]:
            return output
        filename = f"<{self.chapter}:{chunk.line}>"
        stdout = io.StringIO()
        try:
            tree = ast.parse(chunk.code, filename=filename, mode="exec")
            ast.increment_lineno(tree, chunk.line)
            last_expr: ast.Expression | None = None
            if tree.body and isinstance(tree.body[-1], ast.Expr):
                last_expr = ast.Expression(tree.body.pop().value)
            with warnings.catch_warnings(record=True) as caught, contextlib.redirect_stdout(stdout):
                warnings.simplefilter("always")
                exec(compile(tree, filename, "exec"), self.namespace)
                value = (
                    eval(compile(last_expr, filename, "eval"), self.namespace)
                    if last_expr is not None
                    else None
                )
        except Exception as exc:
            plt.close("all")
            raise ChunkExecutionError(self.chapter, chunk.line, exc) from exc
        output.stdout = stdout.getvalue()
        output.warnings = [str(w.message) for w in caught]
        for message in output.warnings:
            logger.warning("%s:%d: %s", self.chapter, chunk.line, message)
        self._display(value, output)
        output.figures = self._save_figures(chunk)
        return output

    def _display(self, value: Any, output: ChunkOutput) -> None:
        if value is None or _is_plot_object(value):
            return
        if isinstance(value, pd.Series):
            value = value.to_frame()
        if isinstance(value, pd.DataFrame):
            output.value_frame = value
            output.value_html = format_table(value)
        else:
            output.value_repr = repr(value)

    def _save_figures(self, chunk: CodeChunk) -> list[Path]:
        label = chunk.options.get("label") or f"chunk{self._chunk_count}"
        saved: list[Path] = []
        for position, number in enumerate(plt.get_fignums(), 1):
            figure = plt.figure(number)
            path = self.figure_dir / f"{self.chapter}-{label}-{position}.png"
            saved.append(save_figure(figure, path, dpi=self.dpi))
        return saved

    def eval_inline(self, text: str, line: int) -> str:
        """Replace `` `py expr` `` spans in prose with their evaluated value."""

        def replace(match: re.Match[str]) -> str:
            try:
                value = eval(match.group(1), self.namespace)
            except Exception as exc:
                raise ChunkExecutionError(self.chapter, line, exc) from exc
            return str(value)

        return _INLINE.sub(replace, text)
