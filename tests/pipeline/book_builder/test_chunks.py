"""Tests for chunk parsing and execution."""

import pandas as pd
import pytest

from py4envchem.exceptions import ChunkExecutionError, ConfigurationError
from py4envchem.pipeline.book_builder.chunks import (
    DEFAULT_OPTIONS,
    ChunkExecutor,
    CodeChunk,
    TextChunk,
    parse_chunk_options,
    parse_chunks,
)


def _chunk(code, line=1, **options):
    opts = dict(DEFAULT_OPTIONS)
    opts.update(options)
    return CodeChunk(code, opts, line)


def test_parse_chunk_options_defaults():
    """Test Parse chunk options defaults."""
    assert parse_chunk_options("") == DEFAULT_OPTIONS


def test_parse_chunk_options_label_and_keywords():
    """Test Parse chunk options label and keywords."""
    opts = parse_chunk_options(" calib-plot, echo=False, fig_caption='Calibration line'")
    assert opts["label"] == "calib-plot"
    assert opts["echo"] is False
    assert opts["fig_caption"] == "Calibration line"
    assert opts["eval"] is True


def test_parse_chunk_options_keywords_only():
    """Test Parse chunk options keywords only."""
    opts = parse_chunk_options(", include=False")
    assert opts["label"] is None
    assert opts["include"] is False


@pytest.mark.parametrize(
    "info",
    [
        "label, colour='red'",
        "label, echo=not_a_literal",
        "label, echo=(",
        "label, 'extra', echo=True",
    ],
)
def test_parse_chunk_options_rejects_invalid(info):
    """Test Parse chunk options rejects invalid."""
    with pytest.raises(ConfigurationError):
        parse_chunk_options(info, line=7)


def test_parse_chunks_splits_text_and_code():
    """Test Parse chunks splits text and code."""
    text = (
        "# Title\n"
        "\n"
        "```{python first}\n"
        "x = 1\n"
        "```\n"
        "Between.\n"
        "```python\n"
        "static = True\n"
        "```\n"
        "```{python, echo=False}\n"
        "x + 1\n"
        "```\n"
    )
    chunks = parse_chunks(text)
    assert [type(c) for c in chunks] == [TextChunk, CodeChunk, TextChunk, CodeChunk]
    assert chunks[1].code == "x = 1"
    assert chunks[1].line == 3
    assert chunks[1].options["label"] == "first"
    assert "static = True" in chunks[2].text
    assert chunks[2].line == 6
    assert chunks[3].options["echo"] is False


def test_parse_chunks_ignores_chunk_syntax_inside_static_fence():
    """Test Parse chunks ignores chunk syntax inside static fence."""
    text = "````markdown\n```{python}\nx = 1\n```\n````\n"
    chunks = parse_chunks(text)
    assert len(chunks) == 1
    assert isinstance(chunks[0], TextChunk)


def test_parse_chunks_unclosed_chunk():
    """Test Parse chunks unclosed chunk."""
    with pytest.raises(ConfigurationError, match="Line 2"):
        parse_chunks("intro\n```{python}\nx = 1\n")


def test_parse_chunks_rejects_other_languages():
    """Test Parse chunks rejects other languages."""
    with pytest.raises(ConfigurationError, match="unsupported chunk language"):
        parse_chunks("```{r}\nx <- 1\n```\n")


def test_executor_shares_namespace_and_captures_stdout(tmp_path):
    """Test Executor shares namespace and captures stdout."""
    executor = ChunkExecutor("ch", tmp_path)
    first = executor.run(_chunk("x = 40\nprint('hello')"))
    second = executor.run(_chunk("x + 2"))
    assert first.stdout == "hello\n"
    assert first.value_repr is None
    assert second.value_repr == "42"


def test_executor_displays_frames_as_tables(tmp_path):
    """Test Executor displays frames as tables."""
    executor = ChunkExecutor("ch", tmp_path)
    output = executor.run(_chunk("import pandas as pd\npd.DataFrame({'a': [1.23456]})"))
    assert isinstance(output.value_frame, pd.DataFrame)
    assert "book-table" in output.value_html
    series = executor.run(_chunk("pd.Series([1, 2], name='b')"))
    assert list(series.value_frame.columns) == ["b"]


def test_executor_skips_eval_false(tmp_path):
    """Test Executor skips eval false."""
    executor = ChunkExecutor("ch", tmp_path)
    output = executor.run(_chunk("raise RuntimeError('boom')", eval=False))
    assert output.stdout == ""
    assert output.figures == []


def test_executor_error_reports_chapter_and_line(tmp_path):
    """Test Executor error reports chapter and line."""
    executor = ChunkExecutor("02-tidy", tmp_path)
    with pytest.raises(ChunkExecutionError) as excinfo:
        executor.run(_chunk("y = undefined_name", line=12))
    assert excinfo.value.chapter == "02-tidy"
    assert excinfo.value.line == 12
    assert "NameError" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, NameError)


def test_executor_syntax_error_is_chunk_error(tmp_path):
    """Test Executor syntax error is chunk error."""
    executor = ChunkExecutor("ch", tmp_path)
    with pytest.raises(ChunkExecutionError):
        executor.run(_chunk("def broken(:"))


def test_executor_saves_figures_with_label(tmp_path):
    """Test Executor saves figures with label."""
    executor = ChunkExecutor("ch", tmp_path / "figures", dpi=40)
    code = (
        "import matplotlib.pyplot as plt\n"
        "fig, axes = plt.subplots(1, 2)\n"
        "plt.figure()\n"
        "axes[0].plot([1, 2], [3, 4])"
    )
    output = executor.run(_chunk(code, label="pair"))
    names = [p.name for p in output.figures]
    assert names == ["ch-pair-1.png", "ch-pair-2.png"]
    assert all(p.exists() for p in output.figures)
    assert output.value_repr is None
    unlabelled = executor.run(_chunk("plt.plot([0, 1])"))
    assert [p.name for p in unlabelled.figures] == ["ch-chunk2-1.png"]


def test_executor_records_warnings(tmp_path):
    """Test Executor records warnings."""
    executor = ChunkExecutor("ch", tmp_path)
    output = executor.run(_chunk("import warnings\nwarnings.warn('check units')"))
    assert output.warnings == ["check units"]


def test_eval_inline(tmp_path):
    """Test Eval inline."""
    executor = ChunkExecutor("ch", tmp_path)
    executor.run(_chunk("n = 12"))
    assert executor.eval_inline("We sampled `py n` lakes.", 3) == "We sampled 12 lakes."
    with pytest.raises(ChunkExecutionError) as excinfo:
        executor.eval_inline("`py missing + 1`", 9)
    assert excinfo.value.line == 9
