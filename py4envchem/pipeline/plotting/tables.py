"""Table formatting for rendered chapters.

Turns data frames into compact HTML or Markdown tables with rounded
numbers, the way results tables appear in the book.
"""

from __future__ import annotations

import html

import pandas as pd

from py4envchem.config import MAX_TABLE_ROWS, TABLE_CSS_CLASS


def _rounded(dataframe: pd.DataFrame, digits: int) -> pd.DataFrame:
    out = dataframe.copy()
    numeric = out.select_dtypes("number").columns
    out[numeric] = out[numeric].round(digits)
    return out


def format_table(
    dataframe: pd.DataFrame,
    digits: int = 3,
    caption: str | None = None,
    max_rows: int | None = MAX_TABLE_ROWS,
) -> str:
    """Render ``dataframe`` as an HTML table.

    Numeric columns are rounded to ``digits`` decimals, the index is
    omitted and at most ``max_rows`` rows are shown (``None`` shows all),
    followed by a row-count note when rows were elided.

    Examples
    --------
    >>> html_table = format_table(pd.DataFrame({"a": [1.23456]}), digits=2)
    >>> "1.23" in html_table and 'class="book-table"' in html_table
    True
    """
    shown = dataframe if max_rows is None else dataframe.head(max_rows)
    table = _rounded(shown, digits).to_html(
        index=False, classes=TABLE_CSS_CLASS, border=0, na_rep="NA"
    )
    table = table.replace(f'class="dataframe {TABLE_CSS_CLASS}"', f'class="{TABLE_CSS_CLASS}"')
    if caption:
        table = table.replace(
            f'class="{TABLE_CSS_CLASS}">',
            f'class="{TABLE_CSS_CLASS}">\n  <caption>{html.escape(caption)}</caption>',
            1,
        )
    if max_rows is not None and len(dataframe) > max_rows:
        table += (
            f'\n<p class="table-note">Showing {max_rows} of {len(dataframe)} rows '
            f"({dataframe.shape[1]} columns).</p>"
        )
    return table


def markdown_table(dataframe: pd.DataFrame, digits: int = 3) -> str:
    """Render ``dataframe`` as a pipe-delimited Markdown table.

    Examples
    --------
    >>> print(markdown_table(pd.DataFrame({"site": ["A"], "o3": [31.256]}), digits=1))
    | site | o3 |
    | --- | --- |
    | A | 31.3 |
    """
    rounded = _rounded(dataframe, digits)
    header = "| " + " | ".join(str(c) for c in rounded.columns) + " |"
    rule = "| " + " | ".join("---" for _ in rounded.columns) + " |"
    rows = [
        "| " + " | ".join("NA" if pd.isna(v) else str(v) for v in record) + " |"
        for record in rounded.itertuples(index=False, name=None)
    ]
    return "\n".join([header, rule, *rows])
