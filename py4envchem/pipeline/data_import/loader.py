"""Loading routines for delimited tabular data used throughout the book.

This module is the canonical ingestion point for the chapters and the
exercises. It reads comma- or tab-delimited text files into pandas
DataFrames, infers the delimiter from the file suffix, normalises the
usual missing-value markers found in instrument exports, and offers a
``clean_names`` helper that turns spreadsheet headers such as
``"Conc. (µg/L)"`` into snake_case identifiers.

Example datasets bundled with the book live in ``book/data`` and can be
listed and loaded by stem.
"""

from __future__ import annotations

import csv
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

import pandas as pd

from py4envchem.config import DATA_DIR, DELIMITERS_BY_SUFFIX, MISSING_VALUE_MARKERS
from py4envchem.exceptions import DataValidationError

logger = logging.getLogger(__name__)

_SNIFF_BYTES = 4096
_SNIFF_DELIMITERS = ",;\t|"
_DATASET_SUFFIXES = (".csv", ".tsv", ".tab", ".txt")


def _sniff_delimiter(path: Path) -> str | None:
    """Guess the delimiter of a ``.txt`` export, or ``None`` for whitespace."""
    with path.open("r", encoding="utf-8-sig") as fh:
        sample = fh.read(_SNIFF_BYTES)
    try:
        return csv.Sniffer().sniff(sample, delimiters=_SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return None


def read_delimited(
    path: Path | str, delimiter: str | None = None, **kwargs: Any
) -> pd.DataFrame:
    """Read a delimited text file into a DataFrame.

    Parameters
    ----------
    path : Path | str
        File to read. ``.csv`` is comma-delimited, ``.tsv``/``.tab`` are
        tab-delimited and ``.txt`` files are sniffed (falling back to runs
        of whitespace).
    delimiter : str | None, optional
        Explicit delimiter; overrides the suffix-based inference.
    **kwargs : Any
        Passed through to :func:`pandas.read_csv`.

    Returns
    -------
    pd.DataFrame
        The parsed table. ``""``, ``"NA"``, ``"N/A"`` and ``"NaN"`` become
        missing values.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DataValidationError
        If the file is empty or cannot be parsed as a table.

    Examples
    --------
    >>> df = read_delimited("book/data/atmospheric_ozone.csv")  # doctest: +SKIP
    >>> list(df.columns)[:2]  # doctest: +SKIP
    ['site', 'date']
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    read_kwargs: dict[str, Any] = {
        "na_values": MISSING_VALUE_MARKERS,
        "encoding": "utf-8-sig",
    }
    if delimiter is None:
        suffix = path.suffix.lower()
        delimiter = DELIMITERS_BY_SUFFIX.get(suffix)
        if delimiter is None and suffix == ".txt":
            delimiter = _sniff_delimiter(path)
    if delimiter is None:
        read_kwargs["sep"] = r"\s+"
        read_kwargs["engine"] = "python"
    else:
        read_kwargs["sep"] = delimiter
    read_kwargs.update(kwargs)
    try:
        dataframe = pd.read_csv(path, **read_kwargs)
    except pd.errors.EmptyDataError as exc:
        raise DataValidationError(
            f"No data found in {path.name}", context={"path": str(path)}
        ) from exc
    except pd.errors.ParserError as exc:
        raise DataValidationError(
            f"Could not parse {path.name}: {exc}", context={"path": str(path)}
        ) from exc
    logger.debug(
        "Read %s: %d rows x %d columns", path.name, len(dataframe), dataframe.shape[1]
    )
    return dataframe


def _snake_case(name: str) -> str:
    text = unicodedata.normalize("NFKD", str(name))
    text = text.replace("µ", "u").replace("μ", "u")
    text = text.encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text)
    text = re.sub(r"[^0-9a-zA-Z]+", "_", text).strip("_").lower()
    if not text:
        text = "x"
    if text[0].isdigit():
        text = f"x{text}"
    return text


def clean_names(dataframe: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``dataframe`` with snake_case column names.

    Non-alphanumeric characters collapse into single underscores, camelCase
    boundaries are split, a leading digit is prefixed with ``x`` and
    duplicate results are suffixed ``_2``, ``_3``...

    Examples
    --------
    >>> df = pd.DataFrame(columns=["Sample ID", "Conc. (µg/L)", "pH", "2nd Rep"])
    >>> list(clean_names(df).columns)
    ['sample_id', 'conc_ug_l', 'p_h', 'x2nd_rep']
    """
    seen: dict[str, int] = {}
    new_names: list[str] = []
    for column in dataframe.columns:
        base = _snake_case(column)
        count = seen.get(base, 0) + 1
        seen[base] = count
        new_names.append(base if count == 1 else f"{base}_{count}")
    cleaned = dataframe.copy()
    cleaned.columns = new_names
    return cleaned


def list_datasets(data_dir: Path | None = None) -> list[str]:
    """Return the stems of the example datasets shipped with the book."""
    directory = Path(data_dir) if data_dir is not None else DATA_DIR
    if not directory.exists():
        return []
    return sorted(
        p.stem for p in directory.iterdir() if p.suffix.lower() in _DATASET_SUFFIXES
    )


def load_dataset(name: str, data_dir: Path | None = None) -> pd.DataFrame:
    """Load a bundled example dataset by name.

    Parameters
    ----------
    name : str
        Dataset stem, e.g. ``"atmospheric_ozone"``.
    data_dir : Path | None, optional
        Alternative directory to search; defaults to ``book/data``.

    Raises
    ------
    DataValidationError
        If no dataset with that name exists.
    """
    directory = Path(data_dir) if data_dir is not None else DATA_DIR
    for suffix in _DATASET_SUFFIXES:
        candidate = directory / f"{name}{suffix}"
        if candidate.exists():
            return read_delimited(candidate)
    raise DataValidationError(
        f"Unknown dataset '{name}'",
        context={"available": list_datasets(directory)},
    )
