"""Reshape data frames between long and wide layouts.

Instrument exports usually arrive *wide* (one column per analyte) while
plotting by group and most summaries want *long* data (an analyte name
column and a value column). These helpers are thin, column-checked
wrappers over :meth:`pandas.DataFrame.melt` and
:meth:`pandas.DataFrame.pivot`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from py4envchem.exceptions import DataValidationError, MissingColumnError


def require_columns(dataframe: pd.DataFrame, columns: Iterable[str]) -> None:
    """Raise ``MissingColumnError`` unless every name in ``columns`` exists.

    Examples
    --------
    >>> require_columns(pd.DataFrame({"a": [1]}), ["a"])
    >>> require_columns(pd.DataFrame({"a": [1]}), ["a", "b"])
    Traceback (most recent call last):
    ...
    py4envchem.exceptions.MissingColumnError: DATA_VALIDATION_ERROR: Column(s) not found: b
    """
    missing = [c for c in columns if c not in dataframe.columns]
    if missing:
        raise MissingColumnError(missing, list(dataframe.columns))


def pivot_longer(
    dataframe: pd.DataFrame,
    columns: Sequence[str],
    names_to: str = "name",
    values_to: str = "value",
) -> pd.DataFrame:
    """Stack ``columns`` into a name/value pair of columns.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Wide input data.
    columns : Sequence[str]
        Columns to stack. All other columns are kept as identifiers.
    names_to : str, optional
        Name of the new column holding the former column names.
    values_to : str, optional
        Name of the new column holding the values.

    Returns
    -------
    pd.DataFrame
        Long data ordered by original row, then by the order of ``columns``.

    Raises
    ------
    MissingColumnError
        If any of ``columns`` is absent.
    """
    columns = list(columns)
    require_columns(dataframe, columns)
    id_columns = [c for c in dataframe.columns if c not in columns]
    long = dataframe.reset_index(drop=True).melt(
        id_vars=id_columns,
        value_vars=columns,
        var_name=names_to,
        value_name=values_to,
        ignore_index=False,
    )
    long["_order"] = long[names_to].map({c: i for i, c in enumerate(columns)})
    long = long.rename_axis("_row").sort_values(["_row", "_order"], kind="stable")
    return long.drop(columns="_order").reset_index(drop=True)


def pivot_wider(
    dataframe: pd.DataFrame,
    names_from: str = "name",
    values_from: str = "value",
    id_columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Spread a name/value pair of columns into one column per name.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Long input data.
    names_from : str, optional
        Column whose values become the new column names.
    values_from : str, optional
        Column whose values fill the new columns.
    id_columns : Sequence[str] | None, optional
        Columns identifying a row of the wide output. Defaults to every
        column other than ``names_from`` and ``values_from``.

    Returns
    -------
    pd.DataFrame
        Wide data with a flat column index; new columns appear in order of
        first appearance of each name.

    Raises
    ------
    MissingColumnError
        If referenced columns are absent.
    DataValidationError
        If an id/name combination occurs more than once.
    """
    require_columns(dataframe, [names_from, values_from])
    if id_columns is None:
        id_columns = [
            c for c in dataframe.columns if c not in (names_from, values_from)
        ]
    id_columns = list(id_columns)
    require_columns(dataframe, id_columns)
    key = id_columns + [names_from]
    duplicated = dataframe.duplicated(subset=key, keep=False)
    if duplicated.any():
        raise DataValidationError(
            "Values are not uniquely identified; aggregate before pivoting",
            context={"duplicate_rows": int(duplicated.sum()), "key": key},
        )
    names = list(pd.unique(dataframe[names_from]))
    if id_columns:
        wide = dataframe.pivot(index=id_columns, columns=names_from, values=values_from)
        wide = wide.reindex(columns=names).reset_index()
        row_order = dataframe[id_columns].drop_duplicates()
        wide = row_order.merge(wide, on=id_columns, how="left")
    else:
        wide = pd.DataFrame(
            [dataframe.set_index(names_from)[values_from].reindex(names).to_list()],
            columns=names,
        )
    wide.columns.name = None
    return wide.reset_index(drop=True)


def separate(
    dataframe: pd.DataFrame, column: str, into: Sequence[str], sep: str = "_"
) -> pd.DataFrame:
    """Split one string column into several, dropping the original.

    Examples
    --------
    >>> df = pd.DataFrame({"sample": ["LakeA_2021", "LakeB_2022"]})
    >>> separate(df, "sample", ["site", "year"]).to_dict("list")
    {'site': ['LakeA', 'LakeB'], 'year': ['2021', '2022']}
    """
    require_columns(dataframe, [column])
    into = list(into)
    parts = dataframe[column].astype(str).str.split(sep, n=len(into) - 1, expand=True)
    if parts.shape[1] != len(into) or parts.isna().any(axis=None):
        short_rows = int(parts.isna().any(axis=1).sum())
        raise DataValidationError(
            f"Column '{column}' does not split into {len(into)} pieces on every row",
            context={"column": column, "sep": sep, "short_rows": short_rows},
        )
    parts.columns = into
    position = dataframe.columns.get_loc(column)
    result = dataframe.drop(columns=column)
    for offset, name in enumerate(into):
        result.insert(position + offset, name, parts[name])
    return result
