"""Pipeline-style verbs for transforming data frames.

Each verb takes a DataFrame as its first argument and returns a new one,
so a chapter can chain them with :meth:`pandas.DataFrame.pipe`::

    (
        load_dataset("lake_metals")
        .pipe(filter_rows, "depth_m < 5")
        .pipe(mutate, cu_umol=lambda d: d["cu_ug_l"] / 63.546)
        .pipe(summarize, by="lake", mean_cu=("cu_umol", "mean"))
    )

Verbs check the columns they reference and never modify their input.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pandas as pd

from py4envchem.exceptions import DataValidationError, MissingColumnError

from .reshape import require_columns


def _call_on_frame(dataframe: pd.DataFrame, func: Callable[[pd.DataFrame], Any]) -> Any:
    try:
        return func(dataframe)
    except KeyError as exc:
        key = exc.args[0] if exc.args else None
        if isinstance(key, str) and key not in dataframe.columns:
            raise MissingColumnError([key], list(dataframe.columns)) from exc
        raise


def select(dataframe: pd.DataFrame, *columns: str) -> pd.DataFrame:
    """Keep only ``columns``, in the given order."""
    require_columns(dataframe, columns)
    return dataframe.loc[:, list(columns)].copy()


def rename(dataframe: pd.DataFrame, **mapping: str) -> pd.DataFrame:
    """Rename columns using ``new_name=old_name`` keyword pairs.

    Examples
    --------
    >>> df = pd.DataFrame({"Conc": [1.0]})
    >>> list(rename(df, conc_mg_l="Conc").columns)
    ['conc_mg_l']
    """
    require_columns(dataframe, mapping.values())
    return dataframe.rename(columns={old: new for new, old in mapping.items()})


def filter_rows(
    dataframe: pd.DataFrame, condition: str | Callable[[pd.DataFrame], Any]
) -> pd.DataFrame:
    """Keep rows matching ``condition``.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Input data.
    condition : str | Callable
        Either a :meth:`pandas.DataFrame.query` expression or a callable
        returning a boolean mask for the frame.

    Raises
    ------
    DataValidationError
        If a query expression references unknown names or the callable
        does not produce a boolean mask of matching length.
    """
    if isinstance(condition, str):
        try:
            result = dataframe.query(condition)
        except (pd.errors.UndefinedVariableError, SyntaxError) as exc:
            raise DataValidationError(
                f"Invalid filter expression '{condition}': {exc}",
                context={"available": list(dataframe.columns)},
            ) from exc
        return result.copy()
    values = _call_on_frame(dataframe, condition)
    try:
        mask = pd.Series(values, index=dataframe.index)
    except ValueError as exc:
        raise DataValidationError(
            f"Filter callable must return one value per row: {exc}",
            context={"rows": len(dataframe)},
        ) from exc
    if mask.dtype != bool:
        raise DataValidationError("Filter callable must return a boolean mask")
    return dataframe.loc[mask].copy()


def mutate(dataframe: pd.DataFrame, **columns: Any) -> pd.DataFrame:
    """Add or replace columns.

    Callables are evaluated against the frame as it stands after the
    previous assignments, so later columns may use earlier ones.

    Raises
    ------
    MissingColumnError
        If a callable indexes a column the frame does not have.
    DataValidationError
        If a new column does not have one value per row.

    Examples
    --------
    >>> df = pd.DataFrame({"mass_mg": [2.0, 4.0], "volume_l": [0.5, 0.5]})
    >>> mutate(df, conc=lambda d: d["mass_mg"] / d["volume_l"])["conc"].tolist()
    [4.0, 8.0]
    """
    result = dataframe.copy()
    for name, value in columns.items():
        if callable(value):
            value = _call_on_frame(result, value)
        try:
            result[name] = value
        except ValueError as exc:
            raise DataValidationError(
                f"Column '{name}' does not match the frame length: {exc}",
                context={"column": name, "rows": len(result)},
            ) from exc
    return result


def arrange(
    dataframe: pd.DataFrame, *columns: str, descending: bool = False
) -> pd.DataFrame:
    """Sort rows by ``columns`` (stable), resetting the index."""
    require_columns(dataframe, columns)
    return dataframe.sort_values(
        list(columns), ascending=not descending, kind="stable"
    ).reset_index(drop=True)


def summarize(
    dataframe: pd.DataFrame,
    by: str | Sequence[str] | None = None,
    **aggregations: tuple[str, str | Callable[[pd.Series], Any]],
) -> pd.DataFrame:
    """Collapse rows into summary statistics, optionally per group.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Input data.
    by : str | Sequence[str] | None, optional
        Grouping column(s). ``None`` produces a single summary row.
    **aggregations : tuple[str, str | Callable]
        ``output_name=(column, function)`` pairs, e.g.
        ``mean_o3=("o3_ppb", "mean")``.

    Returns
    -------
    pd.DataFrame
        One row per group (grouping columns first), flat column index.

    Raises
    ------
    DataValidationError
        If no aggregation is given.
    MissingColumnError
        If a grouping or aggregated column is missing.
    """
    if not aggregations:
        raise DataValidationError("summarize() needs at least one aggregation")
    group_columns = [by] if isinstance(by, str) else list(by or [])
    require_columns(dataframe, group_columns + [col for col, _ in aggregations.values()])
    if group_columns:
        return (
            dataframe.groupby(group_columns, sort=True, dropna=False)
            .agg(**aggregations)
            .reset_index()
        )
    row = {
        name: dataframe[column].agg(func) for name, (column, func) in aggregations.items()
    }
    return pd.DataFrame([row])
