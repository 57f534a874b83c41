"""Check primitives for student exercise solutions.

Every check inspects the variables a student script left behind (its
*namespace*) and returns a ``CheckResult``. A failing student state is
never an exception: a missing variable, a wrong column or an
insignificant coefficient all become ``passed=False`` with a message the
student can act on.

``CHECKS`` maps the ``type`` strings used in exercise definition files to
these functions.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from py4envchem.config import DEFAULT_ALPHA, DEFAULT_CHECK_TOLERANCE

from ..modelling.linear import LinearFit
from ..modelling.nonlinear import NonlinearFit
from ..modelling.tidy import tidy

Namespace = Mapping[str, Any]


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check."""

    name: str
    passed: bool
    message: str


def _missing(name: str, check: str) -> CheckResult:
    return CheckResult(check, False, f"`{name}` is not defined")


def check_exists(namespace: Namespace, name: str) -> CheckResult:
    """Pass when ``name`` is defined."""
    label = f"{name} exists"
    if name not in namespace:
        return _missing(name, label)
    return CheckResult(label, True, f"`{name}` is defined")


def check_type(namespace: Namespace, name: str, type_name: str) -> CheckResult:
    """Pass when ``name`` is an instance of a class called ``type_name``.

    Matching is by class name along the MRO so definitions can say
    ``"DataFrame"`` or ``"float"`` without importing anything.
    """
    label = f"{name} is a {type_name}"
    if name not in namespace:
        return _missing(name, label)
    value = namespace[name]
    if any(cls.__name__ == type_name for cls in type(value).__mro__):
        return CheckResult(label, True, f"`{name}` is a {type_name}")
    return CheckResult(
        label, False, f"`{name}` is a {type(value).__name__}, expected {type_name}"
    )


def _frame(namespace: Namespace, name: str, label: str) -> tuple[pd.DataFrame | None, CheckResult | None]:
    if name not in namespace:
        return None, _missing(name, label)
    value = namespace[name]
    if not isinstance(value, pd.DataFrame):
        return None, CheckResult(
            label, False, f"`{name}` is a {type(value).__name__}, not a DataFrame"
        )
    return value, None


def check_columns(
    namespace: Namespace, name: str, columns: Sequence[str], exact: bool = False
) -> CheckResult:
    """Pass when the data frame ``name`` has every column in ``columns``.

    With ``exact=True`` the frame must have exactly those columns (any order).
    """
    label = f"{name} has columns {', '.join(columns)}"
    frame, failure = _frame(namespace, name, label)
    if failure:
        return failure
    present = list(frame.columns)
    missing = [c for c in columns if c not in present]
    if missing:
        return CheckResult(label, False, f"missing column(s): {', '.join(missing)}")
    if exact:
        extra = [c for c in present if c not in columns]
        if extra:
            return CheckResult(label, False, f"unexpected column(s): {', '.join(map(str, extra))}")
    return CheckResult(label, True, "all expected columns present")


def check_shape(
    namespace: Namespace, name: str, rows: int | None = None, cols: int | None = None
) -> CheckResult:
    """Pass when the data frame ``name`` has the given number of rows/columns."""
    label = f"{name} shape"
    frame, failure = _frame(namespace, name, label)
    if failure:
        return failure
    n_rows, n_cols = frame.shape
    problems = []
    if rows is not None and n_rows != rows:
        problems.append(f"{n_rows} rows, expected {rows}")
    if cols is not None and n_cols != cols:
        problems.append(f"{n_cols} columns, expected {cols}")
    if problems:
        return CheckResult(label, False, "; ".join(problems))
    return CheckResult(label, True, f"{n_rows} rows x {n_cols} columns")


def check_value_range(
    namespace: Namespace,
    name: str,
    column: str,
    min: float | None = None,
    max: float | None = None,
) -> CheckResult:
    """Pass when every non-missing value of ``column`` lies in ``[min, max]``."""
    label = f"{name}.{column} within range"
    frame, failure = _frame(namespace, name, label)
    if failure:
        return failure
    if column not in frame.columns:
        return CheckResult(label, False, f"missing column: {column}")
    values = pd.to_numeric(frame[column], errors="coerce").dropna()
    if values.empty:
        return CheckResult(label, False, f"`{column}` has no numeric values")
    low, high = float(values.min()), float(values.max())
    if min is not None and low < min:
        return CheckResult(label, False, f"minimum {low:g} is below {min:g}")
    if max is not None and high > max:
        return CheckResult(label, False, f"maximum {high:g} is above {max:g}")
    return CheckResult(label, True, f"values span {low:g} to {high:g}")


def check_equal(
    namespace: Namespace,
    name: str,
    expected: Any,
    tolerance: float = DEFAULT_CHECK_TOLERANCE,
) -> CheckResult:
    """Pass when ``name`` equals ``expected`` (numbers within ``tolerance``)."""
    label = f"{name} value"
    if name not in namespace:
        return _missing(name, label)
    value = namespace[name]
    if isinstance(expected, (int, float)) and not isinstance(expected, bool):
        try:
            ok = math.isclose(float(value), float(expected), rel_tol=tolerance, abs_tol=tolerance)
        except (TypeError, ValueError):
            ok = False
    else:
        ok = value == expected
    if ok:
        return CheckResult(label, True, f"`{name}` = {value!r}")
    return CheckResult(label, False, f"`{name}` = {value!r}, expected {expected!r}")


def check_file_written(namespace: Namespace, path: str) -> CheckResult:
    """Pass when ``path`` (relative to the student script) exists and is non-empty."""
    label = f"{path} written"
    base = Path(namespace.get("__file__", ".")).resolve().parent
    target = Path(path)
    if not target.is_absolute():
        target = base / target
    if not target.exists():
        return CheckResult(label, False, f"{path} was not written")
    if target.is_file() and target.stat().st_size == 0:
        return CheckResult(label, False, f"{path} is empty")
    return CheckResult(label, True, f"{path} exists")


def _slope_p_values(value: Any) -> list[float] | None:
    if isinstance(value, LinearFit):
        return [value.slope_p_value]
    if isinstance(value, NonlinearFit):
        return tidy(value)["p_value"].tolist()
    pvalues = getattr(value, "pvalues", None)
    if pvalues is None:
        return None
    series = pd.Series(pvalues)
    return series.drop(labels=["const", "Intercept"], errors="ignore").tolist()


def check_coefficient_significant(
    namespace: Namespace, name: str, alpha: float = DEFAULT_ALPHA
) -> CheckResult:
    """Pass when at least one non-intercept coefficient of fit ``name`` has p < alpha.

    Accepts fits from this package as well as statsmodels results objects.
    """
    label = f"{name} coefficient significant"
    if name not in namespace:
        return _missing(name, label)
    p_values = _slope_p_values(namespace[name])
    if p_values is None:
        return CheckResult(
            label, False, f"`{name}` is a {type(namespace[name]).__name__}, not a fitted model"
        )
    best = min(p_values) if p_values else float("nan")
    if best < alpha:
        return CheckResult(label, True, f"p = {best:.3g} < {alpha}")
    return CheckResult(label, False, f"p = {best:.3g} is not below {alpha}")


CHECKS: dict[str, Callable[..., CheckResult]] = {
    "exists": check_exists,
    "type": check_type,
    "columns": check_columns,
    "shape": check_shape,
    "value_range": check_value_range,
    "equal": check_equal,
    "file_written": check_file_written,
    "coefficient_significant": check_coefficient_significant,
}
