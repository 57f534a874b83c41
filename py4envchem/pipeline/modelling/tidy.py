"""Tidy summaries of fitted models.

Three small functions turn any fit from this package into plain data
frames so results can be filtered, tabulated and plotted like any other
data: ``tidy`` gives one row per coefficient, ``glance`` one row per
model and ``augment`` appends fitted values and residuals to the data.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from ..data_import.reshape import require_columns
from .linear import LinearFit
from .nonlinear import NonlinearFit

_TIDY_COLUMNS = ["term", "estimate", "std_error", "statistic", "p_value"]


def tidy(fit: LinearFit | NonlinearFit) -> pd.DataFrame:
    """Return one row per model term with estimate, SE, t statistic and p-value.

    Examples
    --------
    >>> df = pd.DataFrame({"x": [1, 2, 3, 4], "y": [2.1, 3.9, 6.2, 7.8]})
    >>> from py4envchem.pipeline.modelling.linear import fit_linear
    >>> tidy(fit_linear(df, "x", "y"))["term"].tolist()
    ['intercept', 'x']
    """
    if isinstance(fit, LinearFit):
        res = fit.results
        names = {"const": "intercept"}
        return pd.DataFrame(
            {
                "term": [names.get(t, t) for t in res.params.index],
                "estimate": res.params.to_numpy(),
                "std_error": res.bse.to_numpy(),
                "statistic": res.tvalues.to_numpy(),
                "p_value": res.pvalues.to_numpy(),
            },
            columns=_TIDY_COLUMNS,
        )
    estimates = np.array(list(fit.params.values()))
    errors = np.array(list(fit.std_errors.values()))
    with np.errstate(divide="ignore", invalid="ignore"):
        statistic = estimates / errors
    dof = max(fit.df_residual, 1)
    return pd.DataFrame(
        {
            "term": list(fit.params),
            "estimate": estimates,
            "std_error": errors,
            "statistic": statistic,
            "p_value": 2 * stats.t.sf(np.abs(statistic), dof),
        },
        columns=_TIDY_COLUMNS,
    )


def glance(fit: LinearFit | NonlinearFit) -> pd.DataFrame:
    """Return a one-row data frame of model-level statistics."""
    if isinstance(fit, LinearFit):
        res = fit.results
        row = {
            "r_squared": fit.r_squared,
            "adj_r_squared": float(res.rsquared_adj),
            "sigma": fit.residual_std_error,
            "statistic": float(res.fvalue),
            "p_value": float(res.f_pvalue),
            "df_residual": int(res.df_resid),
            "nobs": fit.n,
            "aic": float(res.aic),
        }
    else:
        row = {
            "model": fit.model.name,
            "r_squared": fit.r_squared,
            "sigma": fit.sigma,
            "rss": fit.rss,
            "df_residual": fit.df_residual,
            "nobs": fit.n,
        }
    return pd.DataFrame([row])


def augment(fit: LinearFit | NonlinearFit, dataframe: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``dataframe`` with ``fitted`` and ``residual`` columns."""
    require_columns(dataframe, [fit.x, fit.y])
    out = dataframe.copy()
    x = pd.to_numeric(out[fit.x], errors="coerce")
    out["fitted"] = fit.predict(x)
    out["residual"] = pd.to_numeric(out[fit.y], errors="coerce") - out["fitted"]
    return out
