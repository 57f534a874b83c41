"""Linear regression and calibration curves.

Straight-line fits are the workhorse of analytical chemistry: an external
calibration relates instrument signal to the concentration of a set of
standards, and unknown samples are quantified by inverting that line.
Fits are delegated to statsmodels (OLS, or WLS when weights are given);
this module only prepares the design matrix, drops incomplete rows and
exposes the handful of quantities the book discusses.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
import statsmodels.api as sm

from py4envchem.config import (
    DEFAULT_ALPHA,
    LOD_FACTOR,
    LOQ_FACTOR,
    MIN_REGRESSION_POINTS,
)
from py4envchem.exceptions import ModelFitError

from ..data_import.reshape import require_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearFit:
    """A fitted straight line ``y = intercept + slope * x``.

    Attributes
    ----------
    x, y : str
        Names of the predictor and response columns.
    results : Any
        The underlying statsmodels results object, kept for ``summary()``.
    weighted : bool
        True when the model was fitted by weighted least squares.
    """

    x: str
    y: str
    results: Any
    weighted: bool = False

    @property
    def intercept(self) -> float:
        return float(self.results.params["const"])

    @property
    def slope(self) -> float:
        return float(self.results.params[self.x])

    @property
    def r_squared(self) -> float:
        return float(self.results.rsquared)

    @property
    def slope_p_value(self) -> float:
        return float(self.results.pvalues[self.x])

    @property
    def residual_std_error(self) -> float:
        return math.sqrt(float(self.results.scale))

    @property
    def n(self) -> int:
        return int(self.results.nobs)

    def predict(self, x: Any) -> np.ndarray:
        """Return fitted responses for ``x``."""
        return self.intercept + self.slope * np.asarray(x, dtype=float)

    def is_significant(self, alpha: float = DEFAULT_ALPHA) -> bool:
        """Whether the slope differs from zero at level ``alpha``."""
        return self.slope_p_value < alpha

    def summary(self) -> Any:
        return self.results.summary()


def _complete_cases(
    dataframe: pd.DataFrame, columns: list[str]
) -> pd.DataFrame:
    subset = dataframe[columns].apply(pd.to_numeric, errors="coerce")
    subset = subset.replace([np.inf, -np.inf], np.nan).dropna()
    dropped = len(dataframe) - len(subset)
    if dropped:
        logger.info("Dropped %d incomplete row(s) before fitting", dropped)
    return subset


def fit_linear(
    dataframe: pd.DataFrame, x: str, y: str, weights: str | None = None
) -> LinearFit:
    """Fit ``y ~ x`` by ordinary (or weighted) least squares.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Data holding the predictor and response.
    x, y : str
        Predictor and response column names.
    weights : str | None, optional
        Column of observation weights (e.g. ``1 / sd**2``); switches the
        fit to WLS.

    Returns
    -------
    LinearFit
        The fitted line.

    Raises
    ------
    MissingColumnError
        If a referenced column is absent.
    ModelFitError
        If fewer than three complete rows remain or ``x`` is constant.

    Examples
    --------
    >>> df = pd.DataFrame({"conc": [0, 1, 2, 4], "abs": [0.01, 0.21, 0.39, 0.81]})
    >>> fit = fit_linear(df, "conc", "abs")
    >>> round(fit.slope, 2)
    0.2
    """
    columns = [x, y] + ([weights] if weights else [])
    require_columns(dataframe, columns)
    data = _complete_cases(dataframe, columns)
    if len(data) < MIN_REGRESSION_POINTS:
        raise ModelFitError(
            f"Need at least {MIN_REGRESSION_POINTS} complete rows, got {len(data)}",
            context={"x": x, "y": y},
        )
    if data[x].nunique() < 2:
        raise ModelFitError(f"Predictor '{x}' is constant", context={"x": x})
    design = sm.add_constant(data[[x]], has_constant="add")
    if weights:
        results = sm.WLS(data[y], design, weights=data[weights]).fit()
    else:
        results = sm.OLS(data[y], design).fit()
    fit = LinearFit(x=x, y=y, results=results, weighted=bool(weights))
    logger.debug(
        "Fitted %s ~ %s: slope=%.4g intercept=%.4g r2=%.4f",
        y,
        x,
        fit.slope,
        fit.intercept,
        fit.r_squared,
    )
    return fit


def fit_calibration_curve(
    standards: pd.DataFrame,
    conc_col: str = "concentration",
    signal_col: str = "signal",
    weights: str | None = None,
) -> LinearFit:
    """Fit an external calibration line (signal as a function of concentration)."""
    return fit_linear(standards, x=conc_col, y=signal_col, weights=weights)


def predict_concentration(fit: LinearFit, signal: Any) -> Any:
    """Invert a calibration line: ``(signal - intercept) / slope``.

    Returns a float for scalar input and an array otherwise.

    Raises
    ------
    ModelFitError
        If the calibration slope is zero.
    """
    if fit.slope == 0:
        raise ModelFitError("Calibration slope is zero; cannot invert")
    values = (np.asarray(signal, dtype=float) - fit.intercept) / fit.slope
    if values.ndim == 0:
        return float(values)
    return values


def detection_limits(fit: LinearFit) -> tuple[float, float]:
    """Return the limits of detection and quantification of a calibration.

    ``LOD = 3.3 * s / slope`` and ``LOQ = 10 * s / slope`` where ``s`` is the
    residual standard error of the calibration line.

    Raises
    ------
    ModelFitError
        If the calibration slope is zero.
    """
    if fit.slope == 0:
        raise ModelFitError("Calibration slope is zero; limits are undefined")
    sigma = fit.residual_std_error
    slope = abs(fit.slope)
    return LOD_FACTOR * sigma / slope, LOQ_FACTOR * sigma / slope
