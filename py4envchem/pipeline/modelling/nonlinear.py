"""Non-linear regression for common environmental-chemistry models.

Kinetic decay, enzyme saturation and sorption isotherms do not linearise
cleanly, so the book fits them directly with
:func:`scipy.optimize.curve_fit`. Models are registered by name together
with a starting-guess heuristic so that a chapter can write
``fit_nonlinear(df, "time_h", "conc", "exponential_decay")`` without
tuning ``p0`` by hand.
"""

from __future__ import annotations

import logging
import math
import warnings
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from scipy.optimize import OptimizeWarning, curve_fit

from py4envchem.config import CURVE_FIT_MAXFEV, MIN_REGRESSION_POINTS
from py4envchem.exceptions import ConfigurationError, ModelFitError

from ..data_import.reshape import require_columns
from .linear import _complete_cases

logger = logging.getLogger(__name__)


def exponential_decay(t, c0, k):
    """First-order kinetics: ``c0 * exp(-k * t)``."""
    return c0 * np.exp(-k * t)


def michaelis_menten(s, vmax, km):
    """Saturation kinetics: ``vmax * s / (km + s)``."""
    return vmax * s / (km + s)


def langmuir(c, qmax, k):
    """Langmuir isotherm: ``qmax * k * c / (1 + k * c)``."""
    return qmax * k * c / (1.0 + k * c)


def freundlich(c, kf, n):
    """Freundlich isotherm: ``kf * c ** (1 / n)``."""
    return kf * np.power(c, 1.0 / n)


def _span(x: np.ndarray) -> float:
    span = float(np.max(x) - np.min(x))
    return span if span > 0 else 1.0


@dataclass(frozen=True)
class NonlinearModel:
    """A named model function with parameter names and a starting guess."""

    name: str
    func: Callable[..., np.ndarray]
    param_names: tuple[str, ...]
    initial_guess: Callable[[np.ndarray, np.ndarray], list[float]]
    lower_bounds: tuple[float, ...] = ()


MODELS: dict[str, NonlinearModel] = {
    "exponential_decay": NonlinearModel(
        "exponential_decay",
        exponential_decay,
        ("c0", "k"),
        lambda x, y: [float(np.max(y)), 1.0 / _span(x)],
    ),
    "michaelis_menten": NonlinearModel(
        "michaelis_menten",
        michaelis_menten,
        ("vmax", "km"),
        lambda x, y: [float(np.max(y)), float(np.median(x)) or 1.0],
        (0.0, 0.0),
    ),
    "langmuir": NonlinearModel(
        "langmuir",
        langmuir,
        ("qmax", "k"),
        lambda x, y: [float(np.max(y)), 1.0 / (float(np.median(x)) or 1.0)],
        (0.0, 0.0),
    ),
    "freundlich": NonlinearModel(
        "freundlich",
        freundlich,
        ("kf", "n"),
        lambda x, y: [float(np.median(y)) or 1.0, 2.0],
        (0.0, 1e-6),
    ),
}


def get_model(name: str) -> NonlinearModel:
    """Look up a registered model by name.

    Raises
    ------
    ConfigurationError
        If ``name`` is not registered.
    """
    try:
        return MODELS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown non-linear model '{name}'",
            context={"available": sorted(MODELS)},
        ) from None


@dataclass(frozen=True)
class NonlinearFit:
    """Result of a non-linear least-squares fit."""

    model: NonlinearModel
    x: str
    y: str
    params: dict[str, float]
    std_errors: dict[str, float]
    rss: float
    tss: float
    n: int
    covariance: np.ndarray = field(repr=False)

    @property
    def df_residual(self) -> int:
        return self.n - len(self.params)

    @property
    def r_squared(self) -> float:
        """Pseudo R² (``1 - RSS/TSS``); not a variance decomposition."""
        return 1.0 - self.rss / self.tss if self.tss > 0 else float("nan")

    @property
    def sigma(self) -> float:
        dof = self.df_residual
        return math.sqrt(self.rss / dof) if dof > 0 else float("nan")

    def predict(self, x) -> np.ndarray:
        return self.model.func(np.asarray(x, dtype=float), *self.params.values())

    def half_life(self) -> float:
        """Half-life ``ln(2) / k`` of an exponential-decay fit.

        Raises
        ------
        ModelFitError
            For any other model, or a non-positive rate constant.
        """
        if self.model.name != "exponential_decay":
            raise ModelFitError(
                "Half-life is only defined for exponential_decay fits",
                context={"model": self.model.name},
            )
        k = self.params["k"]
        if k <= 0:
            raise ModelFitError("Rate constant is not positive", context={"k": k})
        return math.log(2) / k


def fit_nonlinear(
    dataframe: pd.DataFrame,
    x: str,
    y: str,
    model: str,
    p0: Sequence[float] | None = None,
    bounds: tuple[Sequence[float], Sequence[float]] | None = None,
) -> NonlinearFit:
    """Fit a registered non-linear model to two columns.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Data holding the predictor and response.
    x, y : str
        Predictor and response column names.
    model : str
        Registered model name (see ``MODELS``).
    p0 : Sequence[float] | None, optional
        Starting values; defaults to the model's heuristic guess.
    bounds : tuple | None, optional
        ``(lower, upper)`` parameter bounds; defaults to the model's lower
        bounds (if any) and no upper bound.

    Raises
    ------
    ConfigurationError
        If ``model`` is unknown.
    MissingColumnError
        If a referenced column is absent.
    ModelFitError
        If too few complete rows remain or the optimiser does not converge.

    Examples
    --------
    >>> t = np.arange(0, 10.0)
    >>> df = pd.DataFrame({"t": t, "c": 5.0 * np.exp(-0.3 * t)})
    >>> fit = fit_nonlinear(df, "t", "c", "exponential_decay")
    >>> round(fit.params["k"], 3)
    0.3
    """
    spec = get_model(model)
    require_columns(dataframe, [x, y])
    data = _complete_cases(dataframe, [x, y])
    n_params = len(spec.param_names)
    if len(data) < max(MIN_REGRESSION_POINTS, n_params + 1):
        raise ModelFitError(
            f"Not enough complete rows to fit {model}", context={"rows": len(data)}
        )
    xs = data[x].to_numpy(dtype=float)
    ys = data[y].to_numpy(dtype=float)
    start = list(p0) if p0 is not None else spec.initial_guess(xs, ys)
    if bounds is None:
        lower = spec.lower_bounds or tuple(-np.inf for _ in spec.param_names)
        bounds = (lower, tuple(np.inf for _ in spec.param_names))
        start = [max(v, lo + 1e-9) if np.isfinite(lo) else v for v, lo in zip(start, lower)]
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", OptimizeWarning)
        try:
            popt, pcov = curve_fit(
                spec.func, xs, ys, p0=start, bounds=bounds, maxfev=CURVE_FIT_MAXFEV
            )
        except (RuntimeError, ValueError) as exc:
            raise ModelFitError(
                f"{model} fit did not converge: {exc}", context={"p0": start}
            ) from exc
    residuals = ys - spec.func(xs, *popt)
    rss = float(np.sum(residuals**2))
    tss = float(np.sum((ys - ys.mean()) ** 2))
    errors = np.sqrt(np.diag(pcov)) if np.all(np.isfinite(pcov)) else np.full(n_params, np.nan)
    fit = NonlinearFit(
        model=spec,
        x=x,
        y=y,
        params={name: float(v) for name, v in zip(spec.param_names, popt)},
        std_errors={name: float(e) for name, e in zip(spec.param_names, errors)},
        rss=rss,
        tss=tss,
        n=len(xs),
        covariance=pcov,
    )
    logger.debug("Fitted %s: %s", model, fit.params)
    return fit
