"""Figure recipes used in the chapters and exercises.

Each recipe draws onto a matplotlib ``Axes`` (creating a new figure when
none is given) and returns the ``Axes`` so chapters can keep adjusting
labels and limits. ``save_figure`` writes a figure to disk and closes it
so long renders do not accumulate open figures.
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from py4envchem.config import DEFAULT_FIGURE_DPI

from ..data_import.reshape import require_columns
from ..modelling.linear import LinearFit
from ..modelling.nonlinear import NonlinearFit
from ..modelling.tidy import augment

logger = logging.getLogger(__name__)

_FIT_LINE_POINTS = 200


def _axes(ax: Axes | None, figsize: tuple[float, float] = (6.0, 4.0)) -> Axes:
    if ax is not None:
        return ax
    _, new_ax = plt.subplots(figsize=figsize)
    return new_ax


def scatter_with_fit(
    dataframe: pd.DataFrame,
    x: str,
    y: str,
    fit: LinearFit | NonlinearFit | None = None,
    ax: Axes | None = None,
    xlabel: str | None = None,
    ylabel: str | None = None,
    title: str | None = None,
) -> Axes:
    """Scatter ``y`` against ``x`` and overlay a fitted curve when given.

    Parameters
    ----------
    dataframe : pd.DataFrame
        Data to plot.
    x, y : str
        Column names for the horizontal and vertical axes.
    fit : LinearFit | NonlinearFit | None, optional
        Model whose predictions are drawn across the observed ``x`` range.
    ax : Axes | None, optional
        Axes to draw on; a new figure is created when omitted.
    xlabel, ylabel, title : str | None, optional
        Axis labels and title; labels default to the column names.

    Returns
    -------
    Axes
        The axes that were drawn on.

    Raises
    ------
    MissingColumnError
        If ``x`` or ``y`` is absent.
    """
    require_columns(dataframe, [x, y])
    ax = _axes(ax)
    ax.scatter(dataframe[x], dataframe[y], color="black", s=20, zorder=3)
    if fit is not None:
        xs = pd.to_numeric(dataframe[x], errors="coerce").dropna()
        grid = np.linspace(xs.min(), xs.max(), _FIT_LINE_POINTS)
        if isinstance(fit, LinearFit):
            label = f"y = {fit.slope:.3g}x + {fit.intercept:.3g} (R² = {fit.r_squared:.3f})"
        else:
            label = f"{fit.model.name} (pseudo R² = {fit.r_squared:.3f})"
        ax.plot(grid, fit.predict(grid), color="tab:blue", label=label)
        ax.legend(frameon=False)
    ax.set_xlabel(xlabel or x)
    ax.set_ylabel(ylabel or y)
    if title:
        ax.set_title(title)
    return ax


def residual_plot(
    fit: LinearFit | NonlinearFit, dataframe: pd.DataFrame, ax: Axes | None = None
) -> Axes:
    """Plot residuals against fitted values with a zero reference line."""
    augmented = augment(fit, dataframe)
    ax = _axes(ax)
    ax.axhline(0.0, color="grey", linestyle="--", linewidth=1)
    ax.scatter(augmented["fitted"], augmented["residual"], color="black", s=20)
    ax.set_xlabel("Fitted values")
    ax.set_ylabel("Residuals")
    return ax


def line_by_group(
    dataframe: pd.DataFrame,
    x: str,
    y: str,
    group: str,
    ax: Axes | None = None,
    markers: bool = True,
) -> Axes:
    """Draw one line per group of long-format data (e.g. one per site)."""
    require_columns(dataframe, [x, y, group])
    ax = _axes(ax, figsize=(7.0, 4.0))
    for name, subset in dataframe.groupby(group, sort=True):
        subset = subset.sort_values(x)
        ax.plot(subset[x], subset[y], marker="o" if markers else None, label=str(name))
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.legend(title=group, frameon=False)
    return ax


def save_figure(
    figure: Figure | Axes, path: Path | str, dpi: int = DEFAULT_FIGURE_DPI
) -> Path:
    """Save ``figure`` (or the figure owning an ``Axes``) and close it.

    Parent directories are created. Returns the written path.
    """
    fig = figure.figure if isinstance(figure, Axes) else figure
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.debug("Saved figure %s", path)
    return path
