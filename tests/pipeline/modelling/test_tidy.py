"""Tests for tidy, glance and augment summaries."""

import numpy as np
import pandas as pd
import pytest

from py4envchem.exceptions import MissingColumnError
from py4envchem.pipeline.modelling.linear import fit_linear
from py4envchem.pipeline.modelling.nonlinear import fit_nonlinear
from py4envchem.pipeline.modelling.tidy import augment, glance, tidy


@pytest.fixture
def line_data():
    """Fixture: noisy straight line."""
    return pd.DataFrame(
        {"x": [1.0, 2.0, 3.0, 4.0, 5.0], "y": [2.1, 3.9, 6.2, 7.8, 10.1]}
    )


@pytest.fixture
def decay_fit():
    """Fixture: exponential decay fit with small scatter."""
    t = np.array([0.0, 5.0, 10.0, 20.0, 30.0, 40.0])
    noise = np.array([0.5, -0.4, 0.3, -0.2, 0.1, -0.1])
    df = pd.DataFrame({"t": t, "c": 80.0 * np.exp(-0.04 * t) + noise})
    return fit_nonlinear(df, "t", "c", "exponential_decay")


def test_tidy_linear(line_data):
    """Test Tidy linear."""
    table = tidy(fit_linear(line_data, "x", "y"))
    assert list(table.columns) == ["term", "estimate", "std_error", "statistic", "p_value"]
    assert table["term"].tolist() == ["intercept", "x"]
    assert table.loc[1, "estimate"] == pytest.approx(1.99, abs=0.01)
    assert table.loc[1, "p_value"] < 0.001


def test_tidy_nonlinear(decay_fit):
    """Test Tidy nonlinear."""
    table = tidy(decay_fit)
    assert table["term"].tolist() == ["c0", "k"]
    assert (table["p_value"] < 0.001).all()
    assert table.loc[1, "statistic"] == pytest.approx(
        table.loc[1, "estimate"] / table.loc[1, "std_error"]
    )


def test_glance_linear(line_data):
    """Test Glance linear."""
    row = glance(fit_linear(line_data, "x", "y"))
    assert len(row) == 1
    assert row.loc[0, "nobs"] == 5
    assert row.loc[0, "df_residual"] == 3
    assert 0.99 < row.loc[0, "r_squared"] <= 1.0


def test_glance_nonlinear(decay_fit):
    """Test Glance nonlinear."""
    row = glance(decay_fit)
    assert row.loc[0, "model"] == "exponential_decay"
    assert row.loc[0, "df_residual"] == 4
    assert row.loc[0, "rss"] > 0


def test_augment_adds_fitted_and_residual(line_data):
    """Test Augment adds fitted and residual."""
    fit = fit_linear(line_data, "x", "y")
    out = augment(fit, line_data)
    assert list(out.columns) == ["x", "y", "fitted", "residual"]
    np.testing.assert_allclose(out["fitted"] + out["residual"], line_data["y"])
    assert "fitted" not in line_data.columns


def test_augment_missing_column(line_data):
    """Test Augment missing column."""
    fit = fit_linear(line_data, "x", "y")
    with pytest.raises(MissingColumnError):
        augment(fit, line_data.drop(columns="y"))
