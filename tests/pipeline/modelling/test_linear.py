"""Tests for linear and calibration regression."""

from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from py4envchem.exceptions import MissingColumnError, ModelFitError
from py4envchem.pipeline.modelling.linear import (
    LinearFit,
    detection_limits,
    fit_calibration_curve,
    fit_linear,
    predict_concentration,
)


@pytest.fixture
def standards():
    """Fixture: calibration standards with small scatter."""
    conc = np.array([0.0, 0.5, 1.0, 2.0, 4.0, 8.0])
    noise = np.array([0.002, -0.001, 0.001, -0.002, 0.001, -0.001])
    return pd.DataFrame({"concentration": conc, "signal": 0.01 + 0.05 * conc + noise})


def test_fit_linear_recovers_exact_line():
    """Test Fit linear recovers exact line."""
    df = pd.DataFrame({"x": [0.0, 1.0, 2.0, 3.0], "y": [1.0, 3.0, 5.0, 7.0]})
    fit = fit_linear(df, "x", "y")
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)
    assert fit.r_squared == pytest.approx(1.0)
    assert fit.n == 4
    assert not fit.weighted


def test_fit_linear_drops_incomplete_rows():
    """Test Fit linear drops incomplete rows."""
    df = pd.DataFrame(
        {"x": [0.0, 1.0, 2.0, None, 4.0], "y": [0.0, 2.0, 4.0, 6.0, "bad"]}
    )
    fit = fit_linear(df, "x", "y")
    assert fit.n == 3
    assert fit.slope == pytest.approx(2.0)


def test_fit_linear_requires_three_rows():
    """Test Fit linear requires three rows."""
    df = pd.DataFrame({"x": [1.0, 2.0], "y": [1.0, 2.0]})
    with pytest.raises(ModelFitError):
        fit_linear(df, "x", "y")


def test_fit_linear_rejects_constant_predictor():
    """Test Fit linear rejects constant predictor."""
    df = pd.DataFrame({"x": [1.0, 1.0, 1.0], "y": [1.0, 2.0, 3.0]})
    with pytest.raises(ModelFitError, match="constant"):
        fit_linear(df, "x", "y")


def test_fit_linear_missing_column():
    """Test Fit linear missing column."""
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0]})
    with pytest.raises(MissingColumnError):
        fit_linear(df, "x", "y")


def test_weighted_fit(standards):
    """Test Weighted fit."""
    data = standards.assign(w=1.0 / (1.0 + standards["concentration"]))
    fit = fit_linear(data, "concentration", "signal", weights="w")
    assert fit.weighted
    assert fit.slope == pytest.approx(0.05, abs=0.002)


def test_calibration_significance_and_prediction(standards):
    """Test Calibration significance and prediction."""
    fit = fit_calibration_curve(standards)
    assert fit.is_significant(alpha=0.001)
    assert predict_concentration(fit, 0.01 + 0.05 * 3.0) == pytest.approx(3.0, abs=0.05)
    values = predict_concentration(fit, [0.06, 0.21])
    assert isinstance(values, np.ndarray)
    assert values.shape == (2,)
    assert isinstance(fit.predict([1.0, 2.0]), np.ndarray)


def test_predict_concentration_scalar_is_float(standards):
    """Test Predict concentration scalar is float."""
    fit = fit_calibration_curve(standards)
    assert isinstance(predict_concentration(fit, 0.2), float)


def test_detection_limits_ratio(standards):
    """Test Detection limits ratio."""
    fit = fit_calibration_curve(standards)
    lod, loq = detection_limits(fit)
    assert 0 < lod < loq
    assert loq / lod == pytest.approx(10.0 / 3.3)
    assert lod == pytest.approx(3.3 * fit.residual_std_error / fit.slope)


def test_zero_slope_cannot_be_inverted():
    """Test Zero slope cannot be inverted."""
    results = SimpleNamespace(params={"const": 0.5, "concentration": 0.0})
    fit = LinearFit(x="concentration", y="signal", results=results)
    with pytest.raises(ModelFitError):
        predict_concentration(fit, 0.5)
    with pytest.raises(ModelFitError):
        detection_limits(fit)


def test_bundled_calibration_matches_chapter_values():
    """Test Bundled calibration matches chapter values."""
    from py4envchem.pipeline.data_import import load_dataset

    fit = fit_calibration_curve(load_dataset("calibration_standards"))
    assert fit.slope == pytest.approx(0.0486, abs=0.002)
    assert fit.r_squared > 0.99
