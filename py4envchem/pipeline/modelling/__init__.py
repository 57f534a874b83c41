"""Regression helpers: linear and calibration fits, non-linear models, tidy summaries."""

from .linear import (
    LinearFit,
    detection_limits,
    fit_calibration_curve,
    fit_linear,
    predict_concentration,
)
from .nonlinear import MODELS, NonlinearFit, fit_nonlinear, get_model
from .tidy import augment, glance, tidy

__all__ = [
    "MODELS",
    "LinearFit",
    "NonlinearFit",
    "augment",
    "detection_limits",
    "fit_calibration_curve",
    "fit_linear",
    "fit_nonlinear",
    "get_model",
    "glance",
    "predict_concentration",
    "tidy",
]
