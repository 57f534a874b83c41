"""Exercise 4: calibration and inverse prediction.

Fit ``calibration`` to the standards, predict the concentrations of the
well samples as ``predicted`` and store the first one (``well-1``) in
``well_1_mg_l``.
"""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.modelling import fit_calibration_curve, predict_concentration  # noqa: F401

standards = load_dataset("calibration_standards")
samples = load_dataset("unknown_samples")

calibration = None
predicted = None
well_1_mg_l = None
