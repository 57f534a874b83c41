"""Exercise 5: first-order degradation.

Fit an exponential decay to ``pesticide_degradation`` as ``decay`` and
store the half-life in days as ``half_life_days``.
"""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.modelling import fit_nonlinear  # noqa: F401

degradation = load_dataset("pesticide_degradation")

decay = None
half_life_days = None
