"""Reference solution for exercise 5."""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.modelling import fit_nonlinear

degradation = load_dataset("pesticide_degradation")

decay = fit_nonlinear(degradation, "day", "conc_ug_kg", "exponential_decay")
half_life_days = decay.half_life()
