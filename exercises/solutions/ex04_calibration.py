"""Reference solution for exercise 4."""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.modelling import fit_calibration_curve, predict_concentration

standards = load_dataset("calibration_standards")
samples = load_dataset("unknown_samples")

calibration = fit_calibration_curve(standards)
predicted = predict_concentration(calibration, samples["signal"])
well_1_mg_l = float(predicted[0])
print(f"well-1: {well_1_mg_l:.2f} mg/L")
