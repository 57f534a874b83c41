"""Reference solution for exercise 6."""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.plotting import save_figure, scatter_with_fit

metals = load_dataset("lake_metals")

ax = scatter_with_fit(metals, "depth_m", "cu_ug_l", xlabel="Depth (m)", ylabel="Cu (µg/L)")
save_figure(ax, "copper_depth.png")
