"""Exercise 6: a saved scatter plot.

Plot ``cu_ug_l`` against ``depth_m`` for the lake metal data, keep the
axes as ``ax`` and save the figure as ``copper_depth.png`` next to this
script.
"""

from py4envchem.pipeline.data_import import load_dataset
from py4envchem.pipeline.plotting import save_figure, scatter_with_fit  # noqa: F401

metals = load_dataset("lake_metals")

ax = None
