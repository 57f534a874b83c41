"""Exercise 3: grouped summaries.

Compute ``zinc_by_lake``: one row per lake with the mean zinc
concentration in a column called ``mean_zn_ug_l``.
"""

from py4envchem.pipeline.data_import import load_dataset, summarize  # noqa: F401

metals = load_dataset("lake_metals")

zinc_by_lake = None  # summarise metals by lake
