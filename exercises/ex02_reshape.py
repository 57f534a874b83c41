"""Exercise 2: from wide to long.

Stack the four metal columns of ``metals`` into ``metals_long`` with the
metal names in a ``metal`` column and the concentrations in
``conc_ug_l``.
"""

from py4envchem.pipeline.data_import import load_dataset, pivot_longer  # noqa: F401

metals = load_dataset("lake_metals")
metal_columns = ["cu_ug_l", "zn_ug_l", "pb_ug_l", "cd_ug_l"]

metals_long = metals  # reshape me
