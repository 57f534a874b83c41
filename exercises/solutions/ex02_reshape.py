"""Reference solution for exercise 2."""

from py4envchem.pipeline.data_import import load_dataset, pivot_longer

metals = load_dataset("lake_metals")
metal_columns = ["cu_ug_l", "zn_ug_l", "pb_ug_l", "cd_ug_l"]

metals_long = pivot_longer(metals, metal_columns, names_to="metal", values_to="conc_ug_l")
