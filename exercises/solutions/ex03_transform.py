"""Reference solution for exercise 3."""

from py4envchem.pipeline.data_import import load_dataset, summarize

metals = load_dataset("lake_metals")

zinc_by_lake = summarize(metals, by="lake", mean_zn_ug_l=("zn_ug_l", "mean"))
