"""Reference solution for exercise 1."""

from py4envchem.pipeline.data_import import load_dataset

metals = load_dataset("lake_metals")
