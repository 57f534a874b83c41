"""Data import, reshaping and transformation helpers.

A consumer (a chapter, an exercise solution or a notebook) should import
from this package rather than reaching into submodules.
"""

from .loader import clean_names, list_datasets, load_dataset, read_delimited
from .reshape import pivot_longer, pivot_wider, require_columns, separate
from .verbs import arrange, filter_rows, mutate, rename, select, summarize

__all__ = [
    "arrange",
    "clean_names",
    "filter_rows",
    "list_datasets",
    "load_dataset",
    "mutate",
    "pivot_longer",
    "pivot_wider",
    "read_delimited",
    "rename",
    "require_columns",
    "select",
    "separate",
    "summarize",
]
