"""Exercise 1: read the lake metal survey.

Load ``lake_metals`` (use ``load_dataset`` or ``read_delimited``) and
store it in a variable called ``metals``.
"""

from py4envchem.pipeline.data_import import load_dataset  # noqa: F401

metals = None  # replace with the lake metal data
